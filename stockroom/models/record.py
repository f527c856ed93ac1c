from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String

from stockroom.database.base import Base


class CollectionRecord(Base):
    __tablename__ = "collection_records"

    id = Column(Integer, primary_key=True)
    collection = Column(String, nullable=False)
    position = Column(Integer, nullable=False)
    payload = Column(JSON, nullable=True)

    __table_args__ = (
        Index("idx_collection_position", "collection", "position"),
    )


class CollectionState(Base):
    __tablename__ = "collection_state"

    name = Column(String, primary_key=True)
    saved_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


__all__ = ["CollectionRecord", "CollectionState"]
