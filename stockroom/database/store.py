"""Named-collection record store on top of SQLAlchemy.

Each collection is an ordered list of JSON values. ``load`` returns a fresh
copy of the whole collection and ``save`` overwrites it in one transaction.
Mutations go through ``edit``/``locked`` so the read-modify-write cycle of a
collection is serialized inside the process.
"""

from __future__ import annotations

import logging
import threading
from contextlib import ExitStack, contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from stockroom.core.errors import StorageFailureError
from stockroom.database.base import Base
from stockroom.models.record import CollectionRecord, CollectionState

logger = logging.getLogger(__name__)


class RecordStore:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=engine,
        )
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            logger.exception("Unable to create record store schema")
            raise StorageFailureError("Failed to initialize storage") from exc

    def _lock_for(self, name: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = threading.RLock()
                self._locks[name] = lock
            return lock

    @contextmanager
    def locked(self, *names: str) -> Iterator[None]:
        # Sorted acquisition keeps multi-collection callers deadlock free.
        with ExitStack() as stack:
            for name in sorted(set(names)):
                stack.enter_context(self._lock_for(name))
            yield

    def load(self, name: str) -> list[Any]:
        db = self._session_factory()
        try:
            rows = (
                db.execute(
                    select(CollectionRecord.payload)
                    .where(CollectionRecord.collection == name)
                    .order_by(CollectionRecord.position)
                )
                .scalars()
                .all()
            )
        except SQLAlchemyError as exc:
            logger.exception("Failed to load collection %s", name)
            raise StorageFailureError(f"Failed to load {name}") from exc
        finally:
            db.close()
        return list(rows)

    def save(self, name: str, records: list[Any]) -> None:
        db = self._session_factory()
        try:
            db.execute(delete(CollectionRecord).where(CollectionRecord.collection == name))
            db.add_all(
                CollectionRecord(collection=name, position=position, payload=record)
                for position, record in enumerate(records)
            )
            state = db.get(CollectionState, name)
            now = datetime.now(timezone.utc)
            if state:
                state.saved_at = now
            else:
                db.add(CollectionState(name=name, saved_at=now))
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to save collection %s", name)
            raise StorageFailureError(f"Failed to save {name}") from exc
        finally:
            db.close()

    def is_initialized(self, name: str) -> bool:
        db = self._session_factory()
        try:
            return db.get(CollectionState, name) is not None
        except SQLAlchemyError as exc:
            logger.exception("Failed to inspect collection %s", name)
            raise StorageFailureError(f"Failed to load {name}") from exc
        finally:
            db.close()

    @contextmanager
    def edit(self, name: str) -> Iterator[list[Any]]:
        """Yield the loaded collection and save it back if the block succeeds."""
        with self.locked(name):
            records = self.load(name)
            yield records
            self.save(name, records)

    def seed(self, name: str, records: list[Any]) -> bool:
        with self.locked(name):
            if self.is_initialized(name):
                return False
            self.save(name, records)
            logger.info("Seeded %s with %d records", name, len(records))
            return True


__all__ = ["RecordStore"]
