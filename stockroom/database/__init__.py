from stockroom.database.base import Base
from stockroom.database.engine import create_db_engine
from stockroom.database.store import RecordStore

__all__ = ["Base", "RecordStore", "create_db_engine"]
