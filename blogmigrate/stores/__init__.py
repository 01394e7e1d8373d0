"""
Store access for the migration engine.
"""
from .base import BlogStore, RecordCollection
from .sql import SqlRecordCollection, open_sql_store

__all__ = [
    "BlogStore",
    "RecordCollection",
    "SqlRecordCollection",
    "open_sql_store",
]
