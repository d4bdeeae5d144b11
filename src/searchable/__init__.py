"""Keeps a relational record store and a full-text search index in step."""

from searchable.config import (
    DEFAULT_INDEX,
    Settings,
    get_default_index,
    set_default_index,
)
from searchable.engine import EngineError, IndexClient
from searchable.index import (
    IndexOptions,
    SearchPage,
    Searchable,
    SearchableRegistry,
    to_index_body,
)
from searchable.store import Record, RecordEvent, RecordStore, SqliteRecordStore

__all__ = [
    "DEFAULT_INDEX",
    "EngineError",
    "IndexClient",
    "IndexOptions",
    "Record",
    "RecordEvent",
    "RecordStore",
    "SearchPage",
    "Searchable",
    "SearchableRegistry",
    "Settings",
    "SqliteRecordStore",
    "get_default_index",
    "set_default_index",
    "to_index_body",
]
