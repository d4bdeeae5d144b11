"""Relational record store collaborator."""

from searchable.store.base import RecordStore
from searchable.store.events import LifecycleHooks, RecordEvent
from searchable.store.records import Record
from searchable.store.sqlite import SqliteRecordStore

__all__ = [
    "LifecycleHooks",
    "Record",
    "RecordEvent",
    "RecordStore",
    "SqliteRecordStore",
]
