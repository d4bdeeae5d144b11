"""Interface the indexing layer expects from a relational store."""

from collections.abc import Iterable, Iterator
from typing import Any, Protocol, TypeVar

from searchable.store.events import Handler, RecordEvent
from searchable.store.records import Record

R = TypeVar("R", bound=Record)


class RecordStore(Protocol):
    """Relational store collaborator.

    Supplies lifecycle hooks, bulk lookup for hydrating search hits, and
    full iteration for reindexing.
    """

    def subscribe(
        self, model: type[Record], event: RecordEvent, handler: Handler
    ) -> None:
        """Register a lifecycle handler for a record class."""
        ...

    def find_many(self, model: type[R], ids: Iterable[Any]) -> list[R]:
        """Return the records matching ``ids``; missing ids are omitted."""
        ...

    def iterate(self, model: type[R]) -> Iterator[R]:
        """Yield every record of a class in identifier order."""
        ...
