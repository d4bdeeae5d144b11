"""Registry resolving each record type's index binding exactly once."""

from typing import TypeVar

import structlog

from searchable.engine.client import IndexClient
from searchable.index.binder import Searchable
from searchable.index.options import IndexOptions
from searchable.store.base import RecordStore
from searchable.store.records import Record

logger = structlog.get_logger()

R = TypeVar("R", bound=Record)


class SearchableRegistry:
    """Record types made searchable against one engine and one store.

    Attributes:
        client: Engine client shared by every binding.
        store: Record store shared by every binding.
    """

    def __init__(self, client: IndexClient, store: RecordStore) -> None:
        """Initialize an empty registry.

        Args:
            client: Engine client.
            store: Record store the registered types live in.
        """
        self.client = client
        self.store = store
        self._by_model: dict[type[Record], Searchable[Record]] = {}
        self._by_type: dict[str, Searchable[Record]] = {}

    def register(
        self, model: type[R], options: IndexOptions | None = None
    ) -> Searchable[R]:
        """Make a record type searchable and subscribe it to the store.

        Args:
            model: Record class to index.
            options: Index configuration, defaults when None.

        Returns:
            The binding for the type.

        Raises:
            ValueError: If the type, or its document type name, is already registered.
        """
        options = options or IndexOptions()
        if model in self._by_model:
            raise ValueError(f"{model.__name__} is already searchable")
        searchable: Searchable[R] = Searchable(model, options, self.client, self.store)
        if searchable.type_name in self._by_type:
            raise ValueError(
                f"Document type {searchable.type_name!r} is already registered"
            )

        searchable.bind()
        self._by_model[model] = searchable  # type: ignore[assignment]
        self._by_type[searchable.type_name] = searchable  # type: ignore[assignment]
        logger.info(
            "searchable_registered",
            model=model.__name__,
            type=searchable.type_name,
        )
        return searchable

    def get(self, model: type[R]) -> Searchable[R]:
        """Return the binding of a registered record class.

        Raises:
            KeyError: If the class is not registered.
        """
        return self._by_model[model]  # type: ignore[return-value]

    def for_type(self, type_name: str) -> Searchable[Record] | None:
        """Look up a binding by document type name."""
        return self._by_type.get(type_name)

    @property
    def type_names(self) -> list[str]:
        """Registered document type names, in registration order."""
        return list(self._by_type)
