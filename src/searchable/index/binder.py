"""Binding of a record type to its search index."""

from typing import Any, Generic, TypeVar

import structlog

from searchable.config import get_default_index
from searchable.engine.client import EngineError, IndexClient
from searchable.index import pagination, percolation
from searchable.index.mapper import to_index_body
from searchable.index.options import IndexOptions
from searchable.store.base import RecordStore
from searchable.store.events import RecordEvent
from searchable.store.records import Record

logger = structlog.get_logger()

R = TypeVar("R", bound=Record)


class Searchable(Generic[R]):
    """Keeps the index of one record type in step with the store.

    Reacts to the store's lifecycle events: creates and updates (re)index
    the record when its condition holds, destroys always remove it. Engine
    failures are not caught and fail the store operation that fired them.

    Attributes:
        model: Record class being indexed.
        options: Immutable index configuration of the type.
        client: Engine client used for every request.
        store: Store used to hydrate search hits and reindex.
    """

    def __init__(
        self,
        model: type[R],
        options: IndexOptions,
        client: IndexClient,
        store: RecordStore,
    ) -> None:
        """Initialize the binding without subscribing to the store.

        Args:
            model: Record class being indexed.
            options: Index configuration of the type.
            client: Engine client.
            store: Record store the type lives in.
        """
        self.model = model
        self.options = options
        self.client = client
        self.store = store

    @property
    def index_name(self) -> str:
        """Index the type writes to, falling back to the process default."""
        return self.options.index or get_default_index()

    @property
    def type_name(self) -> str:
        """Document type name within the index."""
        return self.options.type_name(self.model)

    def bind(self) -> None:
        """Subscribe to the store's create, update and destroy events."""
        self.store.subscribe(self.model, RecordEvent.AFTER_CREATE, self.after_create)
        self.store.subscribe(self.model, RecordEvent.AFTER_UPDATE, self.after_update)
        self.store.subscribe(
            self.model, RecordEvent.AFTER_DESTROY, self.after_destroy
        )

    # Index administration

    def create_index(self) -> None:
        """Create the index with the configured settings, then the mapping."""
        self.client.create_index(self.index_name, self.options.settings_body())
        logger.info("index_created", index=self.index_name)
        self.create_mapping()

    def create_mapping(self) -> None:
        """Install the configured field mapping, if any."""
        if not self.options.mapping:
            return
        self.client.put_mapping(
            self.index_name, self.type_name, self.options.mapping_body()
        )
        logger.info("mapping_created", index=self.index_name, type=self.type_name)

    def delete_index(self) -> None:
        """Delete the whole index, including other types stored in it."""
        self.client.delete_index(self.index_name)
        logger.info("index_deleted", index=self.index_name)

    def clean_index(self) -> None:
        """Drop and recreate the index so that it is empty.

        A missing index is not an error here; any other delete failure is.
        """
        try:
            self.delete_index()
        except EngineError as e:
            if e.status_code != 404:
                raise
            logger.debug("index_missing", index=self.index_name)
        self.create_index()

    def refresh_index(self) -> None:
        """Make recent writes searchable."""
        self.client.refresh(self.index_name)

    def reindex_all(self) -> int:
        """Index every stored record of the type, in store order.

        The first failure aborts the run.

        Returns:
            Number of records sent to the engine.
        """
        count = 0
        for record in self.store.iterate(self.model):
            if self.index_record(record):
                count += 1
        logger.info("reindex_completed", type=self.type_name, document_count=count)
        return count

    def delete_id_from_index(self, record_id: Any) -> None:
        """Remove a document by identifier; a missing document raises EngineError."""
        self.client.delete_document(self.index_name, self.type_name, record_id)
        logger.info("document_removed", type=self.type_name, id=record_id)

    # Lifecycle

    def should_index(self, record: R) -> bool:
        """Evaluate the configured indexing condition for a record."""
        condition = self.options.condition
        return condition is None or bool(condition(record))

    def index_record(self, record: R, created: bool = False) -> bool:
        """Send a record to the index and fire the configured callbacks.

        Args:
            record: Persisted record.
            created: Whether this follows the record's creation.

        Returns:
            False if the condition excluded the record, True otherwise.

        Raises:
            ValueError: If the record has no identifier.
            EngineError: If the engine rejects indexing or percolation.
        """
        if not self.should_index(record):
            logger.debug("document_skipped", type=self.type_name, id=record.id)
            return False
        if record.id is None:
            raise ValueError(f"Cannot index unsaved {self.model.__name__}")

        body = to_index_body(record, self.options)
        self.client.put_document(self.index_name, self.type_name, record.id, body)
        logger.info("document_indexed", type=self.type_name, id=record.id)

        if self.options.after_index is not None:
            self.options.after_index(record)
        if created and self.options.after_index_on_create is not None:
            self.options.after_index_on_create(record)

        if self.options.percolate:
            matches = percolation.percolate(self, body)
            if matches:
                self.options.on_percolated(record, matches)
        return True

    def after_create(self, record: R) -> None:
        """Store hook: index a newly created record."""
        self.index_record(record, created=True)

    def after_update(self, record: R) -> None:
        """Store hook: reindex an updated record."""
        self.index_record(record)

    def after_destroy(self, record: R) -> None:
        """Store hook: remove a destroyed record, regardless of its condition."""
        self.delete_id_from_index(record.id)

    # Queries

    def search(
        self,
        query: str | dict[str, Any],
        page: int = 1,
        per_page: int | None = None,
        sort: str | None = None,
    ) -> pagination.SearchPage[R]:
        """Search the type's documents; see pagination.search."""
        return pagination.search(self, query, page=page, per_page=per_page, sort=sort)

    def percolate(self, record: R) -> list[str]:
        """Match a record, saved or not, against the registered filters."""
        return percolation.percolate(self, to_index_body(record, self.options))
