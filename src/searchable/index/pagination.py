"""Paginated search over the index, hydrated from the record store."""

from __future__ import annotations

import math
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

import structlog

from searchable.store.records import Record

if TYPE_CHECKING:
    from searchable.index.binder import Searchable

logger = structlog.get_logger()

R = TypeVar("R", bound=Record)


class SearchPage(Generic[R]):
    """One page of search results.

    Behaves as a read-only sequence of hydrated records.

    Attributes:
        items: Records of this page, in engine order.
        current_page: 1-based page number.
        per_page: Page size used for the request.
        total_entries: Total number of matches reported by the engine.
        hit_count: Number of hits the engine returned for this page,
            which can exceed ``len(items)`` when records went missing.
    """

    def __init__(
        self,
        items: list[R],
        current_page: int,
        per_page: int,
        total_entries: int,
        hit_count: int | None = None,
    ) -> None:
        """Initialize search page.

        Args:
            items: Hydrated records.
            current_page: 1-based page number.
            per_page: Page size.
            total_entries: Engine total match count.
            hit_count: Hits returned for the page, defaults to ``len(items)``.
        """
        self.items = items
        self.current_page = current_page
        self.per_page = per_page
        self.total_entries = total_entries
        self.hit_count = len(items) if hit_count is None else hit_count

    @property
    def offset(self) -> int:
        """Index of the first hit of this page within the full result set."""
        return (self.current_page - 1) * self.per_page

    @property
    def previous_page(self) -> int | None:
        """Previous page number, None on the first page."""
        return self.current_page - 1 if self.current_page > 1 else None

    @property
    def next_page(self) -> int | None:
        """Next page number, None on the last page."""
        if self.offset + self.hit_count < self.total_entries:
            return self.current_page + 1
        return None

    @property
    def total_pages(self) -> int:
        """Number of pages needed for every match."""
        return math.ceil(self.total_entries / self.per_page)

    def __iter__(self) -> Iterator[R]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @overload
    def __getitem__(self, index: int) -> R: ...

    @overload
    def __getitem__(self, index: slice) -> list[R]: ...

    def __getitem__(self, index: int | slice) -> R | list[R]:
        return self.items[index]

    def __repr__(self) -> str:
        return (
            f"SearchPage(page={self.current_page}, per_page={self.per_page}, "
            f"total_entries={self.total_entries}, items={self.items!r})"
        )


def resolve_per_page(searchable: Searchable, per_page: int | None) -> int:
    """Apply the type's default and maximum to a requested page size.

    Args:
        searchable: Binding of the searched record type.
        per_page: Requested size, None for the type's default.

    Returns:
        Effective page size.
    """
    options = searchable.options
    size = options.per_page if per_page is None else per_page
    if size < 1:
        raise ValueError(f"per_page must be at least 1, got {size}")
    if options.max_per_page is not None:
        size = min(size, options.max_per_page)
    return size


def _build_query(query: str | dict[str, Any]) -> dict[str, Any]:
    if isinstance(query, dict):
        return {"query": query}
    return {"query": {"query_string": {"query": query}}}


def _total(hits: dict[str, Any]) -> int:
    total = hits.get("total", 0)
    # Newer engines report {"value": n, "relation": "eq"}
    if isinstance(total, dict):
        total = total.get("value", 0)
    return int(total)


def search(
    searchable: Searchable[R],
    query: str | dict[str, Any],
    page: int = 1,
    per_page: int | None = None,
    sort: str | None = None,
) -> SearchPage[R]:
    """Run a paginated search and hydrate the hits into records.

    Hits whose records no longer exist in the store are skipped, so a page
    can hold fewer items than its size.

    Args:
        searchable: Binding of the record type to search.
        query: Query string, or a structured query passed through as-is.
        page: 1-based page number.
        per_page: Page size, None for the type's default.
        sort: Sort field with optional ``:asc``/``:desc`` suffix.

    Returns:
        The requested page.

    Raises:
        ValueError: If ``page`` or ``per_page`` is below 1.
        EngineError: If the engine rejects the search.
    """
    if page < 1:
        raise ValueError(f"page must be at least 1, got {page}")
    size = resolve_per_page(searchable, per_page)
    offset = (page - 1) * size

    params: dict[str, Any] = {"from": offset, "size": size}
    if sort:
        params["sort"] = sort

    response = searchable.client.search(
        searchable.index_name, searchable.type_name, _build_query(query), params
    )
    hits = response.get("hits") or {}
    ids = [str(hit["_id"]) for hit in hits.get("hits", [])]
    total = _total(hits)

    found = {
        str(record.id): record
        for record in searchable.store.find_many(searchable.model, ids)
    }
    items: list[R] = []
    for hit_id in ids:
        record = found.get(hit_id)
        if record is None:
            logger.warning(
                "search_hit_missing",
                type=searchable.type_name,
                id=hit_id,
            )
            continue
        items.append(record)

    logger.info(
        "search_executed",
        index=searchable.index_name,
        type=searchable.type_name,
        page=page,
        per_page=size,
        total_entries=total,
        returned=len(items),
    )
    return SearchPage(items, page, size, total, hit_count=len(ids))
