"""Percolation of candidate documents against registered filters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from searchable.index.binder import Searchable

logger = structlog.get_logger()


def percolate(searchable: Searchable, body: dict[str, Any]) -> list[str]:
    """Match a document body against the filters registered for its index.

    Args:
        searchable: Binding of the record type the document belongs to.
        body: Document body, built the same way as for indexing.

    Returns:
        Names of the matching filters, in the order the engine returned them.
    """
    response = searchable.client.percolate(
        searchable.index_name, searchable.type_name, {"doc": body}
    )
    matches = list(response.get("matches") or [])
    logger.debug(
        "document_percolated",
        index=searchable.index_name,
        type=searchable.type_name,
        match_count=len(matches),
    )
    return matches
