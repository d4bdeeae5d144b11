"""Paginated full-text search endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from searchable.index.registry import SearchableRegistry

router = APIRouter(tags=["search"])


class SearchPageResponse(BaseModel):
    """Paginated search response envelope.

    Attributes:
        query: The original search query string.
        document_type: Document type that was searched.
        items: Hydrated records of the page.
        current_page: 1-based page number.
        per_page: Effective page size after clamping.
        total_entries: Total number of matching documents.
        total_pages: Number of pages for all matches.
        previous_page: Previous page number, null on the first page.
        next_page: Next page number, null on the last page.
    """

    query: str
    document_type: str
    items: list[dict[str, Any]]
    current_page: int
    per_page: int
    total_entries: int
    total_pages: int
    previous_page: int | None = None
    next_page: int | None = Field(default=None, description="Null on the last page")


@router.get(
    "/search/{document_type}",
    response_model=SearchPageResponse,
    summary="Full-text search within one document type",
    description="Runs a query string search and hydrates hits from the record store.",
)
def search(
    request: Request,
    document_type: str,
    q: str = Query(
        ...,
        min_length=1,
        max_length=200,
        description="Search query string",
    ),
    page: int = Query(default=1, ge=1, description="1-based page number"),
    per_page: int | None = Query(
        default=None, ge=1, description="Results per page, clamped to the type maximum"
    ),
    sort: str | None = Query(
        default=None,
        pattern=r"^[\w.]+(:(asc|desc))?$",
        description="Sort field with optional :asc/:desc suffix",
    ),
) -> SearchPageResponse:
    """Search one document type.

    Args:
        request: FastAPI request (provides access to app state).
        document_type: Registered document type name.
        q: Search query string (1-200 characters).
        page: Page number (default 1).
        per_page: Page size (type default when omitted).
        sort: Optional sort specification.

    Returns:
        The requested page with pagination metadata.
    """
    registry: SearchableRegistry = request.app.state.registry
    searchable = registry.for_type(document_type)
    if searchable is None:
        raise HTTPException(status_code=404, detail=f"Unknown type: {document_type}")

    results = searchable.search(q, page=page, per_page=per_page, sort=sort)
    return SearchPageResponse(
        query=q,
        document_type=document_type,
        items=[record.model_dump(mode="json") for record in results],
        current_page=results.current_page,
        per_page=results.per_page,
        total_entries=results.total_entries,
        total_pages=results.total_pages,
        previous_page=results.previous_page,
        next_page=results.next_page,
    )
