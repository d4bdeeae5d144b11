"""Admin endpoints for index maintenance."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

if TYPE_CHECKING:
    from searchable.index.binder import Searchable
    from searchable.store.records import Record

logger = structlog.get_logger()

router = APIRouter(prefix="/admin", tags=["admin"])


class MaintenanceResponse(BaseModel):
    """Response after an index maintenance operation.

    Attributes:
        success: Always true; failures are reported as errors.
        document_type: Document type the operation applied to.
        index: Index the operation applied to.
        document_count: Records indexed, for reindex runs only.
    """

    success: bool
    document_type: str
    index: str
    document_count: int | None = None


def _searchable(request: Request, document_type: str) -> Searchable[Record]:
    searchable = request.app.state.registry.for_type(document_type)
    if searchable is None:
        raise HTTPException(status_code=404, detail=f"Unknown type: {document_type}")
    return searchable


@router.post("/{document_type}/reindex", response_model=MaintenanceResponse)
def reindex(request: Request, document_type: str) -> MaintenanceResponse:
    """Send every stored record of a type to the index."""
    searchable = _searchable(request, document_type)
    count = searchable.reindex_all()
    logger.info("admin_reindex", type=document_type, document_count=count)
    return MaintenanceResponse(
        success=True,
        document_type=document_type,
        index=searchable.index_name,
        document_count=count,
    )


@router.post("/{document_type}/clean", response_model=MaintenanceResponse)
def clean(request: Request, document_type: str) -> MaintenanceResponse:
    """Drop and recreate the type's index.

    Every other type sharing the index is emptied as well.
    """
    searchable = _searchable(request, document_type)
    searchable.clean_index()
    logger.info("admin_clean_index", type=document_type, index=searchable.index_name)
    return MaintenanceResponse(
        success=True, document_type=document_type, index=searchable.index_name
    )


@router.post("/{document_type}/refresh", response_model=MaintenanceResponse)
def refresh(request: Request, document_type: str) -> MaintenanceResponse:
    """Make recent writes to the type's index searchable."""
    searchable = _searchable(request, document_type)
    searchable.refresh_index()
    return MaintenanceResponse(
        success=True, document_type=document_type, index=searchable.index_name
    )
