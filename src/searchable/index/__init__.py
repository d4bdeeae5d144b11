"""Index synchronization, search pagination and percolation."""

from searchable.index.binder import Searchable
from searchable.index.mapper import to_index_body
from searchable.index.options import IndexOptions
from searchable.index.pagination import SearchPage
from searchable.index.registry import SearchableRegistry

__all__ = [
    "IndexOptions",
    "SearchPage",
    "Searchable",
    "SearchableRegistry",
    "to_index_body",
]
