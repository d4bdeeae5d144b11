"""Per-record-type index configuration."""

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from searchable.store.records import Record

Predicate = Callable[[Any], bool]
IndexCallback = Callable[[Any], None]
PercolateCallback = Callable[[Any, list[str]], None]


def _freeze(value: Any) -> Any:
    """Copy nested dicts and lists into read-only mappings and tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list | tuple):
        return tuple(_freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Build a plain, JSON-serializable copy of a frozen value."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


class IndexOptions(BaseModel):
    """Immutable indexing configuration for one record type.

    ``index_settings`` and ``mapping`` are copied on construction and held
    as read-only views, so neither the caller's dicts nor later writes
    through the options can change them.

    Attributes:
        index: Target index, None to use the process default.
        document_type: Document type name, None to use the record's own.
        index_settings: Settings sent when the index is created,
            e.g. ``{"analysis.analyzer.default.tokenizer": "standard"}``.
        mapping: Field mapping installed for the document type.
        only: Serialize only these fields.
        exclude: Serialize every field except these.
        condition: Predicate deciding whether an instance is indexed at all.
        after_index: Called with the record after every successful index.
        after_index_on_create: Called with the record after indexing on create.
        on_percolated: Called with the record and its matched filter names.
        per_page: Default search page size.
        max_per_page: Upper bound for the search page size, None for none.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    index: str | None = None
    document_type: str | None = None
    index_settings: Mapping[str, Any] | None = None
    mapping: Mapping[str, Any] | None = None
    only: tuple[str, ...] | None = None
    exclude: tuple[str, ...] | None = None
    condition: Predicate | None = None
    after_index: IndexCallback | None = None
    after_index_on_create: IndexCallback | None = None
    on_percolated: PercolateCallback | None = None
    per_page: int = Field(default=20, ge=1)
    max_per_page: int | None = Field(default=None, ge=1)

    @field_validator("only", "exclude", mode="before")
    @classmethod
    def _coerce_fields(cls, v: Any) -> Any:
        """Accept any iterable of field names, or a single name."""
        if v is None or isinstance(v, tuple):
            return v
        if isinstance(v, str):
            return (v,)
        return tuple(v)

    @field_validator("index_settings", "mapping", mode="after")
    @classmethod
    def _freeze_bodies(cls, v: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
        return None if v is None else _freeze(v)

    @property
    def percolate(self) -> bool:
        """Whether records are percolated after indexing."""
        return self.on_percolated is not None

    def settings_body(self) -> dict[str, Any]:
        """Index settings as a fresh request body."""
        return thaw(self.index_settings) if self.index_settings else {}

    def mapping_body(self) -> dict[str, Any]:
        """Field mapping as a fresh request body."""
        return thaw(self.mapping) if self.mapping else {}

    def type_name(self, model: type[Record]) -> str:
        """Resolve the document type for a record class."""
        return self.document_type or model.document_type()
