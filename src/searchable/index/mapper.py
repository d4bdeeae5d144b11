"""Conversion of records into index document bodies."""

from typing import Any

from searchable.index.options import IndexOptions
from searchable.store.records import Record


def to_index_body(record: Record, options: IndexOptions) -> dict[str, Any]:
    """Build the document sent to the engine for a record.

    Every attribute is serialized unless the options narrow it down. When
    both ``only`` and ``exclude`` are configured, ``only`` wins and
    ``exclude`` is ignored.

    Args:
        record: Record to serialize, saved or not.
        options: Index configuration of the record's type.

    Returns:
        Mapping of field name to JSON-compatible value.
    """
    if options.only is not None:
        return record.model_dump(mode="json", include=set(options.only))
    if options.exclude is not None:
        return record.model_dump(mode="json", exclude=set(options.exclude))
    return record.model_dump(mode="json")
