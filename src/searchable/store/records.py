"""Base model for records persisted in the relational store."""

import re
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _pluralize(word: str) -> str:
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return f"{word}es"
    if word.endswith("y") and word[-2:-1] not in "aeiou":
        return f"{word[:-1]}ies"
    return f"{word}s"


class Record(BaseModel):
    """A persisted domain record.

    Subclasses declare their columns as pydantic fields. The document type
    (and table name) defaults to the snake_cased, pluralized class name:
    ``Post`` becomes ``posts``, ``MaxPageSizeClass`` becomes
    ``max_page_size_classes``. Set ``__document_type__`` to override it.

    Attributes:
        id: Store-assigned identifier, None until the record is created.
    """

    model_config = ConfigDict(validate_assignment=True)

    __document_type__: ClassVar[str | None] = None

    id: int | None = Field(default=None, description="Store-assigned identifier")

    @classmethod
    def document_type(cls) -> str:
        """Return the type name shared by the table and the index documents."""
        if cls.__document_type__:
            return cls.__document_type__
        snake = _CAMEL_BOUNDARY.sub("_", cls.__name__).lower()
        return _pluralize(snake)

    @classmethod
    def column_names(cls) -> list[str]:
        """Return stored column names, excluding the identifier."""
        return [name for name in cls.model_fields if name != "id"]

    @property
    def is_persisted(self) -> bool:
        """Whether the store has assigned an identifier."""
        return self.id is not None
