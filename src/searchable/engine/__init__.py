"""Search engine REST client."""

from searchable.engine.client import EngineError, IndexClient

__all__ = [
    "EngineError",
    "IndexClient",
]
