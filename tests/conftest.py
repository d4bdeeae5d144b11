"""Pytest configuration and fixtures."""

import sys
from collections.abc import Iterator
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import httpx
import pytest

from fake_engine import FakeEngine
from searchable.config import set_default_index
from searchable.engine.client import IndexClient
from searchable.index.registry import SearchableRegistry
from searchable.store.sqlite import SqliteRecordStore


@pytest.fixture(autouse=True)
def reset_default_index() -> Iterator[None]:
    """Start and finish every test on the built-in default index."""
    set_default_index(None)
    yield
    set_default_index(None)


@pytest.fixture
def engine() -> FakeEngine:
    """Create an empty in-memory engine."""
    return FakeEngine()


@pytest.fixture
def client(engine: FakeEngine) -> Iterator[IndexClient]:
    """Create an index client wired to the fake engine."""
    http = httpx.Client(
        base_url="http://engine.test",
        transport=httpx.MockTransport(engine.handle),
    )
    index_client = IndexClient(client=http)
    yield index_client
    index_client.close()


@pytest.fixture
def store() -> Iterator[SqliteRecordStore]:
    """Create a private in-memory record store."""
    record_store = SqliteRecordStore(":memory:")
    yield record_store
    record_store.close()


@pytest.fixture
def registry(client: IndexClient, store: SqliteRecordStore) -> SearchableRegistry:
    """Create an empty registry over the fake engine and the store."""
    return SearchableRegistry(client, store)
