"""Lifecycle binder tests: what gets indexed, when, and which callbacks fire."""

import pytest

from fake_engine import FakeEngine
from models import POST_INDEX_SETTINGS, Blog, Friend, Post, User
from searchable.config import set_default_index
from searchable.engine.client import EngineError, IndexClient
from searchable.index.binder import Searchable
from searchable.index.mapper import to_index_body
from searchable.index.options import IndexOptions
from searchable.index.registry import SearchableRegistry
from searchable.store.sqlite import SqliteRecordStore


@pytest.fixture
def indexed() -> list[Post]:
    return []


@pytest.fixture
def indexed_on_create() -> list[Post]:
    return []


@pytest.fixture
def posts(
    registry: SearchableRegistry,
    store: SqliteRecordStore,
    indexed: list[Post],
    indexed_on_create: list[Post],
) -> Searchable[Post]:
    """Register Post with analyzer settings and index callbacks."""
    store.register(Post)
    return registry.register(
        Post,
        IndexOptions(
            index_settings=POST_INDEX_SETTINGS,
            after_index=indexed.append,
            after_index_on_create=indexed_on_create.append,
        ),
    )


def test_create_index_applies_custom_settings(
    posts: Searchable[Post], client: IndexClient
) -> None:
    """Index status reports the analyzer settings under their flattened keys."""
    posts.create_index()
    status = client.index_status("elastic_searchable")
    assert status["ok"]
    assert status["indices"]["elastic_searchable"]["settings"] == {
        "index.number_of_replicas": "1",
        "index.number_of_shards": "5",
        "index.analysis.analyzer.default.tokenizer": "standard",
        "index.analysis.analyzer.default.filter.0": "standard",
        "index.analysis.analyzer.default.filter.1": "lowercase",
        "index.analysis.analyzer.default.filter.2": "porterStem",
    }


def test_create_index_twice_raises(posts: Searchable[Post]) -> None:
    """An existing index is reported by the engine, not hidden."""
    posts.create_index()
    with pytest.raises(EngineError, match="IndexAlreadyExists"):
        posts.create_index()


def test_create_fires_both_callbacks(
    posts: Searchable[Post],
    store: SqliteRecordStore,
    indexed: list[Post],
    indexed_on_create: list[Post],
) -> None:
    """Creating a record fires after_index and after_index_on_create."""
    post = store.create(Post(title="foo", body="bar"))
    assert indexed == [post]
    assert indexed_on_create == [post]


def test_update_fires_only_after_index(
    posts: Searchable[Post],
    store: SqliteRecordStore,
    client: IndexClient,
    indexed: list[Post],
    indexed_on_create: list[Post],
) -> None:
    """Updates reindex the new content without the create callback."""
    post = store.create(Post(title="foo", body="bar"))
    post.body = "changed"
    store.update(post)

    assert len(indexed) == 2
    assert len(indexed_on_create) == 1
    source = client.get_document("elastic_searchable", "posts", post.id)["_source"]
    assert source["body"] == "changed"


def test_indexed_document_equals_mapper_output(
    posts: Searchable[Post], store: SqliteRecordStore, client: IndexClient
) -> None:
    """Fetching an indexed record returns exactly the mapped body."""
    post = store.create(Post(title="foo", body="bar"))
    expected = to_index_body(post, posts.options)
    response = client.get_document("elastic_searchable", "posts", post.id)
    assert response["_source"] == expected


def test_destroy_removes_document(
    posts: Searchable[Post], store: SqliteRecordStore, client: IndexClient
) -> None:
    """Destroying a record deletes its document."""
    post = store.create(Post(title="foo", body="bar"))
    store.destroy(post)
    with pytest.raises(EngineError) as exc_info:
        client.get_document("elastic_searchable", "posts", post.id)
    assert exc_info.value.status_code == 404


def test_update_of_destroyed_record_does_not_reindex(
    posts: Searchable[Post], store: SqliteRecordStore, client: IndexClient
) -> None:
    """Saving a stale instance after destroy neither writes a row nor a document."""
    post = store.create(Post(title="foo", body="bar"))
    store.destroy(post)

    post.title = "stale"
    with pytest.raises(ValueError, match="does not exist"):
        store.update(post)

    assert store.get(Post, post.id) is None
    with pytest.raises(EngineError) as exc_info:
        client.get_document("elastic_searchable", "posts", post.id)
    assert exc_info.value.status_code == 404


def test_delete_id_missing_from_index_raises(posts: Searchable[Post]) -> None:
    """Deleting an identifier that was never indexed is an engine error."""
    posts.create_index()
    with pytest.raises(EngineError):
        posts.delete_id_from_index(123)


def test_false_condition_skips_indexing(
    registry: SearchableRegistry,
    store: SqliteRecordStore,
    engine: FakeEngine,
    client: IndexClient,
) -> None:
    """Records failing the condition are never sent to the engine."""
    store.register(Blog)
    registry.register(Blog, IndexOptions(condition=lambda blog: False))
    client.create_index("elastic_searchable")

    blog = store.create(Blog(title="foo"))

    assert not any(path.startswith("/elastic_searchable/blogs/") for path in engine.paths("PUT"))
    with pytest.raises(EngineError):
        client.get_document("elastic_searchable", "blogs", blog.id)


def test_destroy_ignores_condition(
    registry: SearchableRegistry,
    store: SqliteRecordStore,
    client: IndexClient,
) -> None:
    """A record indexed earlier is removed even if its condition now fails."""
    store.register(Blog)
    registry.register(Blog, IndexOptions(condition=lambda blog: blog.title != "hidden"))

    blog = store.create(Blog(title="foo"))
    blog.title = "hidden"
    store.update(blog)
    # The skipped update leaves the earlier document in place
    assert client.get_document("elastic_searchable", "blogs", blog.id)["_source"]["title"] == "foo"

    store.destroy(blog)
    with pytest.raises(EngineError):
        client.get_document("elastic_searchable", "blogs", blog.id)


def test_destroy_of_never_indexed_record_fails_after_delete(
    registry: SearchableRegistry, store: SqliteRecordStore, client: IndexClient
) -> None:
    """The unconditional delete surfaces the engine's not-found failure."""
    store.register(Blog)
    registry.register(Blog, IndexOptions(condition=lambda blog: False))
    client.create_index("elastic_searchable")
    blog = store.create(Blog(title="foo"))

    with pytest.raises(EngineError):
        store.destroy(blog)
    assert store.get(Blog, blog.id) is None


def test_index_failure_fails_create(
    posts: Searchable[Post],
    store: SqliteRecordStore,
    engine: FakeEngine,
    indexed: list[Post],
) -> None:
    """Engine failures propagate out of create; the row is already written."""
    engine.fail_on("PUT", status=500, body={"error": "UnavailableShardsException"})
    with pytest.raises(EngineError, match="UnavailableShardsException"):
        store.create(Post(title="foo", body="bar"))

    assert indexed == []
    assert store.count(Post) == 1


def test_only_option_limits_indexed_fields(
    registry: SearchableRegistry, store: SqliteRecordStore, client: IndexClient
) -> None:
    """A type serializing only name indexes nothing else."""
    store.register(Friend)
    friends = registry.register(Friend, IndexOptions(only=("name",)))
    friends.create_index()

    friend = store.create(Friend(name="bob", favorite_color="red"))
    friends.refresh_index()

    response = client.get_document("elastic_searchable", "friends", friend.id)
    assert response["_source"] == {"name": "bob"}


def test_create_index_installs_mapping(
    registry: SearchableRegistry, store: SqliteRecordStore, client: IndexClient
) -> None:
    """Configured field mappings are installed with the index."""
    mapping = {"properties": {"name": {"type": "string", "index": "not_analyzed"}}}
    store.register(User)
    users = registry.register(User, IndexOptions(mapping=mapping))
    users.create_index()

    response = client.get_mapping("elastic_searchable", "users")
    assert response["elastic_searchable"] == {"users": mapping}


def test_clean_index_then_reindex_all(
    posts: Searchable[Post], store: SqliteRecordStore, client: IndexClient
) -> None:
    """Cleaning empties the index; reindexing restores every record."""
    posts.create_index()
    first = store.create(Post(title="foo", body="first bar"))
    second = store.create(Post(title="foo", body="second bar"))

    posts.clean_index()
    with pytest.raises(EngineError):
        client.get_document("elastic_searchable", "posts", first.id)

    assert posts.reindex_all() == 2
    posts.refresh_index()
    client.get_document("elastic_searchable", "posts", first.id)
    client.get_document("elastic_searchable", "posts", second.id)


def test_clean_index_tolerates_missing_index(
    posts: Searchable[Post], client: IndexClient
) -> None:
    """Cleaning an index that does not exist simply creates it."""
    posts.clean_index()
    assert client.index_status("elastic_searchable")["ok"]


def test_clean_index_propagates_other_delete_failures(
    posts: Searchable[Post], engine: FakeEngine
) -> None:
    """Only a missing index is tolerated; the engine's own failure surfaces."""
    posts.create_index()
    engine.fail_on("DELETE", status=500, body={"error": "ClusterBlockException"})

    with pytest.raises(EngineError, match="ClusterBlockException") as exc_info:
        posts.clean_index()
    assert exc_info.value.status_code == 500
    assert engine.paths("PUT") == ["/elastic_searchable"]


def test_reindex_all_skips_records_failing_condition(
    registry: SearchableRegistry, store: SqliteRecordStore, client: IndexClient
) -> None:
    """Batch reindexing applies the same condition as updates."""
    store.register(Blog)
    blogs = registry.register(Blog, IndexOptions(condition=lambda blog: blog.title == "keep"))
    blogs.create_index()
    store.create(Blog(title="keep"))
    store.create(Blog(title="drop"))

    blogs.clean_index()
    assert blogs.reindex_all() == 1


def test_custom_index_option(
    registry: SearchableRegistry, store: SqliteRecordStore, client: IndexClient
) -> None:
    """A type naming its own index writes there."""
    store.register(Post)
    registry.register(Post, IndexOptions(index="posts_v2"))
    post = store.create(Post(title="foo"))
    assert client.get_document("posts_v2", "posts", post.id)["_source"]["title"] == "foo"


def test_default_index_is_resolved_per_call(
    posts: Searchable[Post], store: SqliteRecordStore, client: IndexClient
) -> None:
    """Types without an index follow the process default."""
    set_default_index("my_new_index")
    assert posts.index_name == "my_new_index"
    post = store.create(Post(title="foo"))
    client.get_document("my_new_index", "posts", post.id)


def test_index_unsaved_record_raises(posts: Searchable[Post]) -> None:
    """Indexing needs an identifier."""
    with pytest.raises(ValueError, match="unsaved"):
        posts.index_record(Post(title="foo"))


def test_register_twice_raises(registry: SearchableRegistry, posts: Searchable[Post]) -> None:
    """Configuration is resolved once per type."""
    with pytest.raises(ValueError, match="already searchable"):
        registry.register(Post)
    assert registry.get(Post) is posts
    assert registry.for_type("posts") is posts


def test_options_are_immutable() -> None:
    """Configuration cannot change after it is built."""
    options = IndexOptions(per_page=10)
    with pytest.raises(ValueError):
        options.per_page = 5  # type: ignore[misc]


def test_nested_options_are_immutable() -> None:
    """Settings and mapping are copied and cannot be edited in place."""
    settings = {"number_of_shards": 1, "analysis.analyzer.default.filter": ["lowercase"]}
    mapping = {"properties": {"name": {"type": "string"}}}
    options = IndexOptions(index_settings=settings, mapping=mapping)

    with pytest.raises(TypeError):
        options.index_settings["number_of_shards"] = 99  # type: ignore[index]
    with pytest.raises(TypeError):
        options.mapping["properties"]["age"] = {"type": "integer"}  # type: ignore[index]

    settings["number_of_shards"] = 99
    mapping["properties"].clear()
    assert options.settings_body() == {
        "number_of_shards": 1,
        "analysis.analyzer.default.filter": ["lowercase"],
    }
    assert options.mapping_body() == {"properties": {"name": {"type": "string"}}}
