"""Tests for the hybrid search index and its fallback behaviour."""

import pytest

from contentlens.content_store.local import LocalContentStore
from contentlens.domain.content import ContentItem, ContentType
from contentlens.domain.search import (
    SearchFilters,
    SearchQuery,
    SortDirection,
    SortField,
    SortSpec,
    Suggestion,
)
from contentlens.search_backends import (
    ElasticsearchBackend,
    HybridSearchIndex,
    LocalSearchBackend,
)
from tests.conftest import days_ago
from tests.fakes import FakeSearchBackend


@pytest.fixture
def primary(store: LocalContentStore) -> FakeSearchBackend:
    return FakeSearchBackend(
        store,
        suggestions=[
            Suggestion(kind="title", value="Transformers for language modeling", label="Title"),
            Suggestion(kind="topic", value="baking", label="Topic"),
        ],
    )


@pytest.fixture
def hybrid(local_backend: LocalSearchBackend, primary: FakeSearchBackend) -> HybridSearchIndex:
    return HybridSearchIndex(fallback=local_backend, primary=primary)


def ids(result) -> list[str]:
    return [hit.item.id for hit in result.results]


def test_search_uses_primary_when_available(hybrid: HybridSearchIndex) -> None:
    result = hybrid.search(SearchQuery())

    assert result.backend == "fake"
    assert hybrid.backend_name == "fake"


def test_search_falls_back_when_primary_is_down(
    hybrid: HybridSearchIndex, primary: FakeSearchBackend
) -> None:
    primary.available = False

    result = hybrid.search(SearchQuery(text="attention"))

    assert result.backend == "local"
    assert set(ids(result)) == {"a", "b"}
    assert primary.calls == ["search"]


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        (SearchQuery(), ["a", "b", "d", "c"]),
        (SearchQuery(filters=SearchFilters(types=[ContentType.ARTICLE])), ["a", "b"]),
        (SearchQuery(filters=SearchFilters(author="hopper")), ["d"]),
        (SearchQuery(filters=SearchFilters(relevance_min=0.55)), ["a", "b", "d"]),
        (
            SearchQuery(filters=SearchFilters(date_from=days_ago(20), date_to=days_ago(5))),
            ["a", "b"],
        ),
        (SearchQuery(filters=SearchFilters(date_from=days_ago(120))), ["a", "b", "d"]),
        (
            SearchQuery(sort=SortSpec(field=SortField.TITLE, direction=SortDirection.ASC)),
            ["b", "d", "c", "a"],
        ),
        (SearchQuery(page=2, limit=2), ["d", "c"]),
    ],
)
def test_fallback_matches_primary_for_filter_queries(
    hybrid: HybridSearchIndex, primary: FakeSearchBackend, query: SearchQuery, expected: list[str]
) -> None:
    from_primary = hybrid.search(query)
    primary.available = False
    from_fallback = hybrid.search(query)

    assert ids(from_primary) == expected
    assert ids(from_fallback) == expected
    assert from_fallback.total_count == from_primary.total_count


def test_suggest_requires_two_characters(
    hybrid: HybridSearchIndex, primary: FakeSearchBackend
) -> None:
    assert hybrid.suggest("t") == []
    assert hybrid.suggest("  ") == []
    assert primary.calls == []

    assert [s.value for s in hybrid.suggest("tra")] == ["Transformers for language modeling"]


def test_suggest_is_empty_when_primary_is_down(
    hybrid: HybridSearchIndex, primary: FakeSearchBackend
) -> None:
    primary.available = False

    assert hybrid.suggest("tra") == []


def test_suggest_is_empty_without_primary(local_search_index: HybridSearchIndex) -> None:
    assert local_search_index.suggest("tra") == []


def test_index_operations(
    hybrid: HybridSearchIndex, primary: FakeSearchBackend, item_a: ContentItem
) -> None:
    assert hybrid.index_content(item_a) is True
    assert hybrid.remove_content("a") is True
    assert primary.indexed == ["a"]
    assert primary.removed == ["a"]

    primary.available = False
    assert hybrid.index_content(item_a) is False
    assert hybrid.remove_content("a") is False


def test_index_operations_without_primary(
    local_search_index: HybridSearchIndex, item_a: ContentItem
) -> None:
    assert local_search_index.index_content(item_a) is False
    assert local_search_index.remove_content("a") is False
    assert local_search_index.backend_name == "local"


def test_facets_are_computed_locally(
    hybrid: HybridSearchIndex, primary: FakeSearchBackend
) -> None:
    facets = hybrid.facets()

    assert sum(f.count for f in facets.types) == 4
    assert primary.calls == []


def test_create_without_reachable_engine(
    monkeypatch: pytest.MonkeyPatch, store: LocalContentStore
) -> None:
    monkeypatch.setattr(ElasticsearchBackend, "ping", lambda self, timeout=None: False)

    index = HybridSearchIndex.create(
        store=store, url="http://search.test", index="content", timeout=1.0, probe_timeout=0.1
    )

    assert index.primary is None
    assert index.search(SearchQuery()).backend == "local"


def test_create_with_reachable_engine(
    monkeypatch: pytest.MonkeyPatch, store: LocalContentStore
) -> None:
    ensured = []
    monkeypatch.setattr(ElasticsearchBackend, "ping", lambda self, timeout=None: True)
    monkeypatch.setattr(ElasticsearchBackend, "ensure_index", lambda self: ensured.append(True))

    index = HybridSearchIndex.create(
        store=store, url="http://search.test", index="content", timeout=1.0, probe_timeout=0.1
    )

    assert isinstance(index.primary, ElasticsearchBackend)
    assert index.backend_name == "elasticsearch"
    assert ensured == [True]
    index.close()
