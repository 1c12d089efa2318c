"""Tests for the Elasticsearch backend against a mocked HTTP transport."""

import json
from datetime import datetime, timezone
from typing import Callable

import httpx
import pytest

from contentlens.content_store.local import LocalContentStore
from contentlens.domain.content import ContentItem, ContentType
from contentlens.domain.search import (
    SearchFilters,
    SearchQuery,
    SortDirection,
    SortField,
    SortSpec,
)
from contentlens.errors import SearchBackendUnavailable
from contentlens.search_backends import ElasticsearchBackend
from contentlens.search_backends.elasticsearch_backend import (
    INDEX_SETTINGS,
    build_filter_clauses,
    build_sort,
    to_document,
)

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingHandler:
    """Records every request and answers with the wrapped handler."""

    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


def make_backend(store: LocalContentStore, handler: Handler) -> ElasticsearchBackend:
    client = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://search.test")
    return ElasticsearchBackend(store=store, index="content", client=client)


def test_search_hydrates_hits_from_store(store: LocalContentStore) -> None:
    handler = RecordingHandler(
        lambda request: httpx.Response(
            200,
            json={
                "hits": {
                    "total": {"value": 2, "relation": "eq"},
                    "max_score": 2.5,
                    "hits": [
                        {
                            "_id": "b",
                            "_score": 2.5,
                            "highlight": {"title": ["<em>Attention</em> mechanisms"]},
                        },
                        {"_id": "deleted", "_score": 1.0},
                    ],
                }
            },
        )
    )
    backend = make_backend(store, handler)

    result = backend.search(SearchQuery(text="attention", page=2, limit=5))

    assert [hit.item.id for hit in result.results] == ["b"]
    assert result.results[0].highlights["title"] == ["<em>Attention</em> mechanisms"]
    assert result.results[0].score == 1.0
    assert result.total_count == 2
    assert result.max_score == 1.0
    assert result.backend == "elasticsearch"

    request = handler.requests[0]
    body = handler.bodies()[0]
    assert request.method == "POST"
    assert request.url.path == "/content/_search"
    assert body["from"] == 5
    assert body["size"] == 5
    multi_match = body["query"]["bool"]["must"][0]["multi_match"]
    assert multi_match["query"] == "attention"
    assert "title^3" in multi_match["fields"]
    assert "key_insights^2.5" in multi_match["fields"]
    assert body["sort"][0] == {"_score": {"order": "desc"}}
    assert body["track_scores"] is True
    assert "highlight" in body


def test_text_scores_are_scaled_into_unit_range(store: LocalContentStore) -> None:
    handler = RecordingHandler(
        lambda request: httpx.Response(
            200,
            json={
                "hits": {
                    "total": {"value": 2, "relation": "eq"},
                    "max_score": None,
                    "hits": [{"_id": "a", "_score": 7.3}, {"_id": "d", "_score": 3.65}],
                }
            },
        )
    )
    backend = make_backend(store, handler)
    query = SearchQuery(
        text="attention", sort=SortSpec(field=SortField.DATE, direction=SortDirection.DESC)
    )

    result = backend.search(query)

    scores = {hit.item.id: hit.score for hit in result.results}
    assert scores == {"a": pytest.approx(1.0), "d": pytest.approx(0.5)}
    assert all(0.0 <= hit.score <= 1.0 for hit in result.results)
    assert result.max_score == pytest.approx(1.0)
    assert handler.bodies()[0]["track_scores"] is True


def test_search_without_text_uses_stored_relevance(store: LocalContentStore) -> None:
    handler = RecordingHandler(
        lambda request: httpx.Response(
            200, json={"hits": {"total": 1, "hits": [{"_id": "a", "_score": None}]}}
        )
    )
    backend = make_backend(store, handler)

    result = backend.search(SearchQuery())

    assert result.results[0].score == 0.9
    assert result.total_count == 1
    body = handler.bodies()[0]
    assert body["query"]["bool"]["must"] == []
    assert "highlight" not in body
    assert "track_scores" not in body


def test_filter_clauses() -> None:
    filters = SearchFilters(
        types=[ContentType.PAPER],
        categories=["ml"],
        author="Love*",
        date_from=datetime(2025, 1, 1, tzinfo=timezone.utc),
        date_to=datetime(2025, 6, 30, tzinfo=timezone.utc),
        relevance_min=0.5,
    )

    clauses = build_filter_clauses(filters)

    assert {"term": {"processed": True}} in clauses
    assert {"term": {"outdated": False}} in clauses
    assert {"terms": {"type": ["paper"]}} in clauses
    assert {"terms": {"categories": ["ml"]}} in clauses
    assert {"range": {"relevance_score": {"gte": 0.5}}} in clauses
    assert {
        "range": {
            "publish_date": {
                "gte": "2025-01-01T00:00:00+00:00",
                "lte": "2025-06-30T00:00:00+00:00",
            }
        }
    } in clauses
    wildcard = next(c for c in clauses if "wildcard" in c)["wildcard"]["author.raw"]
    assert wildcard == {"value": "*Love\\**", "case_insensitive": True}


def test_filter_clauses_include_outdated() -> None:
    clauses = build_filter_clauses(SearchFilters(include_outdated=True))

    assert clauses == [{"term": {"processed": True}}]


def test_sort_puts_missing_values_last() -> None:
    sort = build_sort(SortSpec(field=SortField.DATE, direction=SortDirection.ASC), has_text=True)

    assert sort == [
        {"publish_date": {"order": "asc", "missing": "_last"}},
        {"id": {"order": "asc"}},
    ]


@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(503, text="unavailable"),
        lambda request: httpx.Response(404, json={"error": "index_not_found_exception"}),
    ],
)
def test_error_statuses_raise_unavailable(store: LocalContentStore, handler: Handler) -> None:
    backend = make_backend(store, handler)

    with pytest.raises(SearchBackendUnavailable):
        backend.search(SearchQuery(text="attention"))


def test_transport_errors_raise_unavailable(store: LocalContentStore) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    backend = make_backend(store, refuse)

    with pytest.raises(SearchBackendUnavailable):
        backend.search(SearchQuery())
    with pytest.raises(SearchBackendUnavailable):
        backend.suggest("tra")
    assert backend.ping() is False


def test_ping(store: LocalContentStore) -> None:
    backend = make_backend(store, lambda request: httpx.Response(200, json={"tagline": "ok"}))

    assert backend.ping(timeout=0.5) is True


def test_ensure_index_creates_missing_index(store: LocalContentStore) -> None:
    handler = RecordingHandler(
        lambda request: httpx.Response(404 if request.method == "HEAD" else 200, json={})
    )
    backend = make_backend(store, handler)

    backend.ensure_index()

    assert [r.method for r in handler.requests] == ["HEAD", "PUT"]
    assert handler.bodies()[0] == INDEX_SETTINGS


def test_ensure_index_keeps_existing_index(store: LocalContentStore) -> None:
    handler = RecordingHandler(lambda request: httpx.Response(200))
    backend = make_backend(store, handler)

    backend.ensure_index()

    assert [r.method for r in handler.requests] == ["HEAD"]


def test_ensure_index_tolerates_concurrent_creation(store: LocalContentStore) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "HEAD":
            return httpx.Response(404)
        return httpx.Response(400, json={"error": {"type": "resource_already_exists_exception"}})

    make_backend(store, handler).ensure_index()


def test_index_and_remove_content(store: LocalContentStore, item_a: ContentItem) -> None:
    handler = RecordingHandler(
        lambda request: httpx.Response(404 if request.method == "DELETE" else 201, json={})
    )
    backend = make_backend(store, handler)

    backend.index_content(item_a)
    backend.remove_content("a")

    put, delete = handler.requests
    assert put.method == "PUT"
    assert put.url.path == "/content/_doc/a"
    assert json.loads(put.content) == json.loads(json.dumps(to_document(item_a)))
    assert delete.method == "DELETE"
    assert delete.url.path == "/content/_doc/a"


def test_to_document(item_a: ContentItem) -> None:
    document = to_document(item_a)

    assert document["author"] == ["Ada Lovelace"]
    assert document["type"] == "article"
    assert document["read_count"] == 120
    assert document["outdated"] is False
    assert document["processed"] is True


def test_suggest_blends_kinds(store: LocalContentStore) -> None:
    handler = RecordingHandler(
        lambda request: httpx.Response(
            200,
            json={
                "suggest": {
                    "title_suggest": [
                        {
                            "options": [
                                {"text": "Transformers for language modeling", "_score": 3.0},
                                {"text": "Transformer scaling", "_score": 1.0},
                            ]
                        }
                    ],
                    "author_suggest": [{"options": []}],
                    "topic_suggest": [
                        {"options": [{"text": "transformers", "_score": 2.0}]}
                    ],
                }
            },
        )
    )
    backend = make_backend(store, handler)

    suggestions = backend.suggest("tra", limit=8)

    assert [(s.kind, s.value) for s in suggestions] == [
        ("title", "Transformers for language modeling"),
        ("topic", "transformers"),
        ("title", "Transformer scaling"),
    ]
    body = handler.bodies()[0]["suggest"]
    assert body["title_suggest"]["completion"]["size"] == 4
    assert body["author_suggest"]["completion"]["size"] == 2
    assert body["topic_suggest"]["completion"]["size"] == 2
    assert body["title_suggest"]["prefix"] == "tra"
