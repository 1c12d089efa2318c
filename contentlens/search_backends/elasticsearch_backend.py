from typing import Any

import httpx
from loguru import logger

from contentlens.content_store.base import ContentStore
from contentlens.domain.content import ContentItem
from contentlens.domain.search import (
    SearchFilters,
    SearchHit,
    SearchQuery,
    SearchResult,
    SortDirection,
    SortField,
    SortSpec,
    Suggestion,
)
from contentlens.errors import SearchBackendUnavailable
from contentlens.search_backends.base import SearchBackend

FIELD_BOOSTS = {
    "title": 3.0,
    "summary": 2.0,
    "key_insights": 2.5,
    "full_text": 1.0,
    "author": 1.5,
}

SYNONYMS = [
    "ai, artificial intelligence",
    "ml, machine learning",
    "dl, deep learning",
    "nlp, natural language processing",
    "llm, large language model",
]

_TEXT_FIELD = {"type": "text", "analyzer": "content_analyzer"}

INDEX_SETTINGS: dict[str, Any] = {
    "settings": {
        "analysis": {
            "filter": {
                "content_synonyms": {"type": "synonym", "synonyms": SYNONYMS},
            },
            "analyzer": {
                "content_analyzer": {
                    "type": "custom",
                    "tokenizer": "standard",
                    "filter": ["lowercase", "content_synonyms", "stop", "porter_stem"],
                }
            },
        }
    },
    "mappings": {
        "properties": {
            "id": {"type": "keyword"},
            "title": {
                **_TEXT_FIELD,
                "fields": {
                    "raw": {"type": "keyword", "normalizer": "lowercase"},
                    "suggest": {"type": "completion"},
                },
            },
            "summary": _TEXT_FIELD,
            "key_insights": _TEXT_FIELD,
            "full_text": _TEXT_FIELD,
            "author": {
                **_TEXT_FIELD,
                "fields": {
                    "raw": {"type": "keyword"},
                    "suggest": {"type": "completion"},
                },
            },
            "type": {"type": "keyword"},
            "categories": {"type": "keyword"},
            "topics": {
                "type": "keyword",
                "fields": {"suggest": {"type": "completion"}},
            },
            "publish_date": {"type": "date"},
            "relevance_score": {"type": "float"},
            "quality_score": {"type": "float"},
            "view_count": {"type": "integer"},
            "read_count": {"type": "integer"},
            "save_count": {"type": "integer"},
            "share_count": {"type": "integer"},
            "outdated": {"type": "boolean"},
            "processed": {"type": "boolean"},
        }
    },
}

_SORT_FIELDS = {
    SortField.RELEVANCE: "relevance_score",
    SortField.DATE: "publish_date",
    SortField.QUALITY: "quality_score",
    SortField.VIEWS: "view_count",
    SortField.SAVES: "save_count",
    SortField.SHARES: "share_count",
    SortField.READS: "read_count",
    SortField.TITLE: "title.raw",
}

_WILDCARD_SPECIAL = str.maketrans({"\\": "\\\\", "*": "\\*", "?": "\\?"})


def to_document(item: ContentItem) -> dict[str, Any]:
    """Convert a content item into its search index document."""
    return {
        "id": item.id,
        "title": item.title,
        "summary": item.summary,
        "key_insights": item.key_insights,
        "full_text": item.full_text,
        "author": item.authors,
        "type": item.type.value,
        "categories": item.categories,
        "topics": item.topics,
        "publish_date": item.publish_date.isoformat() if item.publish_date else None,
        "relevance_score": item.relevance_score,
        "quality_score": item.quality_score,
        "view_count": item.views,
        "read_count": item.reads,
        "save_count": item.saves,
        "share_count": item.shares,
        "outdated": item.aging.is_outdated,
        "processed": item.processed,
    }


def build_filter_clauses(filters: SearchFilters) -> list[dict[str, Any]]:
    clauses: list[dict[str, Any]] = [{"term": {"processed": True}}]
    if not filters.include_outdated:
        clauses.append({"term": {"outdated": False}})

    if filters.types:
        clauses.append({"terms": {"type": [t.value for t in filters.types]}})
    if filters.categories:
        clauses.append({"terms": {"categories": filters.categories}})
    if filters.topics:
        clauses.append({"terms": {"topics": filters.topics}})

    if filters.author:
        needle = filters.author.strip().translate(_WILDCARD_SPECIAL)
        clauses.append(
            {"wildcard": {"author.raw": {"value": f"*{needle}*", "case_insensitive": True}}}
        )

    if filters.date_from or filters.date_to:
        date_range = {}
        if filters.date_from:
            date_range["gte"] = filters.date_from.isoformat()
        if filters.date_to:
            date_range["lte"] = filters.date_to.isoformat()
        clauses.append({"range": {"publish_date": date_range}})

    if filters.relevance_min is not None or filters.relevance_max is not None:
        relevance_range = {}
        if filters.relevance_min is not None:
            relevance_range["gte"] = filters.relevance_min
        if filters.relevance_max is not None:
            relevance_range["lte"] = filters.relevance_max
        clauses.append({"range": {"relevance_score": relevance_range}})

    return clauses


def build_sort(sort: SortSpec, *, has_text: bool) -> list[Any]:
    order = "asc" if sort.direction is SortDirection.ASC else "desc"
    if sort.field is SortField.RELEVANCE and has_text:
        primary: dict[str, Any] = {"_score": {"order": order}}
    else:
        primary = {_SORT_FIELDS[sort.field]: {"order": order, "missing": "_last"}}
    return [primary, {"id": {"order": "asc"}}]


def build_search_body(query: SearchQuery) -> dict[str, Any]:
    must = []
    if query.text:
        must.append(
            {
                "multi_match": {
                    "query": query.text,
                    "fields": [f"{field}^{boost:g}" for field, boost in FIELD_BOOSTS.items()],
                    "type": "best_fields",
                    "fuzziness": "AUTO",
                }
            }
        )

    body: dict[str, Any] = {
        "query": {"bool": {"must": must, "filter": build_filter_clauses(query.filters)}},
        "sort": build_sort(query.sort, has_text=query.text is not None),
        "from": query.offset,
        "size": query.limit,
        "track_total_hits": True,
        "_source": False,
    }
    if query.text:
        # Scores are still needed when sorting on another field
        body["track_scores"] = True
        body["highlight"] = {
            "pre_tags": ["<em>"],
            "post_tags": ["</em>"],
            "fields": {
                "title": {},
                "summary": {},
                "full_text": {"fragment_size": 150, "number_of_fragments": 3},
            },
        }
    return body


def normalize_score(score: float | None, max_score: float | None) -> float:
    """Scale an engine score into [0, 1] relative to the best score of the query."""
    if not score or not max_score or max_score <= 0:
        return 0.0
    return min(max(score / max_score, 0.0), 1.0)


class ElasticsearchBackend(SearchBackend):
    """Search backend talking to an Elasticsearch cluster over its REST API.

    Only IDs, scores and highlights are read back from the engine; the returned
    items always come from the content store.
    """

    name = "elasticsearch"

    def __init__(
        self,
        *,
        store: ContentStore,
        base_url: str = "http://localhost:9200",
        index: str = "content",
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            store: Content store used to hydrate search hits
            base_url: Base URL of the Elasticsearch cluster
            index: Name of the content index
            timeout: Timeout in seconds for every request
            client: Preconfigured HTTP client, mostly useful for testing
        """
        self.store = store
        self.index = index
        self.timeout = timeout
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def ping(self, timeout: float | None = None) -> bool:
        """Whether the cluster answers at all within the timeout."""
        try:
            response = self.client.get("/", timeout=timeout or self.timeout)
        except httpx.HTTPError as e:
            logger.debug(f"Elasticsearch ping failed: {e}")
            return False
        return response.is_success

    def ensure_index(self) -> None:
        """Create the content index with its mapping unless it already exists."""
        response = self._request("HEAD", f"/{self.index}", allowed={404})
        if response.status_code != 404:
            return

        response = self._request("PUT", f"/{self.index}", json=INDEX_SETTINGS, allowed={400})
        if response.status_code == 400:
            if "resource_already_exists_exception" in response.text:
                return
            raise SearchBackendUnavailable(
                f"Could not create index {self.index}: {response.text[:200]}"
            )
        logger.info(f"Created search index {self.index}")

    def search(self, query: SearchQuery) -> SearchResult:
        response = self._request("POST", f"/{self.index}/_search", json=build_search_body(query))
        payload = response.json()
        hits_block = payload.get("hits", {})
        raw_hits = hits_block.get("hits", [])
        top_score = hits_block.get("max_score") or max(
            (raw["_score"] for raw in raw_hits if raw.get("_score") is not None), default=None
        )

        items = self.store.get_contents_by_ids([hit["_id"] for hit in raw_hits])
        hits = []
        for raw in raw_hits:
            item = items.get(raw["_id"])
            if item is None:
                logger.warning(f"Search hit {raw['_id']} is not in the content store, dropping it")
                continue
            if query.text:
                score = normalize_score(raw.get("_score"), top_score)
            else:
                score = item.relevance_score or 0.0
            hits.append(
                SearchHit(
                    item=item,
                    score=score,
                    highlights=raw.get("highlight", {}),
                )
            )

        total = hits_block.get("total", 0)
        if isinstance(total, dict):
            total = total.get("value", 0)

        return SearchResult(
            results=hits,
            total_count=total,
            max_score=max((hit.score for hit in hits), default=None),
            backend=self.name,
        )

    def suggest(self, prefix: str, limit: int = 10) -> list[Suggestion]:
        """Blend completion suggestions for titles, authors and topics.

        Titles get half of the limit, authors and topics a quarter each.
        """
        sizes = {
            "title": max(1, limit // 2),
            "author": max(1, limit // 4),
            "topic": max(1, limit // 4),
        }
        fields = {"title": "title.suggest", "author": "author.suggest", "topic": "topics.suggest"}
        body = {
            "_source": False,
            "suggest": {
                f"{kind}_suggest": {
                    "prefix": prefix,
                    "completion": {"field": fields[kind], "size": size, "skip_duplicates": True},
                }
                for kind, size in sizes.items()
            },
        }

        response = self._request("POST", f"/{self.index}/_search", json=body)
        payload = response.json().get("suggest", {})

        suggestions: dict[tuple[str, str], Suggestion] = {}
        for kind in sizes:
            for entry in payload.get(f"{kind}_suggest", []):
                for option in entry.get("options", []):
                    value = option["text"]
                    key = (kind, value.lower())
                    if key not in suggestions:
                        suggestions[key] = Suggestion(
                            kind=kind,
                            value=value,
                            label=f"{kind.capitalize()}: {value}",
                            score=option.get("_score", 0.0),
                        )

        ranked = sorted(suggestions.values(), key=lambda s: (-s.score, s.kind, s.value))
        return ranked[:limit]

    def index_content(self, item: ContentItem) -> None:
        self._request("PUT", f"/{self.index}/_doc/{item.id}", json=to_document(item))
        logger.debug(f"Indexed content {item.id}")

    def remove_content(self, content_id: str) -> None:
        response = self._request("DELETE", f"/{self.index}/_doc/{content_id}", allowed={404})
        if response.status_code == 404:
            logger.debug(f"Content {content_id} was not in the search index")

    def close(self) -> None:
        self.client.close()

    def _request(
        self, method: str, path: str, *, allowed: set[int] | None = None, **kwargs: Any
    ) -> httpx.Response:
        """Send a request, turning transport failures and error statuses into
        SearchBackendUnavailable. Statuses in ``allowed`` are returned as is."""
        try:
            response = self.client.request(method, path, timeout=self.timeout, **kwargs)
        except httpx.HTTPError as e:
            raise SearchBackendUnavailable(f"{method} {path} failed: {e}") from e

        if response.is_success or response.status_code in (allowed or set()):
            return response
        raise SearchBackendUnavailable(
            f"{method} {path} returned {response.status_code}: {response.text[:200]}"
        )
