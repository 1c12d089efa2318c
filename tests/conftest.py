from datetime import datetime, timedelta, timezone

import pytest

from contentlens.aging import AgingRuleEngine, AgingService
from contentlens.content_store.local import LocalContentStore
from contentlens.domain.content import ContentItem, ContentType
from contentlens.relatedness import RelatedContentFinder
from contentlens.search_backends import HybridSearchIndex, LocalSearchBackend
from tests.fakes import FakeLinkChecker

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def days_ago(days: int) -> datetime:
    return NOW - timedelta(days=days)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def item_a() -> ContentItem:
    return ContentItem(
        id="a",
        title="Transformers for language modeling",
        url="https://example.com/transformers",
        authors=["Ada Lovelace"],
        type=ContentType.ARTICLE,
        categories=["ml", "nlp"],
        topics=["transformers", "attention"],
        publish_date=days_ago(10),
        summary="How attention based transformers model language",
        key_insights=["Attention replaces recurrence"],
        reads=120,
        saves=10,
        relevance_score=0.9,
        quality_score=0.8,
        freshness_score=0.9,
    )


@pytest.fixture
def item_b() -> ContentItem:
    return ContentItem(
        id="b",
        title="Attention mechanisms in transformer models",
        authors=["Ada Lovelace"],
        type=ContentType.ARTICLE,
        categories=["ml", "nlp"],
        topics=["transformers", "attention"],
        publish_date=days_ago(15),
        summary="Attention mechanisms explained for transformer language models",
        relevance_score=0.7,
        quality_score=0.6,
    )


@pytest.fixture
def item_c() -> ContentItem:
    return ContentItem(
        id="c",
        title="Sourdough baking at home",
        authors=["Paul Hollywood"],
        type=ContentType.VIDEO,
        categories=["cooking"],
        topics=["baking"],
        publish_date=days_ago(400),
        summary="Bread recipes and fermentation tips",
        relevance_score=0.5,
        freshness_score=0.2,
    )


@pytest.fixture
def item_d() -> ContentItem:
    return ContentItem(
        id="d",
        title="Scaling laws for neural language models",
        authors=["Grace Hopper"],
        type=ContentType.PAPER,
        categories=["ml"],
        topics=["transformers", "attention"],
        publish_date=days_ago(100),
        summary="Empirical scaling of transformer language models",
        relevance_score=0.6,
    )


@pytest.fixture
def unprocessed_item() -> ContentItem:
    return ContentItem(
        id="e",
        title="Attention mechanisms draft",
        authors=["Ada Lovelace"],
        type=ContentType.ARTICLE,
        categories=["ml", "nlp"],
        topics=["transformers", "attention"],
        publish_date=days_ago(12),
        summary="Attention mechanisms explained",
        relevance_score=1.0,
        processed=False,
    )


@pytest.fixture
def items(
    item_a: ContentItem,
    item_b: ContentItem,
    item_c: ContentItem,
    item_d: ContentItem,
    unprocessed_item: ContentItem,
) -> list[ContentItem]:
    return [item_a, item_b, item_c, item_d, unprocessed_item]


@pytest.fixture
def store(items: list[ContentItem]) -> LocalContentStore:
    return LocalContentStore.from_data(items)


@pytest.fixture
def finder(store: LocalContentStore) -> RelatedContentFinder:
    return RelatedContentFinder(store=store, threshold=0.3, limit=10, max_workers=2)


@pytest.fixture
def link_checker() -> FakeLinkChecker:
    return FakeLinkChecker()


@pytest.fixture
def engine(link_checker: FakeLinkChecker) -> AgingRuleEngine:
    return AgingRuleEngine(link_checker=link_checker, clock=lambda: NOW)


@pytest.fixture
def aging_service(store: LocalContentStore, engine: AgingRuleEngine) -> AgingService:
    return AgingService(store=store, engine=engine, max_workers=2)


@pytest.fixture
def local_backend(store: LocalContentStore) -> LocalSearchBackend:
    return LocalSearchBackend(store=store)


@pytest.fixture
def local_search_index(local_backend: LocalSearchBackend) -> HybridSearchIndex:
    return HybridSearchIndex(fallback=local_backend)
