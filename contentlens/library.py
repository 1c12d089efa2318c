from datetime import datetime
from typing import Any

from loguru import logger
from pydantic import ValidationError

from contentlens.aging import AgingService
from contentlens.content_store.base import ContentStore
from contentlens.domain.aging import (
    AgingAssessment,
    AgingStatistics,
    BatchError,
    BatchResult,
    ReviewItem,
)
from contentlens.domain.content import AgingInfo, ContentItem, ContentType, OutdatedReason
from contentlens.domain.relationships import (
    ConnectionGraph,
    NetworkStatistics,
    RelatedContent,
    RelationshipType,
    SimilarityBreakdown,
)
from contentlens.domain.search import SearchFacets, SearchQuery, SearchResult, Suggestion
from contentlens.errors import ContentNotFoundError, InvalidQueryError
from contentlens.relatedness import ConnectionGraphBuilder, RelatedContentFinder
from contentlens.search_backends import HybridSearchIndex


class ContentLibrary:
    """Single entry point to relatedness, search and aging over one content store."""

    def __init__(
        self,
        *,
        store: ContentStore,
        search_index: HybridSearchIndex,
        finder: RelatedContentFinder | None = None,
        graph_builder: ConnectionGraphBuilder | None = None,
        aging: AgingService | None = None,
        graph_max_depth: int = 2,
        graph_max_nodes: int = 50,
    ) -> None:
        """Initialize the library.

        Args:
            store: Content store every component reads from
            search_index: Search index used for search, suggestions and indexing
            finder: Related content finder, a default one over the store if omitted
            graph_builder: Connection graph builder, a default one if omitted
            aging: Aging service, a default one over the store if omitted
            graph_max_depth: Default depth for connection graphs
            graph_max_nodes: Default node cap for connection graphs
        """
        self.store = store
        self.search_index = search_index
        self.finder = finder or RelatedContentFinder(store=store)
        self.graph_builder = graph_builder or ConnectionGraphBuilder()
        self.aging = aging or AgingService(store=store)
        self.graph_max_depth = graph_max_depth
        self.graph_max_nodes = graph_max_nodes

    def _get(self, content_id: str) -> ContentItem:
        item = self.store.get_content(content_id)
        if item is None:
            raise ContentNotFoundError(content_id)
        return item

    # Relatedness

    def score(self, first: ContentItem, second: ContentItem) -> float:
        return self.finder.scorer.score(first, second)

    def classify_relationship(
        self, first: ContentItem, second: ContentItem, score: float
    ) -> RelationshipType:
        return self.finder.scorer.classify_relationship(first, second, score)

    def similarity_breakdown(self, first_id: str, second_id: str) -> SimilarityBreakdown:
        return self.finder.scorer.breakdown(self._get(first_id), self._get(second_id))

    def find_related(
        self, content_id: str, limit: int | None = None, threshold: float | None = None
    ) -> list[RelatedContent]:
        return self.finder.find_related(content_id, limit=limit, threshold=threshold)

    def find_related_batch(
        self, content_ids: list[str], limit: int | None = None, threshold: float | None = None
    ) -> BatchResult:
        return self.finder.find_related_batch(content_ids, limit=limit, threshold=threshold)

    def build_graph(
        self, root_id: str, max_depth: int | None = None, max_nodes: int | None = None
    ) -> ConnectionGraph:
        return self.graph_builder.build(
            root_id,
            self.store.get_content,
            self.finder.find_related,
            max_depth=self.graph_max_depth if max_depth is None else max_depth,
            max_nodes=self.graph_max_nodes if max_nodes is None else max_nodes,
        )

    def network_statistics(
        self, root_ids: list[str], max_depth: int | None = None, max_nodes: int = 100
    ) -> NetworkStatistics:
        return self.graph_builder.network_statistics(
            root_ids,
            self.store.get_content,
            self.finder.find_related,
            max_depth=self.graph_max_depth if max_depth is None else max_depth,
            max_nodes=max_nodes,
        )

    # Search

    def search(self, query: SearchQuery | dict[str, Any]) -> SearchResult:
        """Search the library.

        Args:
            query: A SearchQuery, or its raw fields as a dictionary

        Raises:
            InvalidQueryError: If the raw fields do not form a valid query
        """
        if not isinstance(query, SearchQuery):
            try:
                query = SearchQuery.model_validate(query)
            except ValidationError as e:
                raise InvalidQueryError(str(e)) from e
        return self.search_index.search(query)

    def suggest(self, prefix: str, limit: int = 10) -> list[Suggestion]:
        return self.search_index.suggest(prefix, limit)

    def facets(self, text: str | None = None) -> SearchFacets:
        return self.search_index.facets(text)

    def index_content(self, item: ContentItem) -> bool:
        return self.search_index.index_content(item)

    def remove_content(self, content_id: str) -> bool:
        return self.search_index.remove_content(content_id)

    def reindex_all(self) -> BatchResult:
        """Push every processed item to the search engine.

        Does nothing when no search engine is in use.
        """
        result = BatchResult()
        if self.search_index.primary is None:
            logger.info("No search engine in use, nothing to reindex")
            return result

        for item in self.store.scan(lambda item: item.processed):
            if self.search_index.index_content(item):
                result.processed += 1
            else:
                result.failed += 1
                result.errors.append(
                    BatchError(content_id=item.id, error="Search backend unavailable")
                )

        logger.info(f"Reindexed {result.processed} items, {result.failed} failed")
        return result

    # Aging

    def assess_aging(self, content_id: str) -> AgingAssessment:
        return self.aging.assess_aging(content_id)

    def mark_outdated(
        self,
        content_id: str,
        reasons: list[OutdatedReason | str],
        suggestions: list[str] | None = None,
    ) -> AgingInfo:
        aging = self.aging.mark_outdated(content_id, reasons, suggestions)
        self._refresh_index(content_id)
        return aging

    def mark_reviewed(
        self,
        content_id: str,
        up_to_date: bool = True,
        next_review_date: datetime | None = None,
        reasons: list[OutdatedReason | str] | None = None,
        suggestions: list[str] | None = None,
    ) -> AgingInfo:
        aging = self.aging.mark_reviewed(
            content_id, up_to_date, next_review_date, reasons, suggestions
        )
        self._refresh_index(content_id)
        return aging

    def identify_outdated(
        self,
        limit: int = 100,
        content_type: ContentType | None = None,
        force_recheck: bool = False,
    ) -> BatchResult:
        """Check items for aging and update the search index for newly outdated ones."""
        result = self.aging.identify_outdated(
            limit=limit, content_type=content_type, force_recheck=force_recheck
        )
        for content_id, assessment in result.results.items():
            if assessment.is_outdated:
                self._refresh_index(content_id)
        return result

    def due_for_review(self, before: datetime | None = None, limit: int = 50) -> list[ReviewItem]:
        return self.aging.due_for_review(before=before, limit=limit)

    def aging_statistics(self) -> AgingStatistics:
        return self.aging.statistics()

    def update_suggestions(self, content_id: str) -> list[str]:
        return self.aging.update_suggestions(content_id)

    def _refresh_index(self, content_id: str) -> None:
        """Send an item's new aging state to the search engine, if one is in use."""
        if self.search_index.primary is None:
            return
        item = self.store.get_content(content_id)
        if item is not None:
            self.search_index.index_content(item)
