"""Finding the content items most related to a given item."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from contentlens.content_store.base import ContentStore
from contentlens.domain.aging import BatchError, BatchResult
from contentlens.domain.relationships import RelatedContent
from contentlens.errors import ContentNotFoundError

from .similarity import SimilarityScorer

logger = logging.getLogger(__name__)


class RelatedContentFinder:
    """Ranks processed content items by similarity to a source item."""

    def __init__(
        self,
        *,
        store: ContentStore,
        scorer: SimilarityScorer | None = None,
        threshold: float = 0.3,
        limit: int = 10,
        max_workers: int = 4,
    ):
        """Initialize the finder.

        Args:
            store: Content store to read source and candidate items from
            scorer: Similarity scorer, a default one is created if omitted
            threshold: Default minimum similarity for an item to count as related
            limit: Default maximum number of related items returned
            max_workers: Worker pool size for batch operations
        """
        self.store = store
        self.scorer = scorer or SimilarityScorer()
        self.threshold = threshold
        self.limit = limit
        self.max_workers = max_workers

    def find_related(
        self,
        content_id: str,
        *,
        limit: int | None = None,
        threshold: float | None = None,
    ) -> list[RelatedContent]:
        """Find the processed items most similar to a content item.

        Args:
            content_id: ID of the source item
            limit: Maximum number of related items, defaults to the finder's limit
            threshold: Minimum similarity score, defaults to the finder's threshold

        Returns:
            Related items sorted by descending score, ties broken by ID

        Raises:
            ContentNotFoundError: If the source item does not exist
        """
        limit = self.limit if limit is None else limit
        threshold = self.threshold if threshold is None else threshold
        if limit < 0:
            raise ValueError("limit must not be negative")
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must be between 0 and 1")

        source = self.store.get_content(content_id)
        if source is None:
            raise ContentNotFoundError(content_id)

        candidates = self.store.scan(lambda item: item.processed and item.id != content_id)

        related = []
        for candidate in candidates:
            score = self.scorer.score(source, candidate)
            if score >= threshold:
                related.append(
                    RelatedContent(
                        item=candidate,
                        score=score,
                        relationship_type=self.scorer.classify_relationship(
                            source, candidate, score
                        ),
                    )
                )

        related.sort(key=lambda r: (-r.score, r.item.id))
        logger.debug(
            f"Found {len(related)} items related to {content_id} above threshold {threshold}"
        )
        return related[:limit]

    def find_related_batch(
        self,
        content_ids: list[str],
        *,
        limit: int | None = None,
        threshold: float | None = None,
    ) -> BatchResult:
        """Find related content for many items on a bounded worker pool.

        A failure for one item is recorded in the result and does not stop the batch.

        Returns:
            BatchResult whose ``results`` map each successful ID to its related items
        """
        result = BatchResult()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(
                    self.find_related, content_id, limit=limit, threshold=threshold
                ): content_id
                for content_id in dict.fromkeys(content_ids)
            }
            for future in as_completed(futures):
                content_id = futures[future]
                try:
                    result.results[content_id] = future.result()
                    result.processed += 1
                except Exception as e:
                    logger.warning(f"Failed to find related content for {content_id}: {e}")
                    result.failed += 1
                    result.errors.append(BatchError(content_id=content_id, error=str(e)))

        return result
