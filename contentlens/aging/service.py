import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime

from contentlens.content_store.base import ContentStore
from contentlens.domain.aging import (
    AgingAssessment,
    AgingStatistics,
    BatchError,
    BatchResult,
    ReviewItem,
)
from contentlens.domain.content import (
    AgingInfo,
    ContentItem,
    ContentType,
    OutdatedReason,
    as_utc,
)
from contentlens.errors import ContentNotFoundError

from .engine import AgingRuleEngine

logger = logging.getLogger(__name__)


class AgingService:
    """Applies aging assessments to content in a store.

    Only the ``aging`` sub-record of an item is ever written back.
    """

    def __init__(
        self,
        *,
        store: ContentStore,
        engine: AgingRuleEngine | None = None,
        max_workers: int = 4,
    ) -> None:
        """Initialize the service.

        Args:
            store: Content store to read items from and write aging records to
            engine: Rule engine, a default one is created if omitted
            max_workers: Worker pool size for batch checks
        """
        self.store = store
        self.engine = engine or AgingRuleEngine()
        self.max_workers = max_workers

    def _get(self, content_id: str) -> ContentItem:
        item = self.store.get_content(content_id)
        if item is None:
            raise ContentNotFoundError(content_id)
        return item

    def assess_aging(self, content_id: str) -> AgingAssessment:
        """Assess a stored item without changing it."""
        return self.engine.assess(self._get(content_id))

    def update_suggestions(self, content_id: str) -> list[str]:
        return self.engine.update_suggestions(self._get(content_id))

    def mark_outdated(
        self,
        content_id: str,
        reasons: list[OutdatedReason | str],
        suggestions: list[str] | None = None,
    ) -> AgingInfo:
        """Flag an item as outdated.

        Raises:
            ValueError: If no reason is given or a reason is unknown
            ContentNotFoundError: If the item does not exist
        """
        parsed_reasons = [OutdatedReason(reason) for reason in reasons]
        if not parsed_reasons:
            raise ValueError("At least one reason is required to mark content as outdated")

        item = self._get(content_id)
        aging = item.aging.model_copy(deep=True)
        aging.mark_outdated(parsed_reasons, suggestions or [], now=self.engine.clock())
        self.store.update_aging(content_id, aging)
        logger.info(f"Marked content {content_id} as outdated")
        return aging

    def mark_reviewed(
        self,
        content_id: str,
        up_to_date: bool = True,
        next_review_date: datetime | None = None,
        reasons: list[OutdatedReason | str] | None = None,
        suggestions: list[str] | None = None,
    ) -> AgingInfo:
        """Record a manual review of an item.

        An up-to-date item without an explicit next review date is scheduled as if
        it had just been published. An item that is not up to date is marked
        outdated, with reason ``other`` unless reasons are given.
        """
        if not up_to_date:
            return self.mark_outdated(content_id, reasons or [OutdatedReason.OTHER], suggestions)

        item = self._get(content_id)
        now = self.engine.clock()
        next_review_at = as_utc(next_review_date) or self.engine.next_review_date(
            item.type, 0, now
        )

        aging = item.aging.model_copy(deep=True)
        aging.mark_up_to_date(next_review_at, now=now)
        self.store.update_aging(content_id, aging)
        logger.info(f"Marked content {content_id} as reviewed until {next_review_at:%Y-%m-%d}")
        return aging

    def identify_outdated(
        self,
        limit: int = 100,
        content_type: ContentType | None = None,
        force_recheck: bool = False,
    ) -> BatchResult:
        """Assess stored items, oldest first, and persist the outcome.

        Outdated items are marked outdated; the others get their next review date.

        Args:
            limit: Maximum number of items to check
            content_type: Only check items of this type
            force_recheck: Also re-check items that are already flagged as outdated

        Returns:
            BatchResult whose ``results`` map each checked ID to its AgingAssessment
        """
        if limit < 0:
            raise ValueError("limit must not be negative")

        candidates = self.store.scan(
            lambda item: item.processed
            and (content_type is None or item.type == content_type)
            and (force_recheck or not item.aging.is_outdated)
        )
        dated = sorted(
            (item for item in candidates if item.publish_date is not None),
            key=lambda item: (item.publish_date, item.id),
        )
        undated = sorted(
            (item for item in candidates if item.publish_date is None), key=lambda item: item.id
        )
        candidates = (dated + undated)[:limit]

        now = self.engine.clock()
        result = BatchResult()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._check_item, item, now): item.id for item in candidates
            }
            for future in as_completed(futures):
                content_id = futures[future]
                try:
                    result.results[content_id] = future.result()
                    result.processed += 1
                except Exception as e:
                    logger.warning(f"Failed to check aging of {content_id}: {e}")
                    result.failed += 1
                    result.errors.append(BatchError(content_id=content_id, error=str(e)))

        outdated = sum(1 for a in result.results.values() if a.is_outdated)
        logger.info(
            f"Checked {result.processed} items for aging, {outdated} outdated, "
            f"{result.failed} failed"
        )
        return result

    def _check_item(self, item: ContentItem, now: datetime) -> AgingAssessment:
        assessment = self.engine.assess(item, now=now)

        aging = item.aging.model_copy(deep=True)
        if assessment.is_outdated:
            aging.mark_outdated(assessment.reasons, assessment.suggestions, now=now)
        else:
            aging.mark_up_to_date(assessment.next_review_at, now=now)
        self.store.update_aging(item.id, aging)

        return assessment

    def due_for_review(self, before: datetime | None = None, limit: int = 50) -> list[ReviewItem]:
        """List fresh items whose next review date is at or before ``before``."""
        cutoff = as_utc(before) or self.engine.clock()
        due = self._due_items(cutoff)
        due.sort(key=lambda item: (item.aging.next_review_at, item.id))
        return [
            ReviewItem(
                content_id=item.id,
                title=item.title,
                type=item.type,
                topics=item.topics,
                publish_date=item.publish_date,
                last_reviewed_at=item.aging.last_reviewed_at,
                next_review_at=item.aging.next_review_at,
            )
            for item in due[:limit]
        ]

    def _due_items(self, cutoff: datetime) -> list[ContentItem]:
        return self.store.scan(
            lambda item: item.processed
            and not item.aging.is_outdated
            and item.aging.next_review_at is not None
            and item.aging.next_review_at <= cutoff
        )

    def statistics(self) -> AgingStatistics:
        """Summarize the aging state of all processed content."""
        items = self.store.scan(lambda item: item.processed)
        if not items:
            return AgingStatistics()

        now = self.engine.clock()
        outdated = [item for item in items if item.aging.is_outdated]

        days_since_review = [
            (now - item.aging.last_reviewed_at).total_seconds() / 86400
            for item in items
            if item.aging.last_reviewed_at is not None
        ]

        by_type: dict[str, dict[str, int]] = {}
        for item in items:
            counts = by_type.setdefault(item.type.value, {"total": 0, "outdated": 0})
            counts["total"] += 1
            if item.aging.is_outdated:
                counts["outdated"] += 1

        reasons = Counter(
            reason.value for item in outdated for reason in item.aging.outdated_reasons
        )

        return AgingStatistics(
            total_content=len(items),
            outdated_content=len(outdated),
            due_for_review=len(self._due_items(now)),
            avg_days_since_review=(
                sum(days_since_review) / len(days_since_review) if days_since_review else None
            ),
            by_type=by_type,
            outdated_reasons=dict(reasons),
        )
