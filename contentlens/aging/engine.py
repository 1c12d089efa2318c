"""Rule-based assessment of whether content has gone out of date."""

import logging
from datetime import datetime, timedelta
from typing import Callable

from pydantic import BaseModel

from contentlens.domain.aging import AgingAssessment
from contentlens.domain.content import ContentItem, ContentType, OutdatedReason, as_utc, utc_now

from .links import LinkChecker, SampledLinkChecker
from .rules import (
    APPROACHING_AGE_FRACTION,
    BROKEN_LINK_FRACTION,
    DEFAULT_FRESHNESS,
    FAST_MOVING_SUGGESTIONS,
    FAST_MOVING_TOPICS,
    FRESHNESS_WARNING_FACTOR,
    MIDLIFE_AGE_FRACTION,
    MIN_REVIEW_INTERVAL_DAYS,
    TOPIC_WARNING_FRACTION,
    TYPE_MAX_AGE_DAYS,
    TYPE_UPDATE_SUGGESTIONS,
    strictest_topic_rule,
    topic_mentions,
)

logger = logging.getLogger(__name__)


class CriterionResult(BaseModel):
    is_outdated: bool = False
    reasons: list[OutdatedReason] = []
    suggestions: list[str] = []
    score: float = 0.0


class AgingRuleEngine:
    """Evaluates the aging criteria for single content items.

    The engine never touches a store; it only reads the item it is given.
    """

    def __init__(
        self,
        *,
        link_checker: LinkChecker | None = None,
        freshness_threshold: float = 0.3,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the engine.

        Args:
            link_checker: Decides which cited URLs are broken, defaults to SampledLinkChecker
            freshness_threshold: Freshness score below which content counts as outdated
            clock: Returns the current time, replaceable in tests
        """
        self.link_checker = link_checker or SampledLinkChecker()
        self.freshness_threshold = freshness_threshold
        self.clock = clock

    def assess(self, item: ContentItem, now: datetime | None = None) -> AgingAssessment:
        """Run every aging criterion against a content item.

        Args:
            item: Content item to assess
            now: Reference time, defaults to the engine's clock

        Returns:
            AgingAssessment; ``next_review_at`` is only set when the item is not outdated
        """
        now = as_utc(now) or self.clock()
        age_days = self.age_in_days(item, now)

        criteria = [
            self._check_age(item, age_days),
            self._check_freshness(item),
            self._check_topics(item, age_days),
            self._check_references(item),
        ]

        is_outdated = any(c.is_outdated for c in criteria)
        reasons = list(dict.fromkeys(reason for c in criteria for reason in c.reasons))
        suggestions = [suggestion for c in criteria for suggestion in c.suggestions]
        aging_score = max(0.0, min(1.0, sum(c.score for c in criteria) / len(criteria)))

        if is_outdated:
            logger.debug(f"Content {item.id} is outdated: {[r.value for r in reasons]}")

        return AgingAssessment(
            content_id=item.id,
            is_outdated=is_outdated,
            reasons=reasons,
            suggestions=suggestions,
            aging_score=aging_score,
            next_review_at=(
                None if is_outdated else self.next_review_date(item.type, age_days, now)
            ),
        )

    def next_review_date(
        self, content_type: ContentType, age_days: int, now: datetime
    ) -> datetime:
        """Schedule the next review; older content is reviewed more often."""
        max_age = TYPE_MAX_AGE_DAYS[content_type]
        if age_days < max_age * 0.3:
            fraction = 0.3
        elif age_days < max_age * 0.6:
            fraction = 0.2
        else:
            fraction = 0.1
        interval = max(MIN_REVIEW_INTERVAL_DAYS, max_age * fraction)
        return now + timedelta(days=interval)

    def update_suggestions(self, item: ContentItem, now: datetime | None = None) -> list[str]:
        """Suggest how to refresh an item based on its type, topics and age."""
        now = as_utc(now) or self.clock()
        suggestions = list(TYPE_UPDATE_SUGGESTIONS.get(item.type, []))

        if any(topic_mentions(t, phrase) for t in item.topics for phrase in FAST_MOVING_TOPICS):
            suggestions.extend(FAST_MOVING_SUGGESTIONS)

        if item.publish_date is not None:
            age_days = self.age_in_days(item, now)
            if age_days > 365:
                suggestions.append("Content is over a year old, comprehensive review recommended")
            if age_days > 730:
                suggestions.append(
                    "Consider creating an updated version or marking as historical reference"
                )

        return suggestions

    @staticmethod
    def age_in_days(item: ContentItem, now: datetime) -> int:
        """Whole days since publication; 0 for undated or future-dated items."""
        if item.publish_date is None:
            return 0
        return max(0, (now - item.publish_date).days)

    def _check_age(self, item: ContentItem, age_days: int) -> CriterionResult:
        if item.publish_date is None:
            return CriterionResult()

        max_age = TYPE_MAX_AGE_DAYS[item.type]
        if age_days > max_age:
            return CriterionResult(
                is_outdated=True,
                reasons=[OutdatedReason.DEPRECATED_INFO],
                suggestions=[
                    f"Content is {age_days} days old, consider updating or verifying information"
                ],
                score=1.0,
            )
        if age_days > max_age * APPROACHING_AGE_FRACTION:
            return CriterionResult(
                suggestions=["Content is approaching its aging threshold, schedule for review"],
                score=0.6,
            )
        if age_days > max_age * MIDLIFE_AGE_FRACTION:
            return CriterionResult(score=0.3)
        return CriterionResult()

    def _check_freshness(self, item: ContentItem) -> CriterionResult:
        freshness = item.freshness_score if item.freshness_score is not None else DEFAULT_FRESHNESS

        if freshness < self.freshness_threshold:
            return CriterionResult(
                is_outdated=True,
                reasons=[OutdatedReason.DEPRECATED_INFO],
                suggestions=["Content has a low freshness score, verify current relevance"],
                score=1.0,
            )
        if freshness < self.freshness_threshold * FRESHNESS_WARNING_FACTOR:
            return CriterionResult(
                suggestions=["Freshness score is declining, monitor for updates"],
                score=0.5,
            )
        return CriterionResult()

    def _check_topics(self, item: ContentItem, age_days: int) -> CriterionResult:
        if item.publish_date is None:
            return CriterionResult()

        rule = strictest_topic_rule(item.topics)
        if rule is None:
            return CriterionResult()

        phrase, max_age = rule
        if age_days > max_age:
            return CriterionResult(
                is_outdated=True,
                reasons=[OutdatedReason.TECHNOLOGY_CHANGE],
                suggestions=[
                    f"Content about {phrase} may be outdated due to rapid field evolution"
                ],
                score=1.0,
            )
        if age_days > max_age * TOPIC_WARNING_FRACTION:
            return CriterionResult(
                suggestions=[f"Monitor for updates in the {phrase} field"], score=0.4
            )
        return CriterionResult()

    def _check_references(self, item: ContentItem) -> CriterionResult:
        urls = [citation.url for citation in item.citations]
        if not urls:
            return CriterionResult()

        broken = self.link_checker.broken_links(urls)
        fraction = len(broken) / len(urls)
        if broken and fraction >= BROKEN_LINK_FRACTION:
            return CriterionResult(
                is_outdated=True,
                reasons=[OutdatedReason.BROKEN_LINKS],
                suggestions=[f"{len(broken)} broken references found, update or remove them"],
                score=fraction,
            )
        return CriterionResult(score=fraction)
