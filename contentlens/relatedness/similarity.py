"""Multi-factor similarity scoring and relationship classification."""

import math
from collections.abc import Iterable

from contentlens.domain.content import ContentItem
from contentlens.domain.relationships import RelationshipType, SimilarityBreakdown
from contentlens.text_analysis.analyzer import TextAnalyzer

FACTOR_WEIGHTS = {
    "topic": 0.30,
    "category": 0.20,
    "author": 0.15,
    "type": 0.10,
    "temporal": 0.10,
    "text": 0.15,
}

UPDATE_MARKERS = ("v2", "version 2", "updated", "revised", "part 2", "sequel")

TEMPORAL_DECAY_DAYS = 30.0
MISSING_DATE_SIMILARITY = 0.5
TEXT_KEYWORD_LIMIT = 50
SIMILAR_TOPIC_THRESHOLD = 0.7


def jaccard(first: Iterable[str], second: Iterable[str]) -> float:
    """Jaccard coefficient; 1 when both sets are empty, 0 when exactly one is."""
    set1 = set(first)
    set2 = set(second)
    if not set1 and not set2:
        return 1.0
    if not set1 or not set2:
        return 0.0
    return len(set1 & set2) / len(set1 | set2)


def _normalized(values: Iterable[str]) -> set[str]:
    return {v.strip().lower() for v in values if v and v.strip()}


class SimilarityScorer:
    """Scores how related two content items are and classifies the relationship."""

    def __init__(self, analyzer: TextAnalyzer | None = None) -> None:
        self.analyzer = analyzer or TextAnalyzer()

    def score(self, first: ContentItem, second: ContentItem) -> float:
        """Weighted mean of the six similarity factors, in [0, 1]."""
        return self._weighted_total(self._factors(first, second))

    def breakdown(self, first: ContentItem, second: ContentItem) -> SimilarityBreakdown:
        factors = self._factors(first, second)
        total = self._weighted_total(factors)
        return SimilarityBreakdown(
            source_id=first.id,
            target_id=second.id,
            total=total,
            relationship_type=self.classify_relationship(first, second, total),
            **factors,
        )

    def _factors(self, first: ContentItem, second: ContentItem) -> dict[str, float]:
        return {
            "topic": self.topic_similarity(first, second),
            "category": self.category_similarity(first, second),
            "author": self.author_similarity(first, second),
            "type": self.type_similarity(first, second),
            "temporal": self.temporal_similarity(first, second),
            "text": self.text_similarity(first, second),
        }

    @staticmethod
    def _weighted_total(factors: dict[str, float]) -> float:
        total_score = 0.0
        weight_sum = 0.0
        for name, weight in FACTOR_WEIGHTS.items():
            total_score += factors[name] * weight
            weight_sum += weight
        return max(0.0, min(1.0, total_score / weight_sum))

    def topic_similarity(self, first: ContentItem, second: ContentItem) -> float:
        return jaccard(_normalized(first.topics), _normalized(second.topics))

    def category_similarity(self, first: ContentItem, second: ContentItem) -> float:
        return jaccard(_normalized(first.categories), _normalized(second.categories))

    @staticmethod
    def author_similarity(first: ContentItem, second: ContentItem) -> float:
        author1 = (first.primary_author or "").strip().lower()
        author2 = (second.primary_author or "").strip().lower()
        if not author1 and not author2:
            return 1.0
        if not author1 or not author2:
            return 0.0
        return 1.0 if author1 == author2 else 0.0

    @staticmethod
    def type_similarity(first: ContentItem, second: ContentItem) -> float:
        return 1.0 if first.type == second.type else 0.0

    @staticmethod
    def temporal_similarity(first: ContentItem, second: ContentItem) -> float:
        """Exponential decay over the gap between publish dates."""
        if first.publish_date is None or second.publish_date is None:
            return MISSING_DATE_SIMILARITY
        days_apart = abs((first.publish_date - second.publish_date).total_seconds()) / 86400
        return math.exp(-days_apart / TEMPORAL_DECAY_DAYS)

    def text_similarity(self, first: ContentItem, second: ContentItem) -> float:
        keywords1 = self.analyzer.key_terms(first.descriptive_text, TEXT_KEYWORD_LIMIT)
        keywords2 = self.analyzer.key_terms(second.descriptive_text, TEXT_KEYWORD_LIMIT)
        return jaccard(keywords1, keywords2)

    def classify_relationship(
        self, first: ContentItem, second: ContentItem, score: float  # noqa: ARG002
    ) -> RelationshipType:
        """Classify how ``first`` relates to ``second``.

        Checks run in a fixed precedence: reference, same author, update,
        similar topic, then plain similarity. Reference detection only looks
        at the text of ``first``, so the result may differ when the arguments
        are swapped.
        """
        if self.has_direct_reference(first, second):
            return RelationshipType.REFERENCE

        both_authored = bool(first.primary_author and second.primary_author)
        if both_authored and self.author_similarity(first, second) == 1.0:
            return RelationshipType.SAME_AUTHOR

        if self.is_update_or_sequel(first, second):
            return RelationshipType.UPDATE

        if self.topic_similarity(first, second) > SIMILAR_TOPIC_THRESHOLD:
            return RelationshipType.SIMILAR_TOPIC

        return RelationshipType.SIMILAR

    @staticmethod
    def has_direct_reference(first: ContentItem, second: ContentItem) -> bool:
        """Whether the text of ``first`` mentions the URL or title of ``second``."""
        search_text = " ".join(
            part for part in [first.full_text, first.summary, *first.key_insights] if part
        ).lower()
        if not search_text:
            return False

        if second.url and second.url.strip().lower() in search_text:
            return True
        title = second.title.strip().lower()
        return bool(title) and title in search_text

    @staticmethod
    def is_update_or_sequel(first: ContentItem, second: ContentItem) -> bool:
        titles = (first.title.lower(), second.title.lower())
        return any(marker in title for marker in UPDATE_MARKERS for title in titles)
