"""Aging thresholds and canned update suggestions."""

import re

from contentlens.domain.content import ContentType

# Maximum age in days before content of a type counts as outdated
TYPE_MAX_AGE_DAYS = {
    ContentType.ARTICLE: 365,
    ContentType.PAPER: 1095,
    ContentType.PODCAST: 180,
    ContentType.VIDEO: 730,
    ContentType.SOCIAL: 90,
    ContentType.NEWSLETTER: 365,
    ContentType.BOOK: 1825,
    ContentType.COURSE: 730,
    ContentType.OTHER: 730,
}

# Maximum age in days for content about fast- or slow-moving topics
TOPIC_MAX_AGE_DAYS = {
    "ai": 180,
    "llm": 180,
    "machine learning": 365,
    "deep learning": 365,
    "technology": 365,
    "research": 730,
    "methodology": 1095,
    "theory": 1460,
}

APPROACHING_AGE_FRACTION = 0.8
MIDLIFE_AGE_FRACTION = 0.5
TOPIC_WARNING_FRACTION = 0.7

DEFAULT_FRESHNESS = 0.5
FRESHNESS_WARNING_FACTOR = 1.5

BROKEN_LINK_FRACTION = 0.1

MIN_REVIEW_INTERVAL_DAYS = 30

TYPE_UPDATE_SUGGESTIONS = {
    ContentType.ARTICLE: [
        "Verify facts and statistics are still current",
        "Check if referenced companies or products still exist",
        "Update any outdated screenshots or examples",
    ],
    ContentType.PAPER: [
        "Review recent publications in the same field",
        "Check if methodologies are still considered best practice",
        "Verify that cited works are still accessible",
    ],
    ContentType.VIDEO: [
        "Check if video content is still accessible",
        "Verify that demonstrated tools/software are still available",
    ],
    ContentType.PODCAST: [
        "Check if mentioned resources are still available",
        "Verify guest information and affiliations",
    ],
}

FAST_MOVING_TOPICS = ("ai", "llm")
FAST_MOVING_SUGGESTIONS = [
    "AI/LLM field evolves rapidly, check for newer models or techniques",
    "Verify that mentioned AI tools and services are still available",
]

_TOPIC_PATTERNS = {
    phrase: re.compile(rf"\b{re.escape(phrase)}\b") for phrase in TOPIC_MAX_AGE_DAYS
}


def topic_mentions(topic: str, phrase: str) -> bool:
    """Whether a topic contains the rule phrase as whole words, ignoring case."""
    pattern = _TOPIC_PATTERNS.get(phrase) or re.compile(rf"\b{re.escape(phrase)}\b")
    return pattern.search(topic.lower()) is not None


def strictest_topic_rule(topics: list[str]) -> tuple[str, int] | None:
    """Find the matching topic rule with the smallest maximum age.

    Returns:
        The rule phrase and its maximum age in days, or None if no rule matches
    """
    matches = [
        (max_age, phrase)
        for phrase, max_age in TOPIC_MAX_AGE_DAYS.items()
        if any(topic_mentions(topic, phrase) for topic in topics)
    ]
    if not matches:
        return None
    max_age, phrase = min(matches)
    return phrase, max_age
