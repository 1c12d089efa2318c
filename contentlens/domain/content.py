"""Content domain models."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class ContentType(str, Enum):
    ARTICLE = "article"
    PAPER = "paper"
    PODCAST = "podcast"
    VIDEO = "video"
    SOCIAL = "social"
    NEWSLETTER = "newsletter"
    BOOK = "book"
    COURSE = "course"
    OTHER = "other"


class OutdatedReason(str, Enum):
    FACTUAL_ERROR = "factual_error"
    DEPRECATED_INFO = "deprecated_info"
    BROKEN_LINKS = "broken_links"
    POLICY_CHANGE = "policy_change"
    TECHNOLOGY_CHANGE = "technology_change"
    OTHER = "other"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so that all comparisons are between aware values."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class Citation(BaseModel):
    """A link or reference cited by a content item."""

    url: str
    title: str | None = None


class AgingInfo(BaseModel):
    """Aging lifecycle record attached to a content item.

    A record is either fresh (``is_outdated`` False) or outdated. The only
    transitions are ``mark_outdated`` and ``mark_up_to_date``.

    Attributes:
        is_outdated: Whether the content has been flagged as outdated
        outdated_reasons: Unique reasons the content was flagged, in order
        update_suggestions: Human readable suggestions for refreshing the content
        last_reviewed_at: When the content was last assessed or reviewed
        next_review_at: When the content should be looked at again
    """

    is_outdated: bool = False
    outdated_reasons: list[OutdatedReason] = []
    update_suggestions: list[str] = []
    last_reviewed_at: datetime | None = None
    next_review_at: datetime | None = None

    @field_validator("last_reviewed_at", "next_review_at")
    @classmethod
    def normalize_review_dates(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @field_validator("outdated_reasons")
    @classmethod
    def unique_reasons(cls, reasons: list[OutdatedReason]) -> list[OutdatedReason]:
        return list(dict.fromkeys(reasons))

    def mark_outdated(
        self,
        reasons: list[OutdatedReason],
        suggestions: list[str],
        now: datetime | None = None,
    ) -> None:
        self.is_outdated = True
        self.outdated_reasons = list(dict.fromkeys(reasons))
        self.update_suggestions = list(suggestions)
        self.last_reviewed_at = now or utc_now()

    def mark_up_to_date(self, next_review_at: datetime, now: datetime | None = None) -> None:
        self.is_outdated = False
        self.outdated_reasons = []
        self.update_suggestions = []
        self.last_reviewed_at = now or utc_now()
        self.next_review_at = as_utc(next_review_at)


class ContentItem(BaseModel):
    """A previously ingested piece of content.

    The content store owns these records; the library only reads them and
    writes back the ``aging`` sub-record.
    """

    id: str
    title: str = ""
    url: str | None = None
    authors: list[str] = []
    type: ContentType = ContentType.OTHER
    categories: list[str] = []
    topics: list[str] = []
    publish_date: datetime | None = None

    summary: str = ""
    full_text: str = ""
    key_insights: list[str] = []
    citations: list[Citation] = []

    views: int = Field(default=0, ge=0)
    saves: int = Field(default=0, ge=0)
    shares: int = Field(default=0, ge=0)
    reads: int = Field(default=0, ge=0)

    relevance_score: float | None = Field(default=None, ge=0.0, le=1.0)
    quality_score: float | None = Field(default=None, ge=0.0, le=1.0)
    freshness_score: float | None = Field(default=None, ge=0.0, le=1.0)

    processed: bool = True
    aging: AgingInfo = Field(default_factory=AgingInfo)

    @field_validator("publish_date")
    @classmethod
    def normalize_publish_date(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @property
    def primary_author(self) -> str | None:
        return self.authors[0] if self.authors else None

    @property
    def descriptive_text(self) -> str:
        """Title, summary and key insights joined together."""
        return " ".join(part for part in [self.title, self.summary, *self.key_insights] if part)

    @property
    def searchable_text(self) -> str:
        """Every text field of the item, used for full-text matching."""
        parts = [self.title, self.summary, *self.key_insights, self.full_text, *self.authors]
        return " ".join(part for part in parts if part)
