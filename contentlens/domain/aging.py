"""Aging and batch domain models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from contentlens.domain.content import ContentType, OutdatedReason


class AgingAssessment(BaseModel):
    """Result of running the aging rules against one content item."""

    content_id: str
    is_outdated: bool
    reasons: list[OutdatedReason] = []
    suggestions: list[str] = []
    aging_score: float = Field(ge=0.0, le=1.0)
    next_review_at: datetime | None = None


class ReviewItem(BaseModel):
    """A content item whose scheduled review date has passed."""

    content_id: str
    title: str
    type: ContentType
    topics: list[str] = []
    publish_date: datetime | None = None
    last_reviewed_at: datetime | None = None
    next_review_at: datetime | None = None


class AgingStatistics(BaseModel):
    total_content: int = 0
    outdated_content: int = 0
    due_for_review: int = 0
    avg_days_since_review: float | None = None
    by_type: dict[str, dict[str, int]] = {}
    outdated_reasons: dict[str, int] = {}


class BatchError(BaseModel):
    content_id: str
    error: str


class BatchResult(BaseModel):
    """Aggregate outcome of running one operation over many content items."""

    processed: int = 0
    failed: int = 0
    errors: list[BatchError] = []
    results: dict[str, Any] = {}
