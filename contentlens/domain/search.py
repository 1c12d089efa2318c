"""Search domain models."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from contentlens.domain.content import ContentItem, ContentType, as_utc


class SortField(str, Enum):
    RELEVANCE = "relevance"
    DATE = "date"
    QUALITY = "quality"
    VIEWS = "views"
    SAVES = "saves"
    SHARES = "shares"
    READS = "reads"
    TITLE = "title"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SearchFilters(BaseModel):
    """Filters applied identically by every search backend.

    Attributes:
        types: Only return items of one of these content types
        categories: Only return items sharing at least one of these categories
        topics: Only return items sharing at least one of these topics
        author: Case-insensitive substring an author name must contain
        date_from: Inclusive lower bound on the publish date
        date_to: Inclusive upper bound on the publish date
        relevance_min: Inclusive lower bound on the stored relevance score
        relevance_max: Inclusive upper bound on the stored relevance score
        include_outdated: Also return items flagged as outdated
    """

    types: list[ContentType] = []
    categories: list[str] = []
    topics: list[str] = []
    author: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    relevance_min: float | None = Field(default=None, ge=0.0, le=1.0)
    relevance_max: float | None = Field(default=None, ge=0.0, le=1.0)
    include_outdated: bool = False

    @field_validator("date_from", "date_to")
    @classmethod
    def normalize_dates(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @model_validator(mode="after")
    def check_ranges(self) -> "SearchFilters":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        if (
            self.relevance_min is not None
            and self.relevance_max is not None
            and self.relevance_min > self.relevance_max
        ):
            raise ValueError("relevance_min must not be greater than relevance_max")
        return self


class SortSpec(BaseModel):
    field: SortField = SortField.RELEVANCE
    direction: SortDirection = SortDirection.DESC


class SearchQuery(BaseModel):
    """A full-text query with filters, sorting and pagination."""

    text: str | None = None
    filters: SearchFilters = SearchFilters()
    sort: SortSpec = SortSpec()
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @field_validator("text")
    @classmethod
    def blank_text_is_no_text(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class SearchHit(BaseModel):
    item: ContentItem
    score: float
    highlights: dict[str, list[str]] = {}


class SearchResult(BaseModel):
    """A page of ranked search hits plus the total number of matches."""

    results: list[SearchHit] = []
    total_count: int = 0
    max_score: float | None = None
    backend: str = ""


class Suggestion(BaseModel):
    kind: Literal["title", "author", "topic"]
    value: str
    label: str
    score: float = 0.0


class FacetCount(BaseModel):
    value: str
    count: int


class SearchFacets(BaseModel):
    """Value counts and ranges over the searchable corpus."""

    types: list[FacetCount] = []
    categories: list[FacetCount] = []
    topics: list[FacetCount] = []
    authors: list[FacetCount] = []
    min_date: datetime | None = None
    max_date: datetime | None = None
    min_relevance: float | None = None
    max_relevance: float | None = None
    avg_relevance: float | None = None
