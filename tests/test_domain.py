"""Tests for domain model validation and the aging lifecycle."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from contentlens.domain.content import AgingInfo, ContentItem, OutdatedReason
from contentlens.domain.search import SearchFilters, SearchQuery
from contentlens.errors import ContentNotFoundError


def test_naive_dates_are_treated_as_utc() -> None:
    item = ContentItem(id="x", publish_date=datetime(2025, 5, 1))

    assert item.publish_date == datetime(2025, 5, 1, tzinfo=timezone.utc)


def test_scores_must_be_in_range() -> None:
    with pytest.raises(ValidationError):
        ContentItem(id="x", relevance_score=1.5)
    with pytest.raises(ValidationError):
        ContentItem(id="x", reads=-1)


def test_primary_author_and_text() -> None:
    item = ContentItem(
        id="x", title="Title", summary="Summary", key_insights=["Insight"], authors=["A", "B"]
    )

    assert item.primary_author == "A"
    assert item.descriptive_text == "Title Summary Insight"
    assert ContentItem(id="y").primary_author is None


def test_aging_lifecycle(now) -> None:
    aging = AgingInfo()
    aging.mark_outdated(
        [OutdatedReason.BROKEN_LINKS, OutdatedReason.BROKEN_LINKS], ["Fix"], now=now
    )

    assert aging.is_outdated
    assert aging.outdated_reasons == [OutdatedReason.BROKEN_LINKS]
    assert aging.last_reviewed_at == now

    aging.mark_up_to_date(datetime(2027, 1, 1), now=now)

    assert not aging.is_outdated
    assert aging.outdated_reasons == []
    assert aging.update_suggestions == []
    assert aging.next_review_at == datetime(2027, 1, 1, tzinfo=timezone.utc)


def test_inverted_ranges_are_rejected() -> None:
    with pytest.raises(ValidationError):
        SearchFilters(date_from=datetime(2025, 2, 1), date_to=datetime(2025, 1, 1))
    with pytest.raises(ValidationError):
        SearchFilters(relevance_min=0.8, relevance_max=0.2)


def test_query_pagination_and_blank_text() -> None:
    query = SearchQuery(text="   ", page=3, limit=10)

    assert query.text is None
    assert query.offset == 20
    with pytest.raises(ValidationError):
        SearchQuery(limit=101)


def test_content_not_found_message() -> None:
    error = ContentNotFoundError("abc")

    assert str(error) == "Content abc not found"
    assert error.content_id == "abc"
    assert isinstance(error, KeyError)
