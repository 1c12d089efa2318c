"""In-process evaluation of the search filter, sort and pagination contract."""

from collections.abc import Iterable
from typing import Any, Callable

from contentlens.domain.content import ContentItem
from contentlens.domain.search import (
    SearchFilters,
    SearchHit,
    SortDirection,
    SortField,
    SortSpec,
)

_STORED_SORT_KEYS: dict[SortField, Callable[[ContentItem], Any]] = {
    SortField.DATE: lambda item: item.publish_date,
    SortField.QUALITY: lambda item: item.quality_score,
    SortField.VIEWS: lambda item: item.views,
    SortField.SAVES: lambda item: item.saves,
    SortField.SHARES: lambda item: item.shares,
    SortField.READS: lambda item: item.reads,
    SortField.TITLE: lambda item: item.title.lower() if item.title else None,
}


def _overlaps(values: Iterable[str], wanted: Iterable[str]) -> bool:
    return not set(values).isdisjoint(wanted)


def matches_filters(item: ContentItem, filters: SearchFilters) -> bool:
    """Whether a content item passes every filter.

    Unprocessed items never match, and outdated items only match when
    ``include_outdated`` is set. Range filters reject items missing the field.
    """
    if not item.processed:
        return False
    if item.aging.is_outdated and not filters.include_outdated:
        return False

    if filters.types and item.type not in filters.types:
        return False
    if filters.categories and not _overlaps(item.categories, filters.categories):
        return False
    if filters.topics and not _overlaps(item.topics, filters.topics):
        return False

    if filters.author:
        needle = filters.author.strip().lower()
        if not any(needle in author.lower() for author in item.authors):
            return False

    if filters.date_from or filters.date_to:
        if item.publish_date is None:
            return False
        if filters.date_from and item.publish_date < filters.date_from:
            return False
        if filters.date_to and item.publish_date > filters.date_to:
            return False

    if filters.relevance_min is not None or filters.relevance_max is not None:
        if item.relevance_score is None:
            return False
        if filters.relevance_min is not None and item.relevance_score < filters.relevance_min:
            return False
        if filters.relevance_max is not None and item.relevance_score > filters.relevance_max:
            return False

    return True


def sort_hits(hits: list[SearchHit], sort: SortSpec, *, has_text: bool) -> list[SearchHit]:
    """Sort hits by the requested field.

    Relevance means the text match score when a query string was given and the
    stored relevance score otherwise. Hits missing the sort value go last, and
    ties are broken by ascending ID.
    """
    if sort.field is SortField.RELEVANCE:
        if has_text:
            key: Callable[[SearchHit], Any] = lambda hit: hit.score  # noqa: E731
        else:
            key = lambda hit: hit.item.relevance_score  # noqa: E731
    else:
        stored_key = _STORED_SORT_KEYS[sort.field]
        key = lambda hit: stored_key(hit.item)  # noqa: E731

    present = sorted((h for h in hits if key(h) is not None), key=lambda h: h.item.id)
    missing = sorted((h for h in hits if key(h) is None), key=lambda h: h.item.id)

    present.sort(key=key, reverse=sort.direction is SortDirection.DESC)
    return present + missing
