import re
from collections import Counter

import numpy as np
from loguru import logger
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from contentlens.content_store.base import ContentStore
from contentlens.domain.content import ContentItem
from contentlens.domain.search import (
    FacetCount,
    SearchFacets,
    SearchHit,
    SearchQuery,
    SearchResult,
    Suggestion,
)
from contentlens.search_backends.base import SearchBackend
from contentlens.search_backends.filtering import matches_filters, sort_hits
from contentlens.text_analysis.analyzer import TextAnalyzer

_WORD = re.compile(r"\w+")

FRAGMENT_SIZE = 150
MAX_FRAGMENTS = 3
MAX_FACET_VALUES = 20


class LocalSearchBackend(SearchBackend):
    """In-process search over the content store using TF-IDF cosine similarity.

    Nothing is cached between calls: every search vectorizes the store's current
    corpus, so results always reflect the latest content.
    """

    name = "local"

    def __init__(self, *, store: ContentStore, analyzer: TextAnalyzer | None = None) -> None:
        """Initialize the backend.

        Args:
            store: Content store holding the searchable corpus
            analyzer: Text analyzer used to tokenize and stem documents and queries
        """
        self.store = store
        self.analyzer = analyzer or TextAnalyzer()

    def search(self, query: SearchQuery) -> SearchResult:
        corpus = self.store.scan()
        candidates = [item for item in corpus if matches_filters(item, query.filters)]

        if query.text:
            text_scores = self._text_scores(query.text, corpus)
            hits = [
                SearchHit(item=item, score=text_scores[item.id])
                for item in candidates
                if text_scores.get(item.id, 0.0) > 0.0
            ]
        else:
            hits = [SearchHit(item=item, score=item.relevance_score or 0.0) for item in candidates]

        hits = sort_hits(hits, query.sort, has_text=query.text is not None)
        page = hits[query.offset : query.offset + query.limit]

        if query.text:
            query_stems = set(self.analyzer.stemmed_tokens(query.text))
            for hit in page:
                hit.highlights = self._highlights(hit.item, query_stems)

        return SearchResult(
            results=page,
            total_count=len(hits),
            max_score=max((hit.score for hit in hits), default=None),
            backend=self.name,
        )

    def suggest(self, prefix: str, limit: int = 10) -> list[Suggestion]:  # noqa: ARG002
        return []

    def index_content(self, item: ContentItem) -> None:
        logger.debug(f"Local search reads the store directly, nothing to index for {item.id}")

    def remove_content(self, content_id: str) -> None:
        logger.debug(f"Local search reads the store directly, nothing to remove for {content_id}")

    def facets(self, text: str | None = None) -> SearchFacets:
        """Count facet values over processed, non-outdated items matching an optional text."""
        corpus = self.store.scan()
        items = [item for item in corpus if item.processed and not item.aging.is_outdated]

        if text and text.strip():
            text_scores = self._text_scores(text.strip(), corpus)
            items = [item for item in items if text_scores.get(item.id, 0.0) > 0.0]

        if not items:
            return SearchFacets()

        types = Counter(item.type.value for item in items)
        categories = Counter(category for item in items for category in set(item.categories))
        topics = Counter(topic for item in items for topic in set(item.topics))
        authors = Counter(author for item in items for author in set(item.authors))

        dates = [item.publish_date for item in items if item.publish_date is not None]
        relevances = [item.relevance_score for item in items if item.relevance_score is not None]

        return SearchFacets(
            types=_facet_counts(types),
            categories=_facet_counts(categories, MAX_FACET_VALUES),
            topics=_facet_counts(topics, MAX_FACET_VALUES),
            authors=_facet_counts(authors, MAX_FACET_VALUES),
            min_date=min(dates, default=None),
            max_date=max(dates, default=None),
            min_relevance=min(relevances, default=None),
            max_relevance=max(relevances, default=None),
            avg_relevance=float(np.mean(relevances)) if relevances else None,
        )

    def _text_scores(self, text: str, corpus: list[ContentItem]) -> dict[str, float]:
        """Cosine similarity between the query and every document of the corpus."""
        if not corpus:
            return {}

        vectorizer = TfidfVectorizer(analyzer=self.analyzer.stemmed_tokens)
        try:
            document_matrix = vectorizer.fit_transform([item.searchable_text for item in corpus])
        except ValueError:
            # Every document is empty after stop-word removal
            return {}

        query_vector = vectorizer.transform([text])
        similarities = np.clip(cosine_similarity(query_vector, document_matrix).flatten(), 0, 1)
        return {item.id: float(score) for item, score in zip(corpus, similarities)}

    def _highlights(self, item: ContentItem, query_stems: set[str]) -> dict[str, list[str]]:
        highlights = {}
        for field, text in (
            ("title", item.title),
            ("summary", item.summary),
            ("full_text", item.full_text),
        ):
            fragments = self._fragments(text, query_stems)
            if fragments:
                highlights[field] = fragments
        return highlights

    def _fragments(self, text: str | None, query_stems: set[str]) -> list[str]:
        """Cut up to MAX_FRAGMENTS windows of text around matched terms."""
        if not text or not query_stems:
            return []

        def is_match(word: str) -> bool:
            return self.analyzer.stem(word.lower()) in query_stems

        def emphasize(match: re.Match) -> str:
            word = match.group()
            return f"<em>{word}</em>" if is_match(word) else word

        fragments = []
        covered_until = -1
        for match in _WORD.finditer(text):
            if match.start() < covered_until or not is_match(match.group()):
                continue

            start = max(0, match.start() - FRAGMENT_SIZE // 3)
            end = min(len(text), start + FRAGMENT_SIZE)
            covered_until = end
            fragments.append(_WORD.sub(emphasize, text[start:end]).strip())

            if len(fragments) >= MAX_FRAGMENTS:
                break

        return fragments


def _facet_counts(counts: Counter, limit: int | None = None) -> list[FacetCount]:
    ordered = sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))
    if limit is not None:
        ordered = ordered[:limit]
    return [FacetCount(value=value, count=count) for value, count in ordered]
