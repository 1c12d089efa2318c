from typing import Protocol

from contentlens.domain.content import ContentItem
from contentlens.domain.search import SearchQuery, SearchResult, Suggestion


class SearchBackend(Protocol):
    name: str

    def search(self, query: SearchQuery) -> SearchResult:
        """Run a filtered, sorted and paginated search."""
        ...

    def suggest(self, prefix: str, limit: int = 10) -> list[Suggestion]:
        """Get autocomplete suggestions for a prefix."""
        ...

    def index_content(self, item: ContentItem) -> None:
        """Add or replace a content item in the search index."""
        ...

    def remove_content(self, content_id: str) -> None:
        """Remove a content item from the search index."""
        ...
