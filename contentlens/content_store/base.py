from typing import Callable, List, Protocol

from contentlens.domain.content import AgingInfo, ContentItem


class ContentStore(Protocol):
    def get_content(self, content_id: str) -> ContentItem | None:
        """Get a content item by its ID."""
        ...

    def get_contents_by_ids(self, content_ids: list[str]) -> dict[str, ContentItem]:
        """Get multiple content items by their IDs, returning a dictionary mapping ID to item.

        Args:
            content_ids: List of content IDs to retrieve

        Returns:
            Dictionary mapping content_id to ContentItem for all found items
        """
        ...

    def scan(self, predicate: Callable[[ContentItem], bool] | None = None) -> List[ContentItem]:
        """Get every content item, or only those matching the predicate."""
        ...

    def update_aging(self, content_id: str, aging: AgingInfo) -> None:
        """Replace the aging record of a content item."""
        ...
