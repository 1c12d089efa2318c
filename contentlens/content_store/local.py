import json
from pathlib import Path
from threading import Lock
from typing import Callable, Dict, List

from contentlens.content_store.base import ContentStore
from contentlens.domain.content import AgingInfo, ContentItem
from contentlens.errors import ContentNotFoundError


class LocalContentStore(ContentStore):
    """Local content store that keeps content items in a JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalContentStore.

        Args:
            filepath: Path to content store file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path when save() is called.
                     If not provided, creates empty store in memory only.
        """
        self._filepath = str(filepath) if filepath else None
        self._lock = Lock()

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            self._contents = {
                content_id: ContentItem(**content_data)
                for content_id, content_data in data["contents"].items()
            }
        else:
            self._contents = {}

    @classmethod
    def from_data(
        cls, contents: Dict[str, ContentItem] | List[ContentItem] | None = None
    ) -> "LocalContentStore":
        """Create LocalContentStore from provided data (useful for testing).

        Args:
            contents: Content items, either keyed by ID or as a plain list

        Returns:
            LocalContentStore instance with provided data
        """
        instance = cls(filepath=None)
        if isinstance(contents, dict):
            instance._contents = dict(contents)
        else:
            instance._contents = {item.id: item for item in contents or []}
        return instance

    def get_content(self, content_id: str) -> ContentItem | None:
        """Get a content item by its ID."""
        return self._contents.get(content_id)

    def get_contents_by_ids(self, content_ids: list[str]) -> dict[str, ContentItem]:
        """Get multiple content items by their IDs, returning a dictionary mapping ID to item.

        Args:
            content_ids: List of content IDs to retrieve

        Returns:
            Dictionary mapping content_id to ContentItem for all found items
        """
        return {
            content_id: self._contents[content_id]
            for content_id in content_ids
            if content_id in self._contents
        }

    def scan(self, predicate: Callable[[ContentItem], bool] | None = None) -> List[ContentItem]:
        """Get every content item, or only those matching the predicate."""
        items = list(self._contents.values())
        if predicate is None:
            return items
        return [item for item in items if predicate(item)]

    def update_aging(self, content_id: str, aging: AgingInfo) -> None:
        """Replace the aging record of a content item."""
        with self._lock:
            item = self._contents.get(content_id)
            if item is None:
                raise ContentNotFoundError(content_id)
            item.aging = aging.model_copy(deep=True)

    def add_content(self, item: ContentItem) -> None:
        """Add a new content item or replace an existing one."""
        with self._lock:
            self._contents[item.id] = item

    def delete_content(self, content_id: str) -> None:
        """Delete a content item."""
        with self._lock:
            if content_id in self._contents:
                del self._contents[content_id]

    def get_all_content_ids(self) -> set[str]:
        """Get all content IDs in the store."""
        return set(self._contents.keys())

    def save(self, filepath: str | None = None) -> None:
        """Save the content store to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        data = {
            "contents": {
                content_id: item.model_dump(mode="json")
                for content_id, item in self._contents.items()
            },
        }
        with open(str(save_path), "w") as f:
            json.dump(data, f)

    def clear(self) -> None:
        """Clear all data from the store."""
        self._contents.clear()
