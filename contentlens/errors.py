"""Exceptions raised by the content library core."""


class ContentNotFoundError(KeyError):
    """Raised when a content id is not known to the content store."""

    def __init__(self, content_id: str) -> None:
        super().__init__(f"Content {content_id} not found")
        self.content_id = content_id

    def __str__(self) -> str:
        return self.args[0]


class InvalidQueryError(ValueError):
    """Raised when a search query or filter cannot be executed as given."""


class SearchBackendUnavailable(RuntimeError):
    """Raised by a network search backend when the remote engine cannot be reached."""
