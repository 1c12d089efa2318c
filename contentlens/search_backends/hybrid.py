from loguru import logger

from contentlens.content_store.base import ContentStore
from contentlens.domain.content import ContentItem
from contentlens.domain.search import SearchFacets, SearchQuery, SearchResult, Suggestion
from contentlens.errors import SearchBackendUnavailable
from contentlens.search_backends.base import SearchBackend
from contentlens.search_backends.elasticsearch_backend import ElasticsearchBackend
from contentlens.search_backends.local_backend import LocalSearchBackend
from contentlens.text_analysis.analyzer import TextAnalyzer

MIN_SUGGEST_PREFIX = 2


class HybridSearchIndex:
    """Routes search operations to a network backend, falling back to in-process search.

    The network backend is chosen once, when the index is created. If it later
    becomes unreachable, each operation degrades on its own: searches are answered
    by the local backend, suggestions come back empty and index updates are skipped.
    """

    def __init__(
        self, *, fallback: LocalSearchBackend, primary: SearchBackend | None = None
    ) -> None:
        self.fallback = fallback
        self.primary = primary

    @classmethod
    def create(
        cls,
        *,
        store: ContentStore,
        url: str,
        index: str,
        timeout: float,
        probe_timeout: float,
        analyzer: TextAnalyzer | None = None,
    ) -> "HybridSearchIndex":
        """Probe the search engine once and build the index around the result.

        Args:
            store: Content store shared by both backends
            url: Base URL of the Elasticsearch cluster
            index: Name of the content index
            timeout: Timeout in seconds for regular requests
            probe_timeout: Timeout in seconds for the startup probe
            analyzer: Text analyzer for the local backend

        Returns:
            HybridSearchIndex using Elasticsearch when it answered the probe
        """
        fallback = LocalSearchBackend(store=store, analyzer=analyzer)
        network = ElasticsearchBackend(store=store, base_url=url, index=index, timeout=timeout)

        if not network.ping(timeout=probe_timeout):
            logger.warning(f"Elasticsearch at {url} is not reachable, using local search")
            network.close()
            return cls(fallback=fallback)

        try:
            network.ensure_index()
        except SearchBackendUnavailable as e:
            logger.warning(f"Could not prepare index {index}, using local search: {e}")
            network.close()
            return cls(fallback=fallback)

        logger.info(f"Using Elasticsearch at {url} with index {index}")
        return cls(fallback=fallback, primary=network)

    @property
    def backend_name(self) -> str:
        return self.primary.name if self.primary is not None else self.fallback.name

    def search(self, query: SearchQuery) -> SearchResult:
        if self.primary is not None:
            try:
                return self.primary.search(query)
            except SearchBackendUnavailable as e:
                logger.warning(f"Search backend {self.primary.name} failed, using local: {e}")
        return self.fallback.search(query)

    def suggest(self, prefix: str, limit: int = 10) -> list[Suggestion]:
        prefix = prefix.strip()
        if len(prefix) < MIN_SUGGEST_PREFIX or limit <= 0 or self.primary is None:
            return []
        try:
            return self.primary.suggest(prefix, limit)
        except SearchBackendUnavailable as e:
            logger.warning(f"Suggestions unavailable from {self.primary.name}: {e}")
            return []

    def index_content(self, item: ContentItem) -> bool:
        """Index an item; returns whether a search engine actually received it."""
        if self.primary is None:
            self.fallback.index_content(item)
            return False
        try:
            self.primary.index_content(item)
        except SearchBackendUnavailable as e:
            logger.warning(f"Could not index content {item.id}: {e}")
            return False
        return True

    def remove_content(self, content_id: str) -> bool:
        """Remove an item; returns whether a search engine actually processed the removal."""
        if self.primary is None:
            self.fallback.remove_content(content_id)
            return False
        try:
            self.primary.remove_content(content_id)
        except SearchBackendUnavailable as e:
            logger.warning(f"Could not remove content {content_id} from the index: {e}")
            return False
        return True

    def facets(self, text: str | None = None) -> SearchFacets:
        return self.fallback.facets(text)

    def close(self) -> None:
        close = getattr(self.primary, "close", None)
        if close is not None:
            close()
