"""Search backends and the hybrid index that chooses between them."""

from contentlens.search_backends.base import SearchBackend
from contentlens.search_backends.elasticsearch_backend import ElasticsearchBackend
from contentlens.search_backends.hybrid import HybridSearchIndex
from contentlens.search_backends.local_backend import LocalSearchBackend

__all__ = [
    "ElasticsearchBackend",
    "HybridSearchIndex",
    "LocalSearchBackend",
    "SearchBackend",
]
