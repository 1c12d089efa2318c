import sys

from loguru import logger

from contentlens.aging import AgingRuleEngine, AgingService, SampledLinkChecker
from contentlens.config import settings
from contentlens.content_store.local import LocalContentStore
from contentlens.library import ContentLibrary
from contentlens.relatedness import ConnectionGraphBuilder, RelatedContentFinder
from contentlens.search_backends import HybridSearchIndex

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Loading content store from {settings.content_store_path}")
store = LocalContentStore(filepath=settings.content_store_path)

search_index = HybridSearchIndex.create(
    store=store,
    url=settings.search_url,
    index=settings.search_index,
    timeout=settings.search_timeout,
    probe_timeout=settings.search_probe_timeout,
)
finder = RelatedContentFinder(
    store=store,
    threshold=settings.similarity_threshold,
    limit=settings.max_related_items,
    max_workers=settings.batch_workers,
)
graph_builder = ConnectionGraphBuilder(
    neighbor_limit=settings.graph_neighbor_limit,
    similarity_threshold=settings.graph_similarity_threshold,
)
aging = AgingService(
    store=store,
    engine=AgingRuleEngine(
        link_checker=SampledLinkChecker(sample_rate=settings.broken_link_sample_rate),
        freshness_threshold=settings.freshness_threshold,
    ),
    max_workers=settings.batch_workers,
)
library = ContentLibrary(
    store=store,
    search_index=search_index,
    finder=finder,
    graph_builder=graph_builder,
    aging=aging,
    graph_max_depth=settings.graph_max_depth,
    graph_max_nodes=settings.graph_max_nodes,
)
logger.info(f"Content library ready with {search_index.backend_name} search")
