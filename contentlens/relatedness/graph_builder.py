"""Building bounded connection graphs around a root content item."""

import logging
from collections import deque
from typing import Callable, Protocol

from contentlens.domain.content import ContentItem, ContentType
from contentlens.domain.relationships import (
    ConnectionGraph,
    GraphNode,
    NetworkMetrics,
    NetworkSize,
    NetworkStatistics,
    RelatedContent,
    SimilarityEdge,
)
from contentlens.errors import ContentNotFoundError

logger = logging.getLogger(__name__)

NODE_COLORS = {
    ContentType.ARTICLE: "#3498db",
    ContentType.PAPER: "#e74c3c",
    ContentType.PODCAST: "#9b59b6",
    ContentType.VIDEO: "#f39c12",
    ContentType.SOCIAL: "#2ecc71",
    ContentType.NEWSLETTER: "#34495e",
    ContentType.BOOK: "#e67e22",
    ContentType.COURSE: "#1abc9c",
}
DEFAULT_NODE_COLOR = "#95a5a6"

BASE_NODE_SIZE = 10.0
MAX_NODE_SIZE = 50.0

ContentLookup = Callable[[str], ContentItem | None]


class RelatedFinder(Protocol):
    def __call__(
        self, content_id: str, *, limit: int, threshold: float
    ) -> list[RelatedContent]: ...


def calculate_node_size(item: ContentItem) -> float:
    """Node size grows with engagement and stored scores, capped at MAX_NODE_SIZE."""
    size = BASE_NODE_SIZE
    size += min(item.reads / 10, 20)
    size += min(item.saves / 5, 15)
    size += min(item.shares / 3, 10)
    size += (item.relevance_score or 0.0) * 10
    size += (item.quality_score or 0.0) * 10
    return min(size, MAX_NODE_SIZE)


def calculate_network_metrics(
    nodes: list[GraphNode], edges: list[SimilarityEdge]
) -> NetworkMetrics:
    """Compute summary metrics over the final node and edge sets.

    Args:
        nodes: Graph nodes
        edges: Graph edges, all of which connect two of the given nodes

    Returns:
        NetworkMetrics; the clustering coefficient is the simplified bound
        edges / (2 * nodes), not a local clustering computation
    """
    node_count = len(nodes)
    edge_count = len(edges)
    if node_count == 0:
        return NetworkMetrics()

    max_possible_edges = node_count * (node_count - 1) / 2
    density = edge_count / max_possible_edges if max_possible_edges > 0 else 0.0

    degrees = {node.id: 0 for node in nodes}
    for edge in edges:
        degrees[edge.source_id] = degrees.get(edge.source_id, 0) + 1
        degrees[edge.target_id] = degrees.get(edge.target_id, 0) + 1

    degree_values = list(degrees.values())

    return NetworkMetrics(
        node_count=node_count,
        edge_count=edge_count,
        density=density,
        avg_degree=sum(degree_values) / node_count,
        max_degree=max(degree_values),
        clustering_coefficient=min(edge_count / (node_count * 2), 1.0),
    )


class ConnectionGraphBuilder:
    """Grows a connection graph breadth-first from a root content item."""

    def __init__(self, *, neighbor_limit: int = 10, similarity_threshold: float = 0.2):
        """Initialize the builder.

        Args:
            neighbor_limit: Maximum number of neighbours requested per expanded node
            similarity_threshold: Minimum similarity for a neighbour to become an edge
        """
        self.neighbor_limit = neighbor_limit
        self.similarity_threshold = similarity_threshold

    def build(
        self,
        root_id: str,
        lookup: ContentLookup,
        related_finder: RelatedFinder,
        max_depth: int = 2,
        max_nodes: int = 50,
    ) -> ConnectionGraph:
        """Build the connection graph around a root item.

        Args:
            root_id: ID of the item the graph grows from
            lookup: Returns the content item for an ID, or None if it does not exist
            related_finder: Returns scored neighbours of an item
            max_depth: Maximum hop distance from the root; 0 gives only the root
            max_nodes: Maximum number of nodes in the graph

        Returns:
            ConnectionGraph whose edges only connect nodes of the graph

        Raises:
            ContentNotFoundError: If the root item does not exist
        """
        if max_depth < 0:
            raise ValueError("max_depth must not be negative")
        if max_nodes < 1:
            raise ValueError("max_nodes must be at least 1")

        nodes: dict[str, GraphNode] = {}
        edges: dict[frozenset[str], SimilarityEdge] = {}
        visited: set[str] = set()
        queue = deque([(root_id, 0)])  # (content_id, depth)

        while queue:
            current_id, depth = queue.popleft()

            if current_id in visited or depth > max_depth or len(nodes) >= max_nodes:
                continue
            visited.add(current_id)

            item = lookup(current_id)
            if item is None:
                if current_id == root_id:
                    raise ContentNotFoundError(root_id)
                logger.debug(f"Skipping missing content {current_id} while building graph")
                continue

            nodes[current_id] = self._build_node(item, depth)

            for related in related_finder(
                current_id, limit=self.neighbor_limit, threshold=self.similarity_threshold
            ):
                neighbor_id = related.item.id
                if neighbor_id == current_id:
                    continue

                pair = frozenset((current_id, neighbor_id))
                if pair not in edges:
                    edges[pair] = SimilarityEdge(
                        source_id=current_id,
                        target_id=neighbor_id,
                        weight=related.score,
                        relationship_type=related.relationship_type,
                    )

                if neighbor_id not in visited and depth < max_depth:
                    queue.append((neighbor_id, depth + 1))

        # Neighbours that never became nodes leave dangling edges behind
        final_edges = [
            edge
            for edge in edges.values()
            if edge.source_id in nodes and edge.target_id in nodes
        ]
        node_list = list(nodes.values())

        logger.info(
            f"Built connection graph for {root_id}: {len(node_list)} nodes, "
            f"{len(final_edges)} edges"
        )

        return ConnectionGraph(
            root_id=root_id,
            nodes=node_list,
            edges=final_edges,
            metrics=calculate_network_metrics(node_list, final_edges),
        )

    def network_statistics(
        self,
        root_ids: list[str],
        lookup: ContentLookup,
        related_finder: RelatedFinder,
        max_depth: int = 2,
        max_nodes: int = 100,
    ) -> NetworkStatistics:
        """Aggregate network metrics over the graphs of several roots.

        Roots whose graph cannot be built are skipped.
        """
        graphs = []
        for root_id in root_ids:
            try:
                graphs.append(self.build(root_id, lookup, related_finder, max_depth, max_nodes))
            except ContentNotFoundError as e:
                logger.warning(f"Skipping network statistics for {root_id}: {e}")

        if not graphs:
            return NetworkStatistics()

        return NetworkStatistics(
            total_networks=len(graphs),
            total_nodes=sum(g.metrics.node_count for g in graphs),
            total_edges=sum(g.metrics.edge_count for g in graphs),
            avg_density=sum(g.metrics.density for g in graphs) / len(graphs),
            avg_clustering_coefficient=(
                sum(g.metrics.clustering_coefficient for g in graphs) / len(graphs)
            ),
            network_sizes=[
                NetworkSize(
                    root_id=g.root_id,
                    node_count=g.metrics.node_count,
                    edge_count=g.metrics.edge_count,
                    density=g.metrics.density,
                )
                for g in graphs
            ],
        )

    @staticmethod
    def _build_node(item: ContentItem, depth: int) -> GraphNode:
        return GraphNode(
            id=item.id,
            title=item.title,
            type=item.type,
            author=item.primary_author,
            publish_date=item.publish_date,
            relevance_score=item.relevance_score,
            topics=item.topics,
            categories=item.categories,
            depth=depth,
            node_size=calculate_node_size(item),
            node_color=NODE_COLORS.get(item.type, DEFAULT_NODE_COLOR),
        )
