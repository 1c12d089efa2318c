"""Relationship domain models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from contentlens.domain.content import ContentItem, ContentType


class RelationshipType(str, Enum):
    REFERENCE = "reference"
    SAME_AUTHOR = "same_author"
    UPDATE = "update"
    SIMILAR_TOPIC = "similar_topic"
    SIMILAR = "similar"


class SimilarityEdge(BaseModel):
    """Represents a scored relationship between two content items."""

    source_id: str
    target_id: str
    weight: float = Field(ge=0.0, le=1.0)
    relationship_type: RelationshipType


class RelatedContent(BaseModel):
    """A content item related to some source item."""

    item: ContentItem
    score: float = Field(ge=0.0, le=1.0)
    relationship_type: RelationshipType


class SimilarityBreakdown(BaseModel):
    """Every factor that went into a similarity score."""

    source_id: str
    target_id: str
    topic: float
    category: float
    author: float
    type: float
    temporal: float
    text: float
    total: float
    relationship_type: RelationshipType


class GraphNode(BaseModel):
    """A node of a connection graph, with display hints."""

    id: str
    title: str
    type: ContentType
    author: str | None = None
    publish_date: datetime | None = None
    relevance_score: float | None = None
    topics: list[str] = []
    categories: list[str] = []
    depth: int
    node_size: float
    node_color: str


class NetworkMetrics(BaseModel):
    """Summary metrics of a connection graph.

    ``clustering_coefficient`` is the simplified bound edges / (2 * nodes),
    not a local clustering computation.
    """

    node_count: int = 0
    edge_count: int = 0
    density: float = 0.0
    avg_degree: float = 0.0
    max_degree: int = 0
    clustering_coefficient: float = 0.0


class ConnectionGraph(BaseModel):
    """Represents the connection graph grown around a root content item."""

    root_id: str
    nodes: list[GraphNode] = []
    edges: list[SimilarityEdge] = []
    metrics: NetworkMetrics = NetworkMetrics()


class NetworkSize(BaseModel):
    root_id: str
    node_count: int
    edge_count: int
    density: float


class NetworkStatistics(BaseModel):
    """Metrics aggregated over the connection graphs of several roots."""

    total_networks: int = 0
    total_nodes: int = 0
    total_edges: int = 0
    avg_density: float = 0.0
    avg_clustering_coefficient: float = 0.0
    network_sizes: list[NetworkSize] = []
