"""Relatedness module for scoring content similarity and building connection graphs."""

from contentlens.relatedness.finder import RelatedContentFinder
from contentlens.relatedness.graph_builder import ConnectionGraphBuilder
from contentlens.relatedness.similarity import SimilarityScorer

__all__ = [
    "ConnectionGraphBuilder",
    "RelatedContentFinder",
    "SimilarityScorer",
]
