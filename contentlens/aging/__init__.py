"""Aging module for detecting outdated content and scheduling reviews."""

from contentlens.aging.engine import AgingRuleEngine
from contentlens.aging.links import LinkChecker, SampledLinkChecker
from contentlens.aging.service import AgingService

__all__ = [
    "AgingRuleEngine",
    "AgingService",
    "LinkChecker",
    "SampledLinkChecker",
]
