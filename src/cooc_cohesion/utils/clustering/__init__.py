"""Community detection for co-occurrence networks."""

from .walktrap import CommunityAssignment, detect_communities, to_igraph

__all__ = [
    "CommunityAssignment",
    "detect_communities",
    "to_igraph",
]
