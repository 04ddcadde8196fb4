"""Node-level centrality metrics for co-occurrence networks."""

from .centrality import compute_node_metrics, hub_scores, with_node_metrics

__all__ = ["compute_node_metrics", "hub_scores", "with_node_metrics"]
