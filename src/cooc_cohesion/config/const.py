"""Core constants used across :mod:`cooc_cohesion`.

The values defined in this module import without touching the filesystem.
They are the documented defaults of the correlation, network and cohesion
utilities, and the column layouts of every exported table.
"""
#
from __future__ import annotations
#
from typing import Tuple
#
__all__ = [
    "DEFAULT_CORRELATION_THRESHOLD",
    "DEFAULT_ABUNDANCE_CUTOFF",
    "DEFAULT_DAMPING",
    "DEFAULT_WALK_LENGTH",
    "DEFAULT_PERIOD_LABELS",
    "DEFAULT_PERIOD_COLUMN",
    "DEFAULT_TAXONOMIC_RANK",
    "TAXONOMIC_RANKS",
    "UNKNOWN_GROUP",
    "MASKING_POLICIES",
    "CENTRALITY_MEASURES",
    "NODE_COLUMNS",
    "EDGE_COLUMNS",
    "COHESION_COLUMNS",
    "SUMMARY_COLUMNS",
    "NODE_SIZE_RANGE",
    "GROUP_COLORMAP",
]
#
#: Edges are kept when the correlation is strictly greater than this value.
DEFAULT_CORRELATION_THRESHOLD: float = 0.3
#: Taxa whose mean abundance in a period does not exceed this are dropped.
DEFAULT_ABUNDANCE_CUTOFF: float = 1e-4
#: PageRank damping factor.
DEFAULT_DAMPING: float = 0.85
#: Number of random-walk steps used by the walktrap distance.
DEFAULT_WALK_LENGTH: int = 4
#
#: Observation periods, in chronological order.
DEFAULT_PERIOD_LABELS: Tuple[str, ...] = ("Early", "Late")
DEFAULT_PERIOD_COLUMN: str = "Period"
#
TAXONOMIC_RANKS: Tuple[str, ...] = (
    "Kingdom",
    "Phylum",
    "Class",
    "Order",
    "Family",
    "Genus",
    "Species",
)
DEFAULT_TAXONOMIC_RANK: str = "Genus"
UNKNOWN_GROUP: str = "Unknown"
#
#: ``"zero"`` keeps wrong-sign correlations as zero contributions to the
#: connectedness mean, ``"exclude"`` drops them from the denominator.
MASKING_POLICIES: Tuple[str, ...] = ("zero", "exclude")
#
CENTRALITY_MEASURES: Tuple[str, ...] = (
    "closeness",
    "betweenness",
    "pagerank",
    "hubscore",
)
#
NODE_COLUMNS: Tuple[str, ...] = (
    "id",
    "group",
    "period",
    "closeness",
    "betweenness",
    "pagerank",
    "hubscore",
    "community",
    "size",
    "color",
)
EDGE_COLUMNS: Tuple[str, ...] = ("source", "target", "weight")
COHESION_COLUMNS: Tuple[str, ...] = (
    "sample",
    "period",
    "Cohesion_pos",
    "Cohesion_neg",
    "Neg_Pos_Ratio",
    "Total_Cohesion",
)
SUMMARY_COLUMNS: Tuple[str, ...] = (
    "period",
    "n_vertices",
    "n_edges",
    "modularity",
    "n_communities",
)
#
#: Display size hint range, scaled linearly from PageRank.
NODE_SIZE_RANGE: Tuple[float, float] = (5.0, 30.0)
#: Qualitative matplotlib colormap used for taxonomic-group color hints.
GROUP_COLORMAP: str = "tab20"
