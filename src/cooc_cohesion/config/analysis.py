"""Tunable parameters shared by the network and cohesion workflows."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict

from .const import (
    DEFAULT_ABUNDANCE_CUTOFF,
    DEFAULT_CORRELATION_THRESHOLD,
    DEFAULT_DAMPING,
    DEFAULT_WALK_LENGTH,
    MASKING_POLICIES,
)

__all__ = ["AnalysisConfig"]


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters of one analysis run.

    Attributes
    ----------
    threshold : float
        Correlation above which two taxa are linked (strict inequality).
        Must be non-negative so that negative correlations never link taxa.
    abundance_cutoff : float
        Mean abundance a taxon must exceed within a period to enter that
        period's network.
    damping : float
        PageRank damping factor.
    walk_length : int
        Random-walk length used by the walktrap community detector.
    masking : str
        Connectedness masking policy, ``"zero"`` or ``"exclude"``.
    weighted_centrality : bool
        When True shortest paths use ``1 / weight`` as distance and PageRank
        and hub scores use weights as strengths.  Otherwise all four
        centralities ignore edge weights.
    max_workers : int
        Number of periods analysed concurrently.  ``1`` runs serially.
    """

    threshold: float = DEFAULT_CORRELATION_THRESHOLD
    abundance_cutoff: float = DEFAULT_ABUNDANCE_CUTOFF
    damping: float = DEFAULT_DAMPING
    walk_length: int = DEFAULT_WALK_LENGTH
    masking: str = "zero"
    weighted_centrality: bool = False
    max_workers: int = 1

    def __post_init__(self):
        if not 0.0 <= self.threshold < 1.0:
            raise ValueError(f"threshold must lie in [0, 1); got {self.threshold}")
        if self.abundance_cutoff < 0:
            raise ValueError(f"abundance_cutoff must be >= 0; got {self.abundance_cutoff}")
        if not 0.0 < self.damping < 1.0:
            raise ValueError(f"damping must lie in (0, 1); got {self.damping}")
        if self.walk_length < 1:
            raise ValueError(f"walk_length must be >= 1; got {self.walk_length}")
        if self.masking not in MASKING_POLICIES:
            available = ", ".join(MASKING_POLICIES)
            raise ValueError(f"Unknown masking policy '{self.masking}'. Available: {available}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1; got {self.max_workers}")

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)
