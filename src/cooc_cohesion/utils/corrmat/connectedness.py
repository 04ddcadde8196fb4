"""Per-taxon mean positive and negative coupling to the rest of the community."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Tuple

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ...config.const import MASKING_POLICIES
from .base import CorrelationMatrix

__all__ = ["ConnectednessVectors", "compute_connectedness"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectednessVectors:
    """Connectedness of every taxon, independent of any network threshold.

    Attributes
    ----------
    taxa : tuple of str
        Taxon identifiers.
    positive : NDArray
        Mean positive correlation of each taxon to all others (``>= 0``).
    negative : NDArray
        Mean negative correlation of each taxon to all others (``<= 0``).
    masking : str
        Policy used to build the means (see :func:`compute_connectedness`).
    """

    taxa: Tuple[str, ...]
    positive: NDArray
    negative: NDArray
    masking: str = "zero"

    def __post_init__(self):
        taxa = tuple(str(t) for t in self.taxa)
        positive = np.array(self.positive, dtype=float)
        negative = np.array(self.negative, dtype=float)
        if positive.shape != (len(taxa),) or negative.shape != (len(taxa),):
            raise ValueError("Connectedness vectors must have one entry per taxon.")
        if np.any(positive < 0) or np.any(negative > 0):
            raise ValueError("Positive connectedness must be >= 0 and negative connectedness <= 0.")
        positive.setflags(write=False)
        negative.setflags(write=False)
        object.__setattr__(self, "taxa", taxa)
        object.__setattr__(self, "positive", positive)
        object.__setattr__(self, "negative", negative)

    def get(self, taxon: str) -> Tuple[float, float]:
        i = self.taxa.index(str(taxon))
        return float(self.positive[i]), float(self.negative[i])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {"connectedness_pos": self.positive, "connectedness_neg": self.negative},
            index=pd.Index(self.taxa, name="taxon"),
        )


def _masked_mean(values: NDArray, contributes: NDArray, counted: NDArray) -> NDArray:
    """Row-wise sum of ``values`` where ``contributes`` over the ``counted`` size.

    Rows with nothing counted yield 0.
    """

    total = np.where(contributes, values, 0.0).sum(axis=1)
    count = counted.sum(axis=1)
    out = np.zeros_like(total)
    np.divide(total, count, out=out, where=count > 0)
    return out


def compute_connectedness(corr: CorrelationMatrix, masking: str = "zero") -> ConnectednessVectors:
    """Average positive and negative correlation of every taxon.

    Parameters
    ----------
    corr : CorrelationMatrix
        Correlations over the full (period-agnostic) abundance matrix.
    masking : str, optional
        ``"zero"`` (default): correlations of the wrong sign count as zero
        contributions, so the denominator is the number of defined partners.
        ``"exclude"``: only correlations of the right sign enter the mean.
        Undefined entries and the diagonal are excluded under both policies.

    Returns
    -------
    ConnectednessVectors
        A taxon without any contributing partner gets 0 for that sign.
    """

    if masking not in MASKING_POLICIES:
        available = ", ".join(MASKING_POLICIES)
        raise ValueError(f"Unknown masking policy '{masking}'. Available: {available}")

    C = np.array(corr.values, dtype=float)
    defined = ~np.isnan(C)
    np.fill_diagonal(defined, False)
    C[~defined] = 0.0

    is_pos = defined & (C > 0)
    is_neg = defined & (C < 0)
    if masking == "zero":
        positive = _masked_mean(C, is_pos, defined)
        negative = _masked_mean(C, is_neg, defined)
    else:
        positive = _masked_mean(C, is_pos, is_pos)
        negative = _masked_mean(C, is_neg, is_neg)

    orphans = int((defined.sum(axis=1) == 0).sum())
    if orphans:
        logger.debug("%d taxa have no defined correlation partner; connectedness set to 0", orphans)

    return ConnectednessVectors(corr.taxa, positive, negative, masking)
