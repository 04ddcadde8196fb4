"""Per-sample cohesion scores.

Cohesion weights every taxon's connectedness by its abundance in a sample:
``Cohesion_pos = sum(abundance * connectedness_pos)`` and symmetrically for
the negative side.  Each sample is scored independently by
:func:`score_sample`; nothing is accumulated across samples.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, List, Optional
import warnings

import numpy as np
import pandas as pd

from .config.const import COHESION_COLUMNS
from .errors import UndefinedRatioWarning
from .utils.corrmat.connectedness import ConnectednessVectors
from .utils.datamanag.abundance import AbundanceMatrix

__all__ = ["CohesionRecord", "score_sample", "compute_cohesion", "cohesion_to_frame"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CohesionRecord:
    """Cohesion of a single sample.

    ``neg_pos_ratio`` is NaN and ``ratio_defined`` False when
    ``cohesion_pos`` is zero; the other fields are always populated.
    """

    sample: str
    period: Optional[str]
    cohesion_pos: float
    cohesion_neg: float
    neg_pos_ratio: float
    total_cohesion: float
    ratio_defined: bool

    def to_dict(self) -> Dict[str, object]:
        return dict(
            zip(
                COHESION_COLUMNS,
                (
                    self.sample,
                    self.period,
                    self.cohesion_pos,
                    self.cohesion_neg,
                    self.neg_pos_ratio,
                    self.total_cohesion,
                ),
            )
        )


def score_sample(
    sample: str,
    abundances: pd.Series,
    connectedness: ConnectednessVectors,
    period: Optional[str] = None,
) -> CohesionRecord:
    """Compute the cohesion record of one sample.

    Parameters
    ----------
    sample : str
        Sample identifier.
    abundances : pd.Series
        Abundance of every taxon in the sample, indexed by taxon.  It must
        cover every taxon of ``connectedness``.
    connectedness : ConnectednessVectors
        Global connectedness vectors.
    period : str, optional
        Period label carried into the record.
    """

    aligned = abundances.reindex(list(connectedness.taxa))
    missing = aligned.index[aligned.isna()]
    if len(missing):
        raise KeyError(f"Sample '{sample}' lacks abundances for taxa: {list(missing[:5])}")
    a = aligned.to_numpy(dtype=float)

    pos = float(a @ connectedness.positive)
    neg = float(a @ connectedness.negative)
    total = pos + abs(neg)
    if pos == 0:
        logger.debug("Sample %s has zero positive cohesion", sample)
        warnings.warn(
            f"Cohesion_pos is 0 for sample '{sample}'; Neg_Pos_Ratio is undefined.",
            UndefinedRatioWarning,
            stacklevel=2,
        )
        ratio, defined = float("nan"), False
    else:
        ratio, defined = abs(neg) / pos, True

    return CohesionRecord(
        sample=str(sample),
        period=None if period is None or pd.isna(period) else str(period),
        cohesion_pos=pos,
        cohesion_neg=neg,
        neg_pos_ratio=ratio,
        total_cohesion=total,
        ratio_defined=defined,
    )


def compute_cohesion(
    abundance: AbundanceMatrix,
    connectedness: ConnectednessVectors,
    periods: Optional[pd.Series] = None,
) -> List[CohesionRecord]:
    """Score every sample of ``abundance`` in sample order."""

    labels = periods.reindex(abundance.samples) if periods is not None else None
    records = [
        score_sample(
            sample,
            abundance.sample(sample),
            connectedness,
            None if labels is None else labels[sample],
        )
        for sample in abundance.samples
    ]
    undefined = sum(not r.ratio_defined for r in records)
    logger.info(
        "Cohesion computed for %d samples (%d with undefined ratio)", len(records), undefined
    )
    return records


def cohesion_to_frame(records: List[CohesionRecord]) -> pd.DataFrame:
    """Flat export table with one row per sample."""

    frame = pd.DataFrame([r.to_dict() for r in records], columns=list(COHESION_COLUMNS))
    frame["ratio_defined"] = np.array([r.ratio_defined for r in records], dtype=bool)
    return frame
