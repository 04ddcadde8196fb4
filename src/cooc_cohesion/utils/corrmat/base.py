"""Pearson correlation matrices with explicit tracking of undefined entries."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union
import warnings

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ...errors import InsufficientSamplesError, UndefinedCorrelationWarning
from ..datamanag.abundance import AbundanceMatrix

__all__ = [
    "CorrelationMatrix",
    "build_correlation_matrix",
    "threshold_mask",
]

logger = logging.getLogger(__name__)

_SYMMETRY_TOL = 1e-12


@dataclass(frozen=True)
class CorrelationMatrix:
    """Symmetric taxon-by-taxon Pearson correlation matrix.

    Attributes
    ----------
    values : NDArray
        ``(n_taxa, n_taxa)`` coefficients.  Entries involving a taxon with
        zero variance are NaN, including that taxon's diagonal entry.
    taxa : tuple of str
        Taxon identifiers labelling rows and columns.
    """

    values: NDArray
    taxa: Tuple[str, ...]

    def __post_init__(self):
        values = np.array(self.values, dtype=float)
        taxa = tuple(str(t) for t in self.taxa)
        if values.ndim != 2 or values.shape[0] != values.shape[1]:
            raise ValueError(f"Correlation matrix must be square; received shape {values.shape}.")
        if values.shape[0] != len(taxa):
            raise ValueError(
                f"Matrix has {values.shape[0]} rows but {len(taxa)} taxon labels were given."
            )
        if len(set(taxa)) != len(taxa):
            raise ValueError("Taxon labels must be unique.")
        defined = ~np.isnan(values)
        if not np.array_equal(defined, defined.T):
            raise ValueError("Undefined entries must be symmetric.")
        if not np.allclose(values[defined], values.T[defined], atol=_SYMMETRY_TOL):
            raise ValueError("Correlation matrix must be symmetric.")
        if np.any(np.abs(values[defined]) > 1.0 + _SYMMETRY_TOL):
            raise ValueError("Correlation coefficients must lie in [-1, 1].")
        values = np.clip(values, -1.0, 1.0)
        values.setflags(write=False)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "taxa", taxa)

    @property
    def n_taxa(self) -> int:
        return len(self.taxa)

    @property
    def undefined(self) -> NDArray:
        """Boolean mask of entries without a defined coefficient."""

        return np.isnan(self.values)

    @property
    def zero_variance_taxa(self) -> List[str]:
        diag = np.diag(self.values)
        return [taxon for taxon, d in zip(self.taxa, diag) if np.isnan(d)]

    def index_of(self, taxon: str) -> int:
        try:
            return self.taxa.index(str(taxon))
        except ValueError:
            raise KeyError(f"Taxon '{taxon}' is not part of this correlation matrix.") from None

    def get(self, taxon_a: str, taxon_b: str) -> float:
        return float(self.values[self.index_of(taxon_a), self.index_of(taxon_b)])

    def restrict(self, taxa: Iterable[str]) -> "CorrelationMatrix":
        """Sub-matrix over ``taxa``, in the order given."""

        idx = [self.index_of(t) for t in taxa]
        return CorrelationMatrix(self.values[np.ix_(idx, idx)], tuple(self.taxa[i] for i in idx))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.values, index=list(self.taxa), columns=list(self.taxa))


def build_correlation_matrix(
    abundance: Union[AbundanceMatrix, NDArray],
    taxa: Optional[Sequence[str]] = None,
    *,
    context: str = "",
) -> CorrelationMatrix:
    """Compute Pearson correlations between taxa across the sample axis.

    Parameters
    ----------
    abundance : AbundanceMatrix or NDArray
        Abundances arranged as ``(n_taxa, n_samples)``.
    taxa : sequence of str, optional
        Labels for a raw array input.  Defaults to ``"0", "1", ...``.
    context : str, optional
        Free text (e.g. the period label) used in errors and log messages.

    Returns
    -------
    CorrelationMatrix
        Coefficients with NaN wherever a taxon has zero variance.

    Raises
    ------
    InsufficientSamplesError
        If fewer than two samples are supplied.

    Warns
    -----
    UndefinedCorrelationWarning
        When at least one taxon is constant across the samples.
    """

    if isinstance(abundance, AbundanceMatrix):
        data = abundance.values
        labels = tuple(abundance.taxa)
    else:
        data = np.atleast_2d(np.asarray(abundance, dtype=float))
        labels = tuple(str(t) for t in taxa) if taxa is not None else tuple(
            str(i) for i in range(data.shape[0])
        )

    n_taxa, n_samples = data.shape
    if n_samples < 2:
        raise InsufficientSamplesError(n_samples, context)
    if n_taxa == 0:
        return CorrelationMatrix(np.empty((0, 0)), ())

    constant = np.ptp(data, axis=1) == 0
    with np.errstate(invalid="ignore", divide="ignore"):
        C = np.atleast_2d(np.corrcoef(data))

    C[constant, :] = np.nan
    C[:, constant] = np.nan
    C = np.triu(C) + np.triu(C, k=1).T
    diag = np.where(constant, np.nan, 1.0)
    np.fill_diagonal(C, diag)
    C = np.clip(C, -1.0, 1.0)

    if constant.any():
        flat = [labels[i] for i in np.flatnonzero(constant)]
        where = f" ({context})" if context else ""
        logger.info("%d zero-variance taxa%s: %s", len(flat), where, ", ".join(flat[:10]))
        warnings.warn(
            f"{len(flat)} taxa have zero variance{where}; their correlations are undefined "
            "and are excluded from downstream averages.",
            UndefinedCorrelationWarning,
            stacklevel=2,
        )

    return CorrelationMatrix(C, labels)


def threshold_mask(matrix: NDArray, threshold: float) -> NDArray:
    """Boolean mask of off-diagonal entries strictly above ``threshold``.

    Undefined (NaN) entries never pass, whatever the threshold.
    """

    values = np.asarray(matrix, dtype=float)
    mask = np.zeros(values.shape, dtype=bool)
    np.greater(values, threshold, out=mask, where=~np.isnan(values))
    np.fill_diagonal(mask, False)
    return mask
