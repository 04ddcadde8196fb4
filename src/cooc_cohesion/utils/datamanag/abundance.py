"""Typed container for taxon-by-sample abundance tables."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ...config.const import DEFAULT_PERIOD_LABELS, UNKNOWN_GROUP
from ...errors import InvalidAbundanceError

__all__ = ["AbundanceMatrix", "sample_periods", "taxonomy_labels", "taxonomy_lookup"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AbundanceMatrix:
    """Non-negative abundances arranged as ``(n_taxa, n_samples)``.

    Attributes
    ----------
    table:
        DataFrame indexed by taxon identifier with one column per sample.
        Identifiers are coerced to ``str`` and values to ``float64`` when the
        matrix is built; every derived matrix is a new, independent copy.
    """

    table: pd.DataFrame

    def __post_init__(self):
        table = self.table
        if not isinstance(table, pd.DataFrame):
            raise InvalidAbundanceError(
                f"Expected a pandas DataFrame; received {type(table).__name__}."
            )
        table = table.copy()
        table.index = table.index.map(str)
        table.columns = table.columns.map(str)
        table.index.name = "taxon"
        table.columns.name = "sample"

        if table.index.has_duplicates:
            dupes = sorted(set(table.index[table.index.duplicated()]))
            raise InvalidAbundanceError(f"Duplicated taxon identifiers: {dupes[:5]}")
        if table.columns.has_duplicates:
            dupes = sorted(set(table.columns[table.columns.duplicated()]))
            raise InvalidAbundanceError(f"Duplicated sample identifiers: {dupes[:5]}")

        try:
            table = table.astype(float)
        except (TypeError, ValueError) as exc:
            raise InvalidAbundanceError(f"Abundances must be numeric: {exc}") from exc

        values = table.to_numpy()
        if not np.all(np.isfinite(values)):
            raise InvalidAbundanceError("Abundances contain NaN or infinite values.")
        if np.any(values < 0):
            raise InvalidAbundanceError("Abundances must be non-negative.")

        object.__setattr__(self, "table", table)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, *, samples_as_rows: bool = False) -> "AbundanceMatrix":
        """Build a matrix from ``frame``; transpose when samples are rows."""

        return cls(frame.T if samples_as_rows else frame)

    @property
    def taxa(self) -> List[str]:
        return list(self.table.index)

    @property
    def samples(self) -> List[str]:
        return list(self.table.columns)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.table.shape

    @property
    def n_taxa(self) -> int:
        return self.table.shape[0]

    @property
    def n_samples(self) -> int:
        return self.table.shape[1]

    @property
    def values(self) -> np.ndarray:
        """Copy of the abundances as a ``(n_taxa, n_samples)`` array."""

        return self.table.to_numpy(copy=True)

    def sample(self, sample_id: str) -> pd.Series:
        """Abundance profile of a single sample, indexed by taxon."""

        return self.table[str(sample_id)].copy()

    def select_samples(self, samples: Iterable[str]) -> "AbundanceMatrix":
        wanted = [str(s) for s in samples]
        missing = [s for s in wanted if s not in self.table.columns]
        if missing:
            raise KeyError(f"Unknown samples: {missing[:5]}")
        return AbundanceMatrix(self.table.loc[:, wanted])

    def select_taxa(self, taxa: Iterable[str]) -> "AbundanceMatrix":
        wanted = [str(t) for t in taxa]
        missing = [t for t in wanted if t not in self.table.index]
        if missing:
            raise KeyError(f"Unknown taxa: {missing[:5]}")
        return AbundanceMatrix(self.table.loc[wanted, :])

    def filter_abundance(self, cutoff: float) -> "AbundanceMatrix":
        """Keep taxa whose mean abundance is strictly above ``cutoff``.

        A matrix without samples keeps no taxa.
        """

        if self.n_samples == 0:
            return AbundanceMatrix(self.table.iloc[:0, :])
        keep = self.table.mean(axis=1) > cutoff
        dropped = int((~keep).sum())
        if dropped:
            logger.debug("Abundance cutoff %.2g dropped %d of %d taxa", cutoff, dropped, self.n_taxa)
        return AbundanceMatrix(self.table.loc[keep, :])

    def for_period(
        self,
        periods: pd.Series,
        period: str,
        cutoff: Optional[float] = None,
    ) -> "AbundanceMatrix":
        """Restrict to the samples labelled ``period`` and apply ``cutoff``."""

        labels = periods.reindex(self.table.columns)
        members = [s for s, label in labels.items() if pd.notna(label) and str(label) == str(period)]
        subset = self.select_samples(members)
        if cutoff is not None:
            subset = subset.filter_abundance(cutoff)
        return subset

    def relative(self) -> "AbundanceMatrix":
        """Total-sum scale every sample; empty samples stay all-zero."""

        totals = self.table.sum(axis=0)
        scaled = self.table.div(totals.where(totals > 0, 1.0), axis=1)
        return AbundanceMatrix(scaled)

    def aggregate(self, taxonomy: Mapping[str, str]) -> "AbundanceMatrix":
        """Sum taxa that share a group label; unmapped taxa pool as ``Unknown``."""

        groups = [taxonomy_lookup(taxonomy, taxon) for taxon in self.table.index]
        summed = self.table.groupby(pd.Index(groups, name="taxon"), sort=True).sum()
        return AbundanceMatrix(summed)


def _clean_label(label) -> str:
    if label is None or (np.ndim(label) == 0 and pd.isna(label)):
        return UNKNOWN_GROUP
    text = str(label).strip()
    return text if text else UNKNOWN_GROUP


def taxonomy_lookup(taxonomy: Optional[Mapping[str, str]], taxon: str) -> str:
    """Group label for ``taxon``, falling back to :data:`UNKNOWN_GROUP`."""

    if not taxonomy:
        return UNKNOWN_GROUP
    return _clean_label(taxonomy.get(taxon))


def taxonomy_labels(taxonomy: pd.DataFrame, rank: str, key_rank: Optional[str] = None) -> dict:
    """Return ``taxon -> label`` at ``rank`` from a taxonomy table.

    With ``key_rank`` the keys are the labels at that rank instead of taxon
    identifiers, which is what an aggregated matrix is indexed by.  The
    first taxon carrying a key decides its label.
    """

    for name in (rank, key_rank):
        if name is not None and name not in taxonomy.columns:
            available = ", ".join(map(str, taxonomy.columns))
            raise KeyError(f"Rank '{name}' not found in taxonomy. Available: {available}")
    if key_rank is None:
        keys = taxonomy.index.map(str)
    else:
        keys = taxonomy[key_rank].map(_clean_label)
    labels: dict = {}
    for key, label in zip(keys, taxonomy[rank]):
        labels.setdefault(key, _clean_label(label))
    return labels


def sample_periods(
    metadata: pd.DataFrame,
    column: str,
    order: Optional[Sequence[str]] = DEFAULT_PERIOD_LABELS,
) -> pd.Series:
    """Return an ordered categorical ``sample -> period`` series.

    Samples whose label is not listed in ``order`` become missing values and
    therefore belong to no period.  When ``order`` is None the labels are
    kept in order of first appearance.
    """

    if column not in metadata.columns:
        raise KeyError(f"Column '{column}' not found in sample metadata.")
    labels = metadata[column].astype(str)
    labels.index = metadata.index.map(str)
    order = list(dict.fromkeys(labels)) if order is None else [str(p) for p in order]
    labels = labels.where(labels.isin(order))
    periods = pd.Series(
        pd.Categorical(labels, categories=order, ordered=True),
        index=labels.index,
        name=column,
    )
    unassigned = int(periods.isna().sum())
    if unassigned:
        logger.info("%d samples carry no configured period label", unassigned)
    return periods
