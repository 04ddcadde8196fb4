"""Thresholded co-occurrence networks built from correlation matrices."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import networkx as nx
import numpy as np

from ...config.const import DEFAULT_CORRELATION_THRESHOLD
from ..datamanag.abundance import AbundanceMatrix, taxonomy_lookup
from .base import CorrelationMatrix, threshold_mask

__all__ = ["build_cooccurrence_network"]

logger = logging.getLogger(__name__)


def build_cooccurrence_network(
    corr: CorrelationMatrix,
    *,
    threshold: float = DEFAULT_CORRELATION_THRESHOLD,
    taxonomy: Optional[Mapping[str, str]] = None,
    period: Optional[str] = None,
    abundance: Optional[AbundanceMatrix] = None,
) -> nx.Graph:
    """Materialise the co-occurrence network of one period.

    Parameters
    ----------
    corr : CorrelationMatrix
        Correlations restricted to the taxa of the period.
    threshold : float, optional
        An edge joins two taxa iff their correlation is strictly greater than
        this non-negative value, so negative correlations never produce
        edges.  Undefined correlations never produce edges either.
    taxonomy : mapping, optional
        ``taxon -> group label``.  Unmapped taxa are labelled ``"Unknown"``.
    period : str, optional
        Period tag stored on every vertex and on the graph.
    abundance : AbundanceMatrix, optional
        Period abundances; when given it must cover exactly the taxa of
        ``corr`` and each vertex gets its mean abundance.

    Returns
    -------
    nx.Graph
        Undirected graph keyed by taxon identifier.  Edge attribute
        ``weight`` is the correlation itself.  Isolated taxa are kept.

    Raises
    ------
    ValueError
        If ``threshold`` is negative, or ``abundance`` covers other taxa.
    """

    if threshold < 0:
        raise ValueError(f"Network threshold must be non-negative; got {threshold}.")

    mean_abundance = None
    if abundance is not None:
        if set(abundance.taxa) != set(corr.taxa):
            raise ValueError("Abundance subset and correlation matrix cover different taxa.")
        mean_abundance = abundance.table.mean(axis=1)

    G = nx.Graph(period=period, threshold=float(threshold))
    for taxon in corr.taxa:
        attrs = {"group": taxonomy_lookup(taxonomy, taxon), "period": period}
        if mean_abundance is not None:
            attrs["abundance"] = float(mean_abundance[taxon])
        G.add_node(taxon, **attrs)

    mask = np.triu(threshold_mask(corr.values, threshold), k=1)
    rows, cols = np.nonzero(mask)
    G.add_weighted_edges_from(
        (corr.taxa[i], corr.taxa[j], float(corr.values[i, j])) for i, j in zip(rows, cols)
    )

    logger.info(
        "Network%s: %d vertices, %d edges (threshold %.3f), %d isolated",
        f" [{period}]" if period is not None else "",
        G.number_of_nodes(),
        G.number_of_edges(),
        threshold,
        nx.number_of_isolates(G),
    )
    return G
