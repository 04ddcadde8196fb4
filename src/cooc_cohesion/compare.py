"""Comparison of co-occurrence networks between two observation periods."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import pandas as pd

from .config.const import CENTRALITY_MEASURES
from .workflow import PeriodNetworkResult

__all__ = ["PeriodComparison", "compare_periods"]

_COMPARED_METRICS = ("degree",) + CENTRALITY_MEASURES


@dataclass
class PeriodComparison:
    """Result from comparing a reference period with a later one.

    Attributes
    ----------
    reference : str
        Label of the earlier period.
    other : str
        Label of the later period.
    shared_taxa : list of str
        Taxa present in both networks.
    gained_taxa : list of str
        Taxa only present in the later network.
    lost_taxa : list of str
        Taxa only present in the earlier network.
    node_deltas : pd.DataFrame
        For every shared taxon, each metric in both periods and the change
        ``other - reference``, plus whether its community partners changed.
    summary_deltas : dict
        Change in vertex count, edge count, modularity and community count.
    edge_jaccard : float
        Jaccard similarity of the two edge sets (NaN if both are empty).
    """

    reference: str
    other: str
    shared_taxa: List[str]
    gained_taxa: List[str]
    lost_taxa: List[str]
    node_deltas: pd.DataFrame
    summary_deltas: Dict[str, float]
    edge_jaccard: float


def _edge_set(result: PeriodNetworkResult) -> set:
    return {tuple(sorted(edge)) for edge in result.graph.edges()}


def _community_partners(result: PeriodNetworkResult, taxa: List[str]) -> Dict[str, frozenset]:
    membership = result.communities.membership
    shared = set(taxa)
    partners: Dict[str, frozenset] = {}
    for taxon in taxa:
        cid = membership.get(taxon)
        partners[taxon] = frozenset(
            t for t, c in membership.items() if c == cid and t != taxon and t in shared
        )
    return partners


def compare_periods(reference: PeriodNetworkResult, other: PeriodNetworkResult) -> PeriodComparison:
    """Compare the networks of two periods, taxon by taxon.

    Community ids are not comparable across periods, so community change is
    measured as a change of the taxon's partners among the shared taxa.
    """

    ref_taxa = set(reference.graph.nodes())
    oth_taxa = set(other.graph.nodes())
    shared = sorted(ref_taxa & oth_taxa)

    ref = reference.metrics.reindex(shared)
    oth = other.metrics.reindex(shared)
    columns = {}
    for metric in _COMPARED_METRICS:
        columns[f"{metric}_{reference.period}"] = ref[metric].astype(float)
        columns[f"{metric}_{other.period}"] = oth[metric].astype(float)
        columns[f"{metric}_delta"] = oth[metric].astype(float) - ref[metric].astype(float)
    deltas = pd.DataFrame(columns, index=pd.Index(shared, name="taxon"))

    ref_partners = _community_partners(reference, shared)
    oth_partners = _community_partners(other, shared)
    deltas["community_changed"] = [ref_partners[t] != oth_partners[t] for t in shared]

    ref_summary, oth_summary = reference.summary, other.summary
    summary_deltas = {
        key: float(oth_summary[key]) - float(ref_summary[key])
        for key in ("n_vertices", "n_edges", "modularity", "n_communities")
    }

    ref_edges, oth_edges = _edge_set(reference), _edge_set(other)
    union = ref_edges | oth_edges
    jaccard = len(ref_edges & oth_edges) / len(union) if union else float("nan")

    return PeriodComparison(
        reference=reference.period,
        other=other.period,
        shared_taxa=shared,
        gained_taxa=sorted(oth_taxa - ref_taxa),
        lost_taxa=sorted(ref_taxa - oth_taxa),
        node_deltas=deltas,
        summary_deltas=summary_deltas,
        edge_jaccard=float(jaccard),
    )
