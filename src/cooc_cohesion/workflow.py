"""High level workflows that combine the correlation, network and cohesion utilities."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import warnings

import networkx as nx
import pandas as pd

from .cohesion import CohesionRecord, cohesion_to_frame, compute_cohesion
from .config.analysis import AnalysisConfig
from .config.const import CENTRALITY_MEASURES, SUMMARY_COLUMNS
from .errors import EmptyGraphWarning, InsufficientSamplesError
from .utils.clustering import CommunityAssignment, detect_communities
from .utils.corrmat import (
    ConnectednessVectors,
    CorrelationMatrix,
    build_cooccurrence_network,
    build_correlation_matrix,
    compute_connectedness,
)
from .utils.datamanag.abundance import AbundanceMatrix, taxonomy_lookup
from .utils.metrics import compute_node_metrics, with_node_metrics

__all__ = [
    "PeriodNetworkResult",
    "PipelineResult",
    "analyze_period",
    "compute_global_connectedness",
    "run_pipeline",
    "hub_taxa",
]

logger = logging.getLogger(__name__)


@dataclass
class PeriodNetworkResult:
    """Return value for :func:`analyze_period`.

    Attributes
    ----------
    period : str
        Period label.
    abundance : AbundanceMatrix
        Period samples restricted to taxa above the abundance cutoff.
    correlation : CorrelationMatrix
        Correlations over ``abundance``.
    graph : nx.Graph
        Co-occurrence network with centralities and community ids attached
        to the vertices.
    metrics : pd.DataFrame
        One row per taxon: group, degree, the four centralities, community.
    communities : CommunityAssignment
        Walktrap partition and its modularity.
    """

    period: str
    abundance: AbundanceMatrix
    correlation: CorrelationMatrix
    graph: nx.Graph
    metrics: pd.DataFrame
    communities: CommunityAssignment

    @property
    def is_empty(self) -> bool:
        return self.graph.number_of_nodes() == 0

    @property
    def summary(self) -> Dict[str, object]:
        return dict(
            zip(
                SUMMARY_COLUMNS,
                (
                    self.period,
                    self.graph.number_of_nodes(),
                    self.graph.number_of_edges(),
                    self.communities.modularity,
                    self.communities.n_communities,
                ),
            )
        )


@dataclass
class PipelineResult:
    """Return value for :func:`run_pipeline`.

    Attributes
    ----------
    periods : dict
        ``period -> PeriodNetworkResult`` for every period that succeeded,
        in period order.
    failures : dict
        ``period -> error message`` for periods that could not be analysed.
    correlation : CorrelationMatrix
        Global correlations over every sample.
    connectedness : ConnectednessVectors
        Global connectedness derived from ``correlation``.
    cohesion : list of CohesionRecord
        One record per sample.
    config : AnalysisConfig
        Parameters of the run.
    """

    periods: Dict[str, PeriodNetworkResult]
    failures: Dict[str, str]
    correlation: CorrelationMatrix
    connectedness: ConnectednessVectors
    cohesion: List[CohesionRecord]
    config: AnalysisConfig = field(default_factory=AnalysisConfig)

    def summary(self) -> pd.DataFrame:
        """Per-period vertex count, edge count, modularity and community count."""

        rows = [result.summary for result in self.periods.values()]
        return pd.DataFrame(rows, columns=list(SUMMARY_COLUMNS))

    def cohesion_frame(self) -> pd.DataFrame:
        return cohesion_to_frame(self.cohesion)


def analyze_period(
    abundance: AbundanceMatrix,
    periods: pd.Series,
    period: str,
    taxonomy: Optional[Mapping[str, str]] = None,
    config: Optional[AnalysisConfig] = None,
) -> PeriodNetworkResult:
    """Build and analyse the co-occurrence network of a single period.

    Raises
    ------
    InsufficientSamplesError
        If fewer than two samples belong to ``period``.

    Warns
    -----
    EmptyGraphWarning
        When no taxon survives the abundance cutoff; the result then holds
        an empty graph, empty metrics and NaN modularity.
    """

    config = config or AnalysisConfig()
    members = abundance.for_period(periods, period)
    if members.n_samples < 2:
        raise InsufficientSamplesError(members.n_samples, f"period {period}")

    subset = members.filter_abundance(config.abundance_cutoff)
    logger.info(
        "Period %s: %d samples, %d of %d taxa above cutoff %.2g",
        period,
        subset.n_samples,
        subset.n_taxa,
        members.n_taxa,
        config.abundance_cutoff,
    )
    if subset.n_taxa == 0:
        warnings.warn(
            f"Period '{period}' keeps no taxa above the abundance cutoff "
            f"{config.abundance_cutoff:g}; its network is empty.",
            EmptyGraphWarning,
            stacklevel=2,
        )

    corr = build_correlation_matrix(subset, context=f"period {period}")
    graph = build_cooccurrence_network(
        corr,
        threshold=config.threshold,
        taxonomy=taxonomy,
        period=period,
        abundance=subset,
    )
    metrics = compute_node_metrics(graph, damping=config.damping, weighted=config.weighted_centrality)
    communities = detect_communities(graph, walk_length=config.walk_length)

    metrics.insert(0, "group", [taxonomy_lookup(taxonomy, t) for t in metrics.index])
    metrics["community"] = pd.Series(communities.membership, dtype="int64").reindex(metrics.index)
    annotated = with_node_metrics(graph, metrics.drop(columns=["group"]))

    return PeriodNetworkResult(
        period=period,
        abundance=subset,
        correlation=corr,
        graph=annotated,
        metrics=metrics,
        communities=communities,
    )


def compute_global_connectedness(
    abundance: AbundanceMatrix,
    masking: str = "zero",
) -> Tuple[CorrelationMatrix, ConnectednessVectors]:
    """Correlations and connectedness over every sample of ``abundance``."""

    corr = build_correlation_matrix(abundance, context="all samples")
    return corr, compute_connectedness(corr, masking=masking)


def _period_order(periods: pd.Series, labels: Optional[Sequence[str]]) -> List[str]:
    if labels is not None:
        return [str(label) for label in labels]
    if isinstance(periods.dtype, pd.CategoricalDtype):
        return [str(c) for c in periods.cat.categories]
    return [str(p) for p in pd.unique(periods.dropna())]


def run_pipeline(
    abundance: AbundanceMatrix,
    periods: pd.Series,
    taxonomy: Optional[Mapping[str, str]] = None,
    config: Optional[AnalysisConfig] = None,
    *,
    period_labels: Optional[Sequence[str]] = None,
) -> PipelineResult:
    """Run the per-period network analyses and the global cohesion scoring.

    A period that fails with :class:`InsufficientSamplesError` is recorded in
    :attr:`PipelineResult.failures`; the remaining periods and the cohesion
    scores are still computed.  Periods run concurrently when
    ``config.max_workers > 1``.
    """

    config = config or AnalysisConfig()
    labels = _period_order(periods, period_labels)
    logger.info("Running pipeline over periods %s with %s", labels, config.to_dict())

    def _run(label: str):
        try:
            return analyze_period(abundance, periods, label, taxonomy, config), None
        except InsufficientSamplesError as exc:
            logger.warning("Skipping period %s: %s", label, exc)
            return None, str(exc)

    if config.max_workers > 1 and len(labels) > 1:
        with ThreadPoolExecutor(max_workers=min(config.max_workers, len(labels))) as pool:
            outcomes = list(pool.map(_run, labels))
    else:
        outcomes = [_run(label) for label in labels]

    results: Dict[str, PeriodNetworkResult] = {}
    failures: Dict[str, str] = {}
    for label, (result, error) in zip(labels, outcomes):
        if result is not None:
            results[label] = result
        else:
            failures[label] = error

    corr, connectedness = compute_global_connectedness(abundance, masking=config.masking)
    records = compute_cohesion(abundance, connectedness, periods)

    return PipelineResult(
        periods=results,
        failures=failures,
        correlation=corr,
        connectedness=connectedness,
        cohesion=records,
        config=config,
    )


def hub_taxa(result: PeriodNetworkResult, top_n: int = 10, by: str = "hubscore") -> pd.DataFrame:
    """Top ``top_n`` taxa of a period ranked by the centrality ``by``.

    Ties are broken by taxon identifier.
    """

    if by not in CENTRALITY_MEASURES and by != "degree":
        available = ", ".join(("degree",) + CENTRALITY_MEASURES)
        raise KeyError(f"Unknown centrality '{by}'. Available: {available}")
    ranked = result.metrics.reset_index().sort_values([by, "taxon"], ascending=[False, True])
    return ranked.head(top_n).set_index("taxon")
