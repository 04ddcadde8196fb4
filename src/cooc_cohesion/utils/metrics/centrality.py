"""Closeness, betweenness, PageRank and hub-score centrality per taxon.

Edge weights are correlations, i.e. strengths.  When ``weighted`` is False
(the default) every centrality treats the network as unweighted.  When it is
True shortest paths run on ``1 / |weight|`` distances while PageRank and hub
scores use ``|weight|`` as strength.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import networkx as nx
import numpy as np
import pandas as pd

from ...config.const import CENTRALITY_MEASURES, DEFAULT_DAMPING
from ..clustering.walktrap import to_igraph

__all__ = ["compute_node_metrics", "hub_scores", "with_node_metrics"]

logger = logging.getLogger(__name__)


def _working_copy(G: nx.Graph) -> nx.Graph:
    H = nx.Graph()
    H.add_nodes_from(G.nodes())
    for u, v, w in G.edges(data="weight", default=1.0):
        strength = abs(float(w))
        H.add_edge(u, v, strength=strength, distance=1.0 / strength if strength > 0 else np.inf)
    return H


def hub_scores(G: nx.Graph, weight: Optional[str] = None, nodelist: Optional[List] = None) -> Dict:
    """HITS hub scores scaled so the largest equals 1.

    Computed by igraph; on an undirected graph the hub vector is the
    principal eigenvector of the adjacency matrix, so symmetric vertices
    score alike and a star's centre is the top hub.  Isolated vertices score
    0, and so does every vertex of a graph without edges.
    """

    nodes = list(G.nodes()) if nodelist is None else list(nodelist)
    if not nodes:
        return {}
    if G.number_of_edges() == 0:
        return {node: 0.0 for node in nodes}
    graph = to_igraph(G, nodes, weight=weight)
    hub = graph.hub_score(weights="weight" if weight else None, scale=True)
    return {node: float(h) if h > 1e-12 else 0.0 for node, h in zip(nodes, hub)}


def compute_node_metrics(
    G: nx.Graph,
    *,
    damping: float = DEFAULT_DAMPING,
    weighted: bool = False,
) -> pd.DataFrame:
    """Compute the four centralities for every vertex of ``G``.

    Parameters
    ----------
    G : nx.Graph
        Co-occurrence network.
    damping : float, optional
        PageRank damping factor (default: 0.85).
    weighted : bool, optional
        Whether edge weights modulate the measures (see module docstring).

    Returns
    -------
    pd.DataFrame
        Indexed by taxon (sorted), with columns ``degree``, ``closeness``,
        ``betweenness``, ``pagerank`` and ``hubscore``.

    Notes
    -----
    Closeness is the inverse of the mean distance to the reachable vertices,
    computed within each connected component; isolated vertices score 0.
    Betweenness is not normalised and counts each unordered pair once.
    PageRank spreads the mass of isolated vertices uniformly, so every vertex
    keeps at least ``(1 - damping) / n``.
    """

    nodes = sorted(G.nodes())
    columns = ["degree", *CENTRALITY_MEASURES]
    if not nodes:
        return pd.DataFrame(columns=columns, index=pd.Index([], name="taxon"), dtype=float)

    H = _working_copy(G)
    distance = "distance" if weighted else None
    strength = "strength" if weighted else None

    closeness = nx.closeness_centrality(H, distance=distance, wf_improved=False)
    betweenness = nx.betweenness_centrality(H, normalized=False, weight=distance)
    pagerank = nx.pagerank(H, alpha=damping, weight=strength)
    hubscore = hub_scores(H, weight=strength, nodelist=nodes)

    frame = pd.DataFrame(
        {
            "degree": [H.degree(n) for n in nodes],
            "closeness": [closeness[n] for n in nodes],
            "betweenness": [betweenness[n] for n in nodes],
            "pagerank": [pagerank[n] for n in nodes],
            "hubscore": [hubscore[n] for n in nodes],
        },
        index=pd.Index(nodes, name="taxon"),
    )
    logger.debug("Centralities computed for %d vertices (weighted=%s)", len(nodes), weighted)
    return frame


def with_node_metrics(G: nx.Graph, metrics: pd.DataFrame) -> nx.Graph:
    """Return a copy of ``G`` with every metric column attached to its vertices."""

    annotated = G.copy()
    for column in metrics.columns:
        values = metrics[column].to_dict()
        nx.set_node_attributes(annotated, values, column)
    return annotated
