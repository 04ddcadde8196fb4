"""Loading of abundance tables and export of networks, cohesion and summaries."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import matplotlib
import networkx as nx
import numpy as np
import pandas as pd
from matplotlib.colors import to_hex

from .cohesion import CohesionRecord, cohesion_to_frame
from .compare import PeriodComparison
from .config.const import EDGE_COLUMNS, GROUP_COLORMAP, NODE_COLUMNS, NODE_SIZE_RANGE, UNKNOWN_GROUP
from .utils.datamanag.abundance import AbundanceMatrix

__all__ = [
    "load_abundance_table",
    "load_taxonomy_table",
    "load_sample_metadata",
    "group_colors",
    "network_to_frames",
    "frames_to_network",
    "write_network",
    "read_network",
    "write_cohesion",
    "write_summary",
    "write_comparison",
]

logger = logging.getLogger(__name__)

_UNKNOWN_COLOR = "#bdbdbd"


def _separator(path: Path) -> str:
    return "\t" if path.suffix.lower() in (".tsv", ".tab", ".txt") else ","


def _read_table(path: Path) -> pd.DataFrame:
    path = Path(path)
    frame = pd.read_csv(path, sep=_separator(path), index_col=0)
    frame.index = frame.index.map(str)
    logger.debug("Read %s with shape %s", path, frame.shape)
    return frame


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def load_abundance_table(path: Path, *, samples_as_rows: bool = False) -> AbundanceMatrix:
    """Load a taxon-by-sample table (first column holds taxon identifiers).

    Set ``samples_as_rows`` when the file stores one sample per row.
    """

    return AbundanceMatrix.from_frame(_read_table(path), samples_as_rows=samples_as_rows)


def load_taxonomy_table(path: Path) -> pd.DataFrame:
    """Load a taxon-by-rank table (e.g. ``Phylum``, ``Genus`` columns)."""

    return _read_table(path)


def load_sample_metadata(path: Path) -> pd.DataFrame:
    """Load per-sample metadata indexed by sample identifier."""

    return _read_table(path)


def group_colors(groups: Iterable[str]) -> Dict[str, str]:
    """Hex color hint per taxonomic group; ``Unknown`` is always grey."""

    cmap = matplotlib.colormaps[GROUP_COLORMAP]
    named = sorted({g for g in groups if g != UNKNOWN_GROUP})
    colors = {group: to_hex(cmap(i % cmap.N)) for i, group in enumerate(named)}
    colors[UNKNOWN_GROUP] = _UNKNOWN_COLOR
    return colors


def _size_hints(pagerank: pd.Series) -> pd.Series:
    low, high = NODE_SIZE_RANGE
    if pagerank.empty:
        return pagerank.astype(float)
    span = pagerank.max() - pagerank.min()
    if not np.isfinite(span) or span == 0:
        return pd.Series((low + high) / 2.0, index=pagerank.index)
    return low + (pagerank - pagerank.min()) / span * (high - low)


def network_to_frames(graph: nx.Graph) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Node and edge tables of an analysed network.

    Node columns follow :data:`NODE_COLUMNS`; metrics missing on a vertex are
    NaN.  Edge rows list ``source < target``.
    """

    records = []
    for node, attrs in sorted(graph.nodes(data=True)):
        record = {"id": node}
        record.update(attrs)
        records.append(record)
    nodes = pd.DataFrame(records)
    for column in NODE_COLUMNS:
        if column not in nodes.columns:
            nodes[column] = np.nan
    if not nodes.empty:
        nodes["group"] = nodes["group"].fillna(UNKNOWN_GROUP)
        palette = group_colors(nodes["group"])
        nodes["color"] = nodes["group"].map(palette)
        nodes["size"] = _size_hints(nodes["pagerank"].astype(float))
    extra = [c for c in nodes.columns if c not in NODE_COLUMNS]
    nodes = nodes[list(NODE_COLUMNS) + extra]

    edges = pd.DataFrame(
        [(*sorted((u, v)), float(w)) for u, v, w in graph.edges(data="weight")],
        columns=list(EDGE_COLUMNS),
    ).sort_values(["source", "target"], ignore_index=True)
    return nodes, edges


def frames_to_network(nodes: pd.DataFrame, edges: pd.DataFrame) -> nx.Graph:
    """Rebuild a graph from the tables produced by :func:`network_to_frames`."""

    G = nx.Graph()
    for record in nodes.to_dict(orient="records"):
        node = str(record.pop("id"))
        G.add_node(node, **{k: v for k, v in record.items() if not _is_missing(v)})
    G.add_weighted_edges_from(
        (str(s), str(t), float(w)) for s, t, w in edges[list(EDGE_COLUMNS)].itertuples(index=False)
    )
    return G


def _is_missing(value) -> bool:
    return value is None or (np.ndim(value) == 0 and pd.isna(value))


def _native(value):
    if isinstance(value, np.generic):
        return value.item()
    return value


def _graphml_ready(graph: nx.Graph) -> nx.Graph:
    clean = nx.Graph()
    clean.graph.update({k: _native(v) for k, v in graph.graph.items() if not _is_missing(v)})
    for node, attrs in graph.nodes(data=True):
        clean.add_node(str(node), **{k: _native(v) for k, v in attrs.items() if not _is_missing(v)})
    for u, v, attrs in graph.edges(data=True):
        clean.add_edge(str(u), str(v), **{k: _native(x) for k, x in attrs.items() if not _is_missing(x)})
    return clean


def write_network(graph: nx.Graph, directory: Path, stem: str) -> Dict[str, Path]:
    """Write ``graph`` as GraphML plus node and edge CSV tables.

    Returns
    -------
    dict
        Paths keyed by ``"graphml"``, ``"nodes"`` and ``"edges"``.
    """

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    paths = {
        "graphml": directory / f"{stem}.graphml",
        "nodes": directory / f"{stem}_nodes.csv",
        "edges": directory / f"{stem}_edges.csv",
    }
    nx.write_graphml(_graphml_ready(graph), paths["graphml"])
    nodes, edges = network_to_frames(graph)
    nodes.to_csv(paths["nodes"], index=False)
    edges.to_csv(paths["edges"], index=False)
    logger.info("Network %s written to %s", stem, directory)
    return paths


def read_network(path: Path) -> nx.Graph:
    """Read a network written by :func:`write_network`."""

    path = Path(path)
    if path.suffix.lower() == ".graphml":
        return nx.Graph(nx.read_graphml(path))
    stem = path.name.replace("_nodes.csv", "").replace("_edges.csv", "")
    nodes = pd.read_csv(path.parent / f"{stem}_nodes.csv", dtype={"id": str})
    edges = pd.read_csv(path.parent / f"{stem}_edges.csv", dtype={"source": str, "target": str})
    return frames_to_network(nodes, edges)


def write_cohesion(records: List[CohesionRecord], path: Path) -> Path:
    path = Path(path)
    _ensure_parent(path)
    cohesion_to_frame(records).to_csv(path, index=False)
    logger.info("Cohesion table written to %s", path)
    return path


def write_summary(summary: pd.DataFrame, path: Path) -> Path:
    path = Path(path)
    _ensure_parent(path)
    summary.to_csv(path, index=False)
    return path


def write_comparison(comparison: PeriodComparison, path: Path) -> Path:
    path = Path(path)
    _ensure_parent(path)
    comparison.node_deltas.to_csv(path)
    return path

