from __future__ import annotations

import pandas as pd
import pytest

from cooc_cohesion import (
    analyze_period,
    build_cooccurrence_network,
    build_correlation_matrix,
    load_abundance_table,
    network_to_frames,
    read_network,
    run_pipeline,
    write_cohesion,
    write_network,
)
from cooc_cohesion.config.const import EDGE_COLUMNS, NODE_COLUMNS
from cooc_cohesion.io import group_colors, load_sample_metadata


@pytest.fixture
def analysed(community, periods, taxonomy):
    return analyze_period(community, periods, "Early", taxonomy)


def test_load_abundance_table_tsv(tmp_path, community_table):
    path = tmp_path / "abundance.tsv"
    community_table.to_csv(path, sep="\t")

    abundance = load_abundance_table(path)

    assert abundance.taxa == list(community_table.index)
    assert abundance.samples == list(community_table.columns)


def test_load_abundance_table_samples_as_rows(tmp_path, community_table):
    path = tmp_path / "abundance.csv"
    community_table.T.to_csv(path)

    abundance = load_abundance_table(path, samples_as_rows=True)

    assert abundance.shape == community_table.shape


def test_load_sample_metadata_indexes_by_string(tmp_path):
    path = tmp_path / "meta.csv"
    pd.DataFrame({"Period": ["Early", "Late"]}, index=[1, 2]).to_csv(path)

    metadata = load_sample_metadata(path)

    assert list(metadata.index) == ["1", "2"]


def test_network_frames(analysed):
    nodes, edges = network_to_frames(analysed.graph)

    assert list(nodes.columns[: len(NODE_COLUMNS)]) == list(NODE_COLUMNS)
    assert list(edges.columns) == list(EDGE_COLUMNS)
    assert len(nodes) == analysed.graph.number_of_nodes()
    assert len(edges) == analysed.graph.number_of_edges()
    assert (edges["source"] < edges["target"]).all()
    assert nodes["size"].between(5.0, 30.0).all()
    assert nodes.set_index("id").loc["T8", "color"] == "#bdbdbd"


def test_frames_of_unannotated_network(worked_example):
    G = build_cooccurrence_network(build_correlation_matrix(worked_example))

    nodes, edges = network_to_frames(G)

    assert nodes["closeness"].isna().all()
    assert list(edges.itertuples(index=False, name=None))[0][:2] == ("A", "C")


def test_group_colors():
    colors = group_colors(["Firmicutes", "Unknown", "Bacteroidetes"])

    assert colors["Unknown"] == "#bdbdbd"
    assert colors["Firmicutes"] != colors["Bacteroidetes"]
    assert all(c.startswith("#") for c in colors.values())


def test_graphml_round_trip(tmp_path, analysed):
    paths = write_network(analysed.graph, tmp_path, "network_Early")

    assert all(p.exists() for p in paths.values())
    G = read_network(paths["graphml"])
    assert set(G.nodes()) == set(analysed.graph.nodes())
    assert G.number_of_edges() == analysed.graph.number_of_edges()
    for u, v, w in analysed.graph.edges(data="weight"):
        assert G[u][v]["weight"] == pytest.approx(w)
    assert G.nodes["T0"]["community"] == analysed.graph.nodes["T0"]["community"]
    assert G.nodes["T0"]["group"] == "Firmicutes"


def test_csv_round_trip(tmp_path, analysed):
    paths = write_network(analysed.graph, tmp_path, "network_Early")

    G = read_network(paths["nodes"])

    assert set(G.nodes()) == set(analysed.graph.nodes())
    assert set(map(frozenset, G.edges())) == set(map(frozenset, analysed.graph.edges()))
    assert G.nodes["T0"]["pagerank"] == pytest.approx(analysed.graph.nodes["T0"]["pagerank"])


def test_write_cohesion(tmp_path, community, periods):
    result = run_pipeline(community, periods)

    path = write_cohesion(result.cohesion, tmp_path / "out" / "cohesion.csv")

    frame = pd.read_csv(path)
    assert len(frame) == community.n_samples
    assert list(frame.columns[:2]) == ["sample", "period"]
