from __future__ import annotations

import math

import pytest

from cooc_cohesion import AnalysisConfig, EmptyGraphWarning, analyze_period, compare_periods


@pytest.fixture
def early(community, periods):
    return analyze_period(community, periods, "Early")


@pytest.fixture
def late(community, periods):
    return analyze_period(community, periods, "Late")


def test_compare_early_late(early, late):
    comparison = compare_periods(early, late)

    assert comparison.reference == "Early"
    assert comparison.other == "Late"
    assert comparison.shared_taxa == sorted(early.graph.nodes())
    assert comparison.gained_taxa == []
    assert comparison.lost_taxa == []
    assert 0.0 <= comparison.edge_jaccard <= 1.0
    deltas = comparison.node_deltas
    assert {"degree_Early", "degree_Late", "degree_delta", "community_changed"} <= set(deltas.columns)
    assert list(deltas["pagerank_delta"]) == pytest.approx(
        list(deltas["pagerank_Late"] - deltas["pagerank_Early"])
    )
    assert comparison.summary_deltas["n_edges"] == (
        late.graph.number_of_edges() - early.graph.number_of_edges()
    )


def test_compare_with_itself(early):
    comparison = compare_periods(early, early)

    assert comparison.edge_jaccard == 1.0
    assert (comparison.node_deltas["closeness_delta"] == 0).all()
    assert not comparison.node_deltas["community_changed"].any()
    assert comparison.summary_deltas["n_vertices"] == 0.0


def test_compare_with_empty_period(community, periods, early):
    with pytest.warns(EmptyGraphWarning):
        empty = analyze_period(community, periods, "Late", config=AnalysisConfig(abundance_cutoff=1.0))

    comparison = compare_periods(early, empty)

    assert comparison.shared_taxa == []
    assert comparison.lost_taxa == sorted(early.graph.nodes())
    assert comparison.edge_jaccard == 0.0
    assert math.isnan(comparison.summary_deltas["modularity"])
