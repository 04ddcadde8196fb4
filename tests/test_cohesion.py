from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from cooc_cohesion import (
    COHESION_COLUMNS,
    ConnectednessVectors,
    UndefinedRatioWarning,
    cohesion_to_frame,
    compute_cohesion,
    compute_connectedness,
    build_correlation_matrix,
    score_sample,
)


@pytest.fixture
def connectedness():
    return ConnectednessVectors(("t1", "t2", "t3"), [0.8, 0.5, 0.0], [-0.2, -0.3, -0.4])


def test_single_taxon_sample(connectedness):
    abundances = pd.Series({"t1": 1.0, "t2": 0.0, "t3": 0.0})

    record = score_sample("S1", abundances, connectedness, period="Early")

    assert record.cohesion_pos == pytest.approx(0.8)
    assert record.cohesion_neg == pytest.approx(-0.2)
    assert record.neg_pos_ratio == pytest.approx(0.25)
    assert record.total_cohesion == pytest.approx(1.0)
    assert record.ratio_defined
    assert record.period == "Early"


def test_zero_positive_cohesion_leaves_ratio_undefined(connectedness):
    abundances = pd.Series({"t1": 0.0, "t2": 0.0, "t3": 0.5})

    with pytest.warns(UndefinedRatioWarning):
        record = score_sample("S2", abundances, connectedness)

    assert record.cohesion_pos == 0.0
    assert record.cohesion_neg == pytest.approx(-0.2)
    assert record.total_cohesion == pytest.approx(0.2)
    assert math.isnan(record.neg_pos_ratio)
    assert not record.ratio_defined
    assert record.period is None


def test_missing_taxa_raise(connectedness):
    with pytest.raises(KeyError):
        score_sample("S3", pd.Series({"t1": 1.0}), connectedness)


def test_extra_taxa_are_ignored(connectedness):
    abundances = pd.Series({"t1": 0.5, "t2": 0.5, "t3": 0.0, "other": 10.0})

    record = score_sample("S4", abundances, connectedness)

    assert record.cohesion_pos == pytest.approx(0.65)


def test_compute_cohesion_matches_matrix_product(community, periods):
    conn = compute_connectedness(build_correlation_matrix(community))

    records = compute_cohesion(community, conn, periods)

    assert [r.sample for r in records] == community.samples
    expected_pos = community.values.T @ conn.positive
    expected_neg = community.values.T @ conn.negative
    assert [r.cohesion_pos for r in records] == pytest.approx(list(expected_pos))
    assert [r.cohesion_neg for r in records] == pytest.approx(list(expected_neg))
    assert records[0].period == "Early"
    assert records[-1].period == "Late"
    for r in records:
        assert r.cohesion_pos >= 0
        assert r.cohesion_neg <= 0
        assert r.total_cohesion == pytest.approx(r.cohesion_pos - r.cohesion_neg)


def test_samples_are_scored_independently(community):
    conn = compute_connectedness(build_correlation_matrix(community))
    records = compute_cohesion(community, conn)
    first = community.samples[0]

    alone = score_sample(first, community.sample(first), conn)

    assert alone.cohesion_pos == records[0].cohesion_pos
    assert alone.cohesion_neg == records[0].cohesion_neg


def test_cohesion_frame(connectedness):
    records = [
        score_sample("S1", pd.Series({"t1": 1.0, "t2": 0.0, "t3": 0.0}), connectedness),
        score_sample("S2", pd.Series({"t1": 0.2, "t2": 0.2, "t3": 0.6}), connectedness),
    ]

    frame = cohesion_to_frame(records)

    assert list(frame.columns) == list(COHESION_COLUMNS) + ["ratio_defined"]
    assert list(frame["sample"]) == ["S1", "S2"]
    assert frame["ratio_defined"].dtype == np.bool_
