from __future__ import annotations

import warnings

import numpy as np
import pandas as pd
import pytest

from cooc_cohesion import (
    AbundanceMatrix,
    InvalidAbundanceError,
    sample_periods,
    taxonomy_labels,
)


@pytest.fixture
def table():
    return pd.DataFrame(
        {"s1": [2.0, 0.0, 6.0], "s2": [1.0, 0.0, 3.0], "s3": [0.0, 0.0, 0.0]},
        index=["a", "b", "c"],
    )


def test_identifiers_become_strings():
    matrix = AbundanceMatrix(pd.DataFrame([[1, 2]], index=[7], columns=[10, 11]))

    assert matrix.taxa == ["7"]
    assert matrix.samples == ["10", "11"]
    assert matrix.values.dtype == np.float64


@pytest.mark.parametrize(
    "frame",
    [
        pd.DataFrame({"s1": [1.0, -0.5]}, index=["a", "b"]),
        pd.DataFrame({"s1": [1.0, np.nan]}, index=["a", "b"]),
        pd.DataFrame({"s1": [1.0, np.inf]}, index=["a", "b"]),
        pd.DataFrame({"s1": [1.0, "many"]}, index=["a", "b"]),
        pd.DataFrame({"s1": [1.0, 2.0]}, index=["a", "a"]),
    ],
    ids=["negative", "nan", "inf", "text", "duplicate-taxa"],
)
def test_invalid_tables_are_rejected(frame):
    with pytest.raises(InvalidAbundanceError):
        AbundanceMatrix(frame)


def test_derived_matrices_are_copies(table):
    matrix = AbundanceMatrix(table)
    table.loc["a", "s1"] = 100.0

    assert matrix.table.loc["a", "s1"] == 2.0
    values = matrix.values
    values[0, 0] = -1.0
    assert matrix.table.loc["a", "s1"] == 2.0


def test_relative_keeps_empty_samples_at_zero(table):
    relative = AbundanceMatrix(table).relative()

    assert relative.table["s1"].sum() == pytest.approx(1.0)
    assert relative.table.loc["a", "s2"] == pytest.approx(0.25)
    assert (relative.table["s3"] == 0).all()


def test_filter_abundance_is_strict():
    matrix = AbundanceMatrix(pd.DataFrame({"s1": [1e-4, 0.5], "s2": [1e-4, 0.1]}, index=["edge", "keep"]))

    assert matrix.filter_abundance(1e-4).taxa == ["keep"]
    assert matrix.filter_abundance(0.0).taxa == ["edge", "keep"]


def test_for_period(table):
    periods = pd.Series({"s1": "Early", "s2": "Late", "s3": "Early"})

    early = AbundanceMatrix(table).for_period(periods, "Early", cutoff=0.0)

    assert early.samples == ["s1", "s3"]
    assert early.taxa == ["a", "c"]


def test_for_period_matches_integer_labels(table):
    periods = pd.Series({"s1": 1, "s2": 2, "s3": 1})

    first = AbundanceMatrix(table).for_period(periods, "1")

    assert first.samples == ["s1", "s3"]
    assert AbundanceMatrix(table).for_period(periods, 2).samples == ["s2"]


def test_select_unknown_taxa(table):
    with pytest.raises(KeyError):
        AbundanceMatrix(table).select_taxa(["a", "zz"])


def test_from_frame_samples_as_rows(table):
    matrix = AbundanceMatrix.from_frame(table.T, samples_as_rows=True)

    assert matrix.taxa == ["a", "b", "c"]
    assert matrix.samples == ["s1", "s2", "s3"]


def test_aggregate_pools_unmapped_taxa(table):
    aggregated = AbundanceMatrix(table).aggregate({"a": "G1", "c": "G1"})

    assert aggregated.taxa == ["G1", "Unknown"]
    assert aggregated.table.loc["G1", "s1"] == 8.0
    assert aggregated.table.loc["Unknown", "s1"] == 0.0


def test_taxonomy_labels():
    ranks = pd.DataFrame(
        {"Phylum": ["Firmicutes", None, "Bacteroidetes"], "Genus": ["Lacto", "Lacto", np.nan]},
        index=["t1", "t2", "t3"],
    )

    assert taxonomy_labels(ranks, "Phylum") == {"t1": "Firmicutes", "t2": "Unknown", "t3": "Bacteroidetes"}
    assert taxonomy_labels(ranks, "Phylum", key_rank="Genus") == {
        "Lacto": "Firmicutes",
        "Unknown": "Bacteroidetes",
    }
    with pytest.raises(KeyError):
        taxonomy_labels(ranks, "Species")


def test_sample_periods():
    metadata = pd.DataFrame({"Period": ["Late", "Early", "Middle"]}, index=["s1", "s2", "s3"])

    periods = sample_periods(metadata, "Period")

    assert list(periods.cat.categories) == ["Early", "Late"]
    assert periods.cat.ordered
    assert periods["s1"] == "Late"
    assert pd.isna(periods["s3"])
    with pytest.raises(KeyError):
        sample_periods(metadata, "Season")


def test_sample_periods_in_order_of_appearance():
    metadata = pd.DataFrame({"Period": ["B", "A", "B"]}, index=["s1", "s2", "s3"])

    periods = sample_periods(metadata, "Period", order=None)

    assert list(periods.cat.categories) == ["B", "A"]


def test_unlisted_labels_become_missing_without_warnings():
    metadata = pd.DataFrame({"Period": ["Late", "Middle", "Early", "Middle"]}, index=["s1", "s2", "s3", "s4"])

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        periods = sample_periods(metadata, "Period", order=["Early", "Late"])

    assert list(periods.cat.categories) == ["Early", "Late"]
    assert periods.isna().tolist() == [False, True, False, True]
