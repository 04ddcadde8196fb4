"""
Pytest fixtures shared by the cooc_cohesion tests.

``worked_example`` is the three-taxon, four-sample community used throughout
the documentation; ``community`` is a seeded two-period community with two
co-varying modules, an anti-correlated taxon, a noise taxon and a rare taxon.
"""

from __future__ import annotations

import networkx as nx
import numpy as np
import pandas as pd
import pytest

from cooc_cohesion import AbundanceMatrix


@pytest.fixture
def worked_example():
    table = pd.DataFrame(
        {
            "S1": [0.5, 0.1, 0.5],
            "S2": [0.4, 0.2, 0.4],
            "S3": [0.3, 0.3, 0.3],
            "S4": [0.2, 0.4, 0.2],
        },
        index=["A", "B", "C"],
    )
    return AbundanceMatrix(table)


@pytest.fixture
def community_table():
    rng = np.random.default_rng(0)
    n = 24
    f1 = rng.random(n)
    f2 = rng.random(n)
    rows = {}
    for k in range(4):
        rows[f"T{k}"] = f1 + 0.05 * rng.random(n)
    for k in range(4, 8):
        rows[f"T{k}"] = f2 + 0.05 * rng.random(n)
    rows["T8"] = rng.random(n)
    rows["T9"] = 1.5 - f1 + 0.05 * rng.random(n)
    rows["Rare"] = 1e-6 * rng.random(n)
    samples = [f"S{i:02d}" for i in range(n)]
    return pd.DataFrame(rows, index=samples).T


@pytest.fixture
def community(community_table):
    return AbundanceMatrix(community_table).relative()


@pytest.fixture
def periods(community):
    samples = community.samples
    labels = ["Early"] * 12 + ["Late"] * 12
    return pd.Series(
        pd.Categorical(labels, categories=["Early", "Late"], ordered=True),
        index=samples,
        name="Period",
    )


@pytest.fixture
def taxonomy():
    return {
        "T0": "Firmicutes",
        "T1": "Firmicutes",
        "T2": "Firmicutes",
        "T3": "Bacteroidetes",
        "T4": "Bacteroidetes",
        "T5": "Proteobacteria",
        "T6": "Proteobacteria",
        "T7": "Proteobacteria",
        "T9": "Actinobacteria",
    }


@pytest.fixture
def two_cliques():
    G = nx.Graph()
    left = ["a1", "a2", "a3", "a4"]
    right = ["b1", "b2", "b3", "b4"]
    for group in (left, right):
        for i, u in enumerate(group):
            for v in group[i + 1:]:
                G.add_edge(u, v, weight=0.8)
    G.add_edge("a1", "b1", weight=0.8)
    return G
