"""Shared fixtures and helpers for socnet tests."""

import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]  # project root
sys.path.insert(0, str(ROOT))

from socnet.core.graph import SocNet  # noqa: E402

# ======================================================================
# FIXTURES
# ======================================================================


@pytest.fixture
def path_graph():
    """Directed unweighted path 1 -> 2 -> 3 -> 4."""
    G = SocNet(directed=True, random_seed=0)
    G.add_vertices(4)
    for u in (1, 2, 3):
        G.add_edge(u, u + 1)
    return G


@pytest.fixture
def star_graph():
    """Undirected star: center 1, leaves 2..5."""
    G = SocNet(directed=False, random_seed=0)
    G.add_vertices(5)
    for leaf in (2, 3, 4, 5):
        G.add_edge(1, leaf)
    return G


@pytest.fixture
def complete_graph():
    """Undirected K5."""
    G = SocNet(directed=False, random_seed=0)
    G.add_vertices(5)
    G.create_subgraph([1, 2, 3, 4, 5], kind="clique")
    return G


@pytest.fixture
def weighted_triangle():
    """Undirected triangle with weights 1-2: 1, 2-3: 1, 1-3: 5."""
    G = SocNet(directed=False, random_seed=0)
    G.add_vertices(3)
    G.add_edge(1, 2, weight=1.0)
    G.add_edge(2, 3, weight=1.0)
    G.add_edge(1, 3, weight=5.0)
    return G


@pytest.fixture
def two_relation_graph():
    """Four vertices; 'default' holds 1->2, 2->3 and 'advice' holds 3->1, 4->1."""
    G = SocNet(directed=True, random_seed=0)
    G.add_vertices(4)
    G.add_edge(1, 2)
    G.add_edge(2, 3)
    G.add_relation("advice")
    G.add_edge(3, 1, relation=1)
    G.add_edge(4, 1, relation=1)
    return G


# ======================================================================
# HELPERS
# ======================================================================


def edge_set(G, relation=None):
    """Set of (source, target, weight) triples of a relation."""
    return set(G.edges(relation=relation))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
