"""Pytest fixtures for road sketch tests."""

import tempfile

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def default_config():
    """Create default engine configuration."""
    from roadsketch.config import EngineConfig
    return EngineConfig()


@pytest.fixture
def empty_graph():
    """An empty graph with the default tolerance."""
    from roadsketch.graph.spatial_graph import SpatialGraph
    return SpatialGraph()


@pytest.fixture
def vertical_edge_graph():
    """A graph holding the single edge (5, -5) - (5, 5)."""
    from roadsketch.graph.spatial_graph import SpatialGraph

    graph = SpatialGraph()
    graph.add_edge((5, -5), (5, 5))
    return graph


@pytest.fixture
def crossing_network(default_config):
    """
    Two perpendicular roads crossing at the origin.

    Node ids: 0 = (0, -50), 1 = (0, 50), 2 = (-50, 0), 3 = (50, 0),
    4 = (0, 0) created by the split.
    """
    from roadsketch.network import RoadNetwork

    network = RoadNetwork(default_config)
    network.insert_path((0, -50), (0, 50))
    network.insert_path((-50, 0), (50, 0))
    return network
