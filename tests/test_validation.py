"""Tests for structural validation rules."""

from roadsketch.validate.rules import (
    check_cache_consistency, check_node_separation, check_planarity, run_validation,
)


class TestPlanarity:
    """Tests for the planarity check."""

    def test_raw_crossing_detected(self, default_config):
        """Test that edges added without splitting are reported."""
        from roadsketch.network import RoadNetwork

        network = RoadNetwork(default_config)
        network.graph.add_edge((0, -5), (0, 5))
        network.graph.add_edge((-5, 0), (5, 0))

        result = check_planarity(network.graph)

        assert not result.passed
        assert result.evidence["crossings"] == [[[0, 1], [2, 3]]]
        assert run_validation(network).has_errors

    def test_overlap_at_shared_node_detected(self, empty_graph):
        """Test that two edges from one node along the same line fail."""
        empty_graph.add_edge((0, 0), (10, 0))
        empty_graph.add_edge((0, 0), (5, 0))

        assert not check_planarity(empty_graph).passed

    def test_crossing_within_tolerance_of_node_passes(self, empty_graph):
        """Test that a crossing insertion would snap onto a node is allowed."""
        empty_graph.add_edge((0, 0), (10, 0))
        empty_graph.add_edge((9.95, -5), (9.95, 5))

        assert check_planarity(empty_graph).passed

    def test_crossing_beyond_tolerance_of_node_fails(self, empty_graph):
        empty_graph.add_edge((0, 0), (10, 0))
        empty_graph.add_edge((9.8, -5), (9.8, 5))

        assert not check_planarity(empty_graph).passed

    def test_meeting_at_node_passes(self, empty_graph):
        empty_graph.add_edge((0, 0), (10, 0))
        empty_graph.add_edge((0, 0), (0, 10))

        assert check_planarity(empty_graph).passed


class TestNodeSeparation:
    """Tests for the node separation check."""

    def test_close_nodes_detected(self, empty_graph):
        """Test that nodes closer than the tolerance are reported."""
        empty_graph.canonicalize((0, 0))
        empty_graph.canonicalize((0.15, 0))
        empty_graph.tolerance = 0.2

        result = check_node_separation(empty_graph)

        assert not result.passed
        assert result.evidence["pairs"] == [[0, 1]]

    def test_single_node_passes(self, empty_graph):
        empty_graph.canonicalize((0, 0))

        assert check_node_separation(empty_graph).passed


class TestCacheConsistency:
    """Tests for render cache checks."""

    def test_stale_entries_detected(self, crossing_network):
        """Test that editing the graph behind the layout is caught."""
        crossing_network.graph.remove_edge(3, 4)

        result = check_cache_consistency(crossing_network)

        assert not result.passed
        assert result.evidence["stale_segments"] == [[3, 4]]
        assert result.evidence["stale_junctions"] == [3]

    def test_report_counts(self, crossing_network):
        """Test that the report tallies every check."""
        report = run_validation(crossing_network)

        assert [c.rule_id for c in report.checks] == [
            "adjacency_symmetry", "no_self_loops", "node_separation",
            "planarity", "cache_consistency",
        ]
        assert report.error_count == 0
        assert report.warning_count == 0
