"""
Road network facade.

Owns a SpatialGraph and its RoadLayout and applies configuration, so the
interaction layer can snap pointer positions, commit drawn paths and pick up
fresh meshes with one call each.
"""

from roadsketch.config import EngineConfig
from roadsketch.graph.spatial_graph import SpatialGraph
from roadsketch.layout.road_layout import RoadLayout
from roadsketch.tracer import get_tracer, trace
from roadsketch.topology.insert_path import (
    InsertionLimitError, insert_path_with_report, preview_intersections,
)
from roadsketch.validate.rules import run_validation


class RoadNetwork:
    """
    Graph plus derived render state.

    Every public method runs to completion before returning; callers on
    several threads must serialise access themselves.
    """

    def __init__(self, config=None):
        self.config = config or EngineConfig()
        self.graph = SpatialGraph(tolerance=self.config.geometry.tolerance)
        self.layout = RoadLayout(self.graph, width=self.config.road.width)

    def snap(self, point, radius=None):
        """Align a pointer position with existing nodes or edges."""
        if radius is None:
            radius = self.config.snap.radius
        return self.graph.nearest_node_or_point_on_edge(point, radius)

    def preview(self, start, end):
        """Crossings a path from start to end would create, ordered along it."""
        return preview_intersections(self.graph, start, end)

    @trace(label="network_insert_path")
    def insert_path(self, start, end):
        """
        Commit a drawn path and refresh the affected render state.

        Returns the set of node ids whose adjacency changed.
        """
        tracer = get_tracer()

        try:
            report = insert_path_with_report(
                self.graph, start, end,
                max_iterations=self.config.topology.max_iterations,
            )
        except InsertionLimitError as e:
            # splits made before the bound are kept; bring the caches in line
            self._refresh(e.report)
            raise
        self._refresh(report)

        tracer.event(f"Number of nodes: {self.graph.number_of_nodes()}")
        if tracer.is_enabled_for("DEBUG"):
            tracer.event("Graph:\n" + self.graph.describe(), level="DEBUG")

        return report.affected

    def _refresh(self, report):
        for edge in report.removed_edges:
            self.layout.discard_segment(edge)
        self.layout.rebuild(report.affected)

    def remove_edge(self, a, b):
        """Remove one road; False if it does not exist."""
        a, b = self.graph.find_node(a), self.graph.find_node(b)
        if a is None or b is None or not self.graph.remove_edge(a, b):
            return False
        self.layout.discard_segment((a, b))
        self.layout.rebuild([a, b])
        return True

    def remove_node(self, node):
        """Remove a node that no longer has roads; False otherwise."""
        node = self.graph.find_node(node)
        if node is None or not self.graph.remove_node(node):
            return False
        self.layout.discard_node(node)
        return True

    def meshes(self):
        """Current junction and segment meshes."""
        return self.layout.meshes()

    def validate(self):
        """Structural checks over graph and caches."""
        return run_validation(self)
