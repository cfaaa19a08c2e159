"""
Render-state cache derived from the road graph.

Junction and segment meshes are recomputed only for the nodes a change
touched. The graph stays authoritative; entries here hold node ids and are
dropped as soon as the topology they describe disappears.
"""

from collections import defaultdict
from types import MappingProxyType

from roadsketch.layout.junctions import build_junction, fan_mesh, quad_mesh
from roadsketch.models import RoadNode, RoadSegment, edge_key
from roadsketch.tracer import get_tracer


class RoadLayout:
    """Junction polygons and segment quads for a SpatialGraph."""

    def __init__(self, graph, width, tolerance=None):
        if width <= 0:
            raise ValueError(f"width must be positive, got {width}")
        self.graph = graph
        self.width = width
        self.tolerance = graph.tolerance if tolerance is None else tolerance
        self._junctions = {}
        self._segments = {}
        self._segments_by_node = defaultdict(set)

    @property
    def junctions(self):
        """Read-only mapping of node id to RoadNode."""
        return MappingProxyType(self._junctions)

    @property
    def segments(self):
        """Read-only mapping of ordered edge key to RoadSegment."""
        return MappingProxyType(self._segments)

    def rebuild_junction(self, node):
        """
        Recompute the polygon of one node.

        Returns the mesh, or None when the node has no edges (any cached
        junction is dropped).
        """
        if node not in self.graph or self.graph.degree(node) == 0:
            self._junctions.pop(node, None)
            return None

        center = self.graph.position(node)
        neighbours = [(n, self.graph.position(n)) for n in self.graph.neighbors(node)]
        offsets, ring = build_junction(center, neighbours, self.width, self.tolerance)

        mesh = fan_mesh(center, ring)
        self._junctions[node] = RoadNode(node=node, offsets=offsets, mesh=mesh)
        return mesh

    def rebuild_segment(self, edge):
        """
        Recompute the quad of one edge.

        Needs both junctions to hold complete offsets for each other;
        otherwise any cached quad is dropped and None returned.
        """
        key = edge_key(*edge)
        a, b = key
        if not self.graph.has_edge(a, b):
            self.discard_segment(key)
            return None

        own = self._junctions.get(a)
        other = self._junctions.get(b)
        own_offsets = own.offsets.get(b) if own else None
        other_offsets = other.offsets.get(a) if other else None
        if own_offsets is None or other_offsets is None:
            self.discard_segment(key)
            return None
        if not (own_offsets.complete and other_offsets.complete):
            self.discard_segment(key)
            return None

        mesh = quad_mesh(own_offsets, other_offsets)
        self._segments[key] = RoadSegment(nodes=key, mesh=mesh)
        self._segments_by_node[a].add(key)
        self._segments_by_node[b].add(key)
        return mesh

    def rebuild(self, nodes):
        """Rebuild the given junctions, then every segment touching them."""
        nodes = list(dict.fromkeys(nodes))
        for node in nodes:
            self.rebuild_junction(node)

        keys = set()
        for node in nodes:
            keys.update(self._segments_by_node.get(node, ()))
            keys.update(edge_key(node, n) for n in self.graph.neighbors(node))
        for key in sorted(keys):
            self.rebuild_segment(key)

        get_tracer().event(
            f"Rebuilt {len(nodes)} junctions and {len(keys)} segments",
            level="DEBUG",
        )

    def discard_segment(self, edge):
        """Drop the cached quad of an edge, if any."""
        key = edge_key(*edge)
        if self._segments.pop(key, None) is None:
            return False
        for node in key:
            keys = self._segments_by_node.get(node)
            if keys is not None:
                keys.discard(key)
                if not keys:
                    del self._segments_by_node[node]
        return True

    def discard_node(self, node):
        """Drop a node's junction and every quad that references it."""
        for key in list(self._segments_by_node.get(node, ())):
            self.discard_segment(key)
        return self._junctions.pop(node, None) is not None

    def meshes(self):
        """All current meshes as (kind, key, Mesh) for a renderer."""
        result = [("segment", key, seg.mesh) for key, seg in self._segments.items()]
        result.extend(("junction", node, road_node.mesh) for node, road_node in self._junctions.items())
        return result
