"""
Undirected graph over 2D points with tolerance-based node identity.

Nodes live in an arena addressed by integer id; the position of each node is
stored on the networkx node as "pos" and never changes. Two points closer
than the tolerance are the same node, so every coordinate handed to the
graph is first resolved to an existing id where one matches.
"""

import itertools

import networkx as nx
import numpy as np

from roadsketch.geometry.primitives import (
    TOLERANCE, as_point, closest_point_on_segment, distance, format_point,
)
from roadsketch.models import SnapResult


class SpatialGraph:
    """
    Planar road graph keyed by tolerance-deduplicated points.

    Endpoint arguments may be node ids or coordinates. Structural operations
    either apply completely or leave the graph untouched, and report failure
    by returning False.
    """

    def __init__(self, tolerance=TOLERANCE):
        if tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")
        self.tolerance = tolerance
        self._graph = nx.Graph()
        self._next_id = itertools.count()
        # (ids, positions) snapshot for vectorised lookups, None when stale
        self._lookup = None

    def __contains__(self, node):
        return self.is_node_id(node) and node in self._graph

    def __len__(self):
        return self._graph.number_of_nodes()

    @staticmethod
    def is_node_id(value):
        return isinstance(value, (int, np.integer)) and not isinstance(value, bool)

    def _lookup_table(self):
        if self._lookup is None:
            ids = list(self._graph.nodes)
            if ids:
                positions = np.array([self._graph.nodes[n]["pos"] for n in ids])
            else:
                positions = np.empty((0, 3))
            self._lookup = (ids, positions)
        return self._lookup

    def number_of_nodes(self):
        return self._graph.number_of_nodes()

    def number_of_edges(self):
        return self._graph.number_of_edges()

    def nodes(self):
        """Node ids in creation order."""
        return list(self._graph.nodes)

    def position(self, node):
        """Position of a node as a fresh xyz array."""
        if node not in self:
            raise KeyError(f"Unknown node: {node}")
        return self._graph.nodes[node]["pos"].copy()

    def neighbors(self, node):
        """Adjacent node ids in the order their edges were added."""
        if node not in self:
            return []
        return list(self._graph.adj[node])

    def degree(self, node):
        if node not in self:
            return 0
        return self._graph.degree[node]

    def find_node(self, point):
        """
        Resolve an id or coordinate to an existing node without mutating.

        Returns the first node (in creation order) closer than the
        tolerance, or None.
        """
        if self.is_node_id(point):
            return int(point) if point in self._graph else None

        ids, positions = self._lookup_table()
        if not ids:
            return None
        dists = np.linalg.norm(positions - as_point(point), axis=1)
        within = dists < self.tolerance
        if not within.any():
            return None
        return ids[int(np.argmax(within))]

    def canonicalize(self, point):
        """
        Node id for a point, creating an isolated node if none matches.

        Raises KeyError for an id that is not in the graph.
        """
        if self.is_node_id(point):
            if point not in self._graph:
                raise KeyError(f"Unknown node: {point}")
            return int(point)

        node = self.find_node(point)
        if node is not None:
            return node
        node = next(self._next_id)
        self._graph.add_node(node, pos=as_point(point))
        self._lookup = None
        return node

    add_node = canonicalize

    def has_edge(self, a, b):
        a, b = self.find_node(a), self.find_node(b)
        if a is None or b is None:
            return False
        return self._graph.has_edge(a, b)

    def add_edge(self, a, b):
        """
        Connect two points.

        Fails without mutating when both resolve to the same node, lie
        closer than the tolerance, or are already connected.
        """
        if self.is_node_id(a) and a not in self._graph:
            return False
        if self.is_node_id(b) and b not in self._graph:
            return False

        found_a, found_b = self.find_node(a), self.find_node(b)
        pos_a = self._graph.nodes[found_a]["pos"] if found_a is not None else as_point(a)
        pos_b = self._graph.nodes[found_b]["pos"] if found_b is not None else as_point(b)

        if found_a is not None and found_a == found_b:
            return False
        if distance(pos_a, pos_b) < self.tolerance:
            return False
        if found_a is not None and found_b is not None and self._graph.has_edge(found_a, found_b):
            return False

        a = self.canonicalize(a if found_a is None else found_a)
        b = self.canonicalize(b if found_b is None else found_b)
        self._graph.add_edge(a, b)
        return True

    def remove_edge(self, a, b):
        """Disconnect two nodes. Never creates nodes; False if not connected."""
        a, b = self.find_node(a), self.find_node(b)
        if a is None or b is None or not self._graph.has_edge(a, b):
            return False
        self._graph.remove_edge(a, b)
        return True

    def remove_node(self, node):
        """Delete an isolated node. Nodes that still have edges are kept."""
        node = self.find_node(node)
        if node is None or self._graph.degree[node] > 0:
            return False
        self._graph.remove_node(node)
        self._lookup = None
        return True

    def edges(self):
        """Yield each undirected edge once as (u, v)."""
        yield from self._graph.edges()

    def segment(self, edge):
        """Endpoint positions of an edge."""
        return self.position(edge[0]), self.position(edge[1])

    def nearest_node_or_point_on_edge(self, point, radius):
        """
        Align a free point with the graph.

        A node within radius wins outright and its position is returned.
        Otherwise the closest point on any edge within radius is returned
        (first edge wins exact ties), else the query point unchanged.
        """
        if radius < 0:
            raise ValueError(f"radius must be non-negative, got {radius}")
        point = as_point(point)

        ids, positions = self._lookup_table()
        if ids:
            within = np.linalg.norm(positions - point, axis=1) <= radius
            if within.any():
                node = ids[int(np.argmax(within))]
                return SnapResult(point=positions[int(np.argmax(within))].tolist(), node=node)

        best = None
        best_distance = radius
        for edge in self.edges():
            candidate = closest_point_on_segment(self.segment(edge), point, self.tolerance)
            d = distance(point, candidate)
            if d <= radius and (best is None or d < best_distance):
                best = (candidate, edge)
                best_distance = d

        if best is None:
            return SnapResult(point=point.tolist())
        return SnapResult(point=best[0].tolist(), edge=best[1])

    def describe(self):
        """One line per node: index, position and neighbour ids."""
        lines = []
        for node, pos in self._graph.nodes(data="pos"):
            lines.append(f"[{node}] {format_point(pos)} = {self.neighbors(node)}")
        return "\n".join(lines)

    def to_networkx(self):
        """Copy of the underlying networkx graph."""
        return self._graph.copy()
