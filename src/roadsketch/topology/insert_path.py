"""
Path insertion with edge splitting.

Inserting a segment into the road graph splits it, and every edge it
crosses, at the crossing points, so that no two edges ever cross away from
a shared node.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import List, Set, Tuple

import numpy as np

from roadsketch.geometry.primitives import as_point, distance, intersect
from roadsketch.models import edge_key
from roadsketch.tracer import get_tracer, trace


DEFAULT_MAX_ITERATIONS = 10000


@dataclass
class InsertionReport:
    """What a single path insertion changed."""
    affected: Set[int] = field(default_factory=set)
    removed_edges: List[Tuple[int, int]] = field(default_factory=list)
    added_edges: List[Tuple[int, int]] = field(default_factory=list)
    split_points: Set[int] = field(default_factory=set)


class InsertionLimitError(RuntimeError):
    """Insertion hit its iteration bound; report holds the changes already applied."""

    def __init__(self, message, report):
        super().__init__(message)
        self.report = report


@dataclass
class PreviewIntersection:
    """Where a pending path would cross an existing edge."""
    t: float
    point: List[float]
    edge: Tuple[int, int]


def insert_path(graph, start, end, max_iterations=DEFAULT_MAX_ITERATIONS):
    """
    Insert the segment start-end into graph, splitting at intersections.

    Returns the set of node ids whose adjacency changed.
    """
    return insert_path_with_report(graph, start, end, max_iterations).affected


@trace(label="insert_path")
def insert_path_with_report(graph, start, end, max_iterations=DEFAULT_MAX_ITERATIONS):
    """
    Insert a path and report every structural change.

    Sub-paths wait in a FIFO queue. Each one is scanned against the current
    edges; the first crossing that needs a split is applied and the scan
    restarts. A sub-path with no crossings left is committed as an edge.

    Args:
        graph: SpatialGraph to mutate
        start, end: node ids or coordinates
        max_iterations: bound on scans before giving up

    Returns:
        InsertionReport

    Raises:
        ValueError: start and end are the same node or closer than the tolerance
        InsertionLimitError: max_iterations exceeded (a RuntimeError carrying
            the partial report)
    """
    tracer = get_tracer()

    start_pos = _resolve_position(graph, start)
    end_pos = _resolve_position(graph, end)
    if distance(start_pos, end_pos) < graph.tolerance:
        raise ValueError("Path endpoints coincide; zero-length paths cannot be inserted")

    report = InsertionReport()
    a = graph.canonicalize(start)
    b = graph.canonicalize(end)
    report.affected.update((a, b))

    queue = deque([(a, b)])
    iterations = 0

    while queue:
        path = queue.popleft()
        while True:
            iterations += 1
            if iterations > max_iterations:
                raise InsertionLimitError(
                    f"Path insertion did not settle after {max_iterations} iterations", report,
                )

            outcome = _split_once(graph, path, report)
            if outcome is None:
                _commit(graph, path, report)
                break
            if outcome != path:
                queue.extend(outcome)
                break

    tracer.event(
        f"Inserted path: {len(report.added_edges)} edges added, "
        f"{len(report.removed_edges)} removed, {len(report.split_points)} split points"
    )
    return report


def _resolve_position(graph, point):
    node = graph.find_node(point)
    if node is not None:
        return graph.position(node)
    if graph.is_node_id(point):
        raise KeyError(f"Unknown node: {point}")
    return as_point(point)


def _joint(graph, point, edge):
    """Endpoint of edge whose position is exactly point, else None."""
    for node in edge:
        if np.array_equal(graph.position(node), point):
            return node
    return None


def _split_once(graph, path, report):
    """
    Apply at most one split decision for path.

    Returns None when path crosses nothing, path itself when only another
    edge was split, or the two halves of path when it was split.
    """
    tracer = get_tracer()
    path_segment = graph.segment(path)

    for edge in list(graph.edges()):
        hit = intersect(path_segment, graph.segment(edge), strict=True, tolerance=graph.tolerance)
        if hit is None:
            continue
        point = hit[0]

        x = _joint(graph, point, path)
        if x is None:
            x = _joint(graph, point, edge)
        if x is None:
            x = graph.canonicalize(point)

        on_path = x in path
        on_edge = x in edge
        if on_path and on_edge:
            continue

        if not on_edge:
            _split_edge(graph, edge, x, report)

        if not on_path:
            tracer.event("Split path", level="DEBUG", path=path, at=x)
            report.split_points.add(x)
            report.affected.add(x)
            return (path[0], x), (x, path[1])
        return path

    return None


def _split_edge(graph, edge, x, report):
    """Replace edge u-v with u-x and x-v."""
    u, v = edge
    graph.remove_edge(u, v)
    report.removed_edges.append(edge_key(u, v))
    for end in (u, v):
        if graph.add_edge(end, x):
            report.added_edges.append(edge_key(end, x))
    report.split_points.add(x)
    report.affected.update((u, v, x))
    get_tracer().event("Split edge", level="DEBUG", edge=edge, at=x)


def _commit(graph, path, report):
    if graph.add_edge(path[0], path[1]):
        report.added_edges.append(edge_key(*path))
    report.affected.update(path)


def preview_intersections(graph, start, end):
    """
    Crossings of a pending segment with existing edges, ordered by t.

    Read-only: the graph is not touched.
    """
    segment = (as_point(start), as_point(end))
    hits = []
    for edge in graph.edges():
        hit = intersect(segment, graph.segment(edge), strict=True, tolerance=graph.tolerance)
        if hit is not None:
            point, t, _ = hit
            hits.append(PreviewIntersection(t=float(t), point=point.tolist(), edge=edge))
    hits.sort(key=lambda h: h.t)
    return hits
