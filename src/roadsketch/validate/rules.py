"""
Structural validation for the road network.

Checks the graph invariants that path insertion must preserve, plus the
consistency of the derived render caches.
"""

import numpy as np
from scipy.spatial import KDTree
from shapely.geometry import LineString, Point

from roadsketch.models import CheckResult, Severity, ValidationReport, edge_key
from roadsketch.tracer import get_tracer, trace


@trace(label="run_validation")
def run_validation(network):
    """
    Run all validation checks on a RoadNetwork.

    Returns ValidationReport with all check results.
    """
    tracer = get_tracer()
    graph = network.graph

    checks = [
        check_adjacency_symmetry(graph),
        check_no_self_loops(graph),
        check_node_separation(graph),
        check_planarity(graph),
        check_cache_consistency(network),
    ]
    report = ValidationReport(checks=checks)

    tracer.event(f"Validation complete: {report.error_count} errors, {report.warning_count} warnings")

    return report


def check_adjacency_symmetry(graph):
    """Every neighbour relation must hold in both directions."""
    one_sided = []
    for node in graph.nodes():
        for other in graph.neighbors(node):
            if node not in graph.neighbors(other):
                one_sided.append([node, other])

    return CheckResult(
        rule_id="adjacency_symmetry",
        severity=Severity.ERROR,
        passed=not one_sided,
        message=(f"{len(one_sided)} one-sided adjacencies" if one_sided
                 else "Adjacency is symmetric"),
        evidence={"one_sided": one_sided[:5]} if one_sided else {},
    )


def check_no_self_loops(graph):
    """No node may be adjacent to itself."""
    loops = [node for node in graph.nodes() if node in graph.neighbors(node)]

    return CheckResult(
        rule_id="no_self_loops",
        severity=Severity.ERROR,
        passed=not loops,
        message=f"{len(loops)} self loops" if loops else "No self loops",
        evidence={"nodes": loops[:5]} if loops else {},
    )


def check_node_separation(graph):
    """Distinct nodes must be at least the tolerance apart."""
    nodes = graph.nodes()
    close_pairs = []

    if len(nodes) >= 2:
        positions = np.array([graph.position(n) for n in nodes])
        tree = KDTree(positions[:, :2])
        for i, j in sorted(tree.query_pairs(r=graph.tolerance)):
            # query_pairs is inclusive; exactly the tolerance apart is allowed
            if np.linalg.norm(positions[i] - positions[j]) < graph.tolerance:
                close_pairs.append([nodes[i], nodes[j]])

    return CheckResult(
        rule_id="node_separation",
        severity=Severity.ERROR,
        passed=not close_pairs,
        message=(f"{len(close_pairs)} node pairs closer than {graph.tolerance}" if close_pairs
                 else "All nodes are distinct within tolerance"),
        evidence={"pairs": close_pairs[:5]} if close_pairs else {},
    )


def check_planarity(graph):
    """
    Edges may only meet at shared nodes.

    Two edges without a common node may only touch within the tolerance of
    one of their endpoints, where insertion snaps crossings onto the node;
    two edges with a common node must meet only at that node.
    """
    edges = list(graph.edges())
    lines = [LineString([graph.position(u)[:2], graph.position(v)[:2]]) for u, v in edges]

    crossings = []
    for i in range(len(edges)):
        for j in range(i + 1, len(edges)):
            if not lines[i].intersects(lines[j]):
                continue
            meeting = lines[i].intersection(lines[j])
            if meeting.geom_type == "Point":
                if set(edges[i]) & set(edges[j]):
                    continue
                if _near_endpoint(graph, meeting, edges[i] + edges[j]):
                    continue
            crossings.append([list(edges[i]), list(edges[j])])

    return CheckResult(
        rule_id="planarity",
        severity=Severity.ERROR,
        passed=not crossings,
        message=(f"{len(crossings)} edge pairs cross away from a shared node" if crossings
                 else "No edges cross"),
        evidence={"crossings": crossings[:5]} if crossings else {},
    )


def _near_endpoint(graph, point, nodes):
    return any(point.distance(Point(graph.position(n)[:2])) < graph.tolerance for n in nodes)


def check_cache_consistency(network):
    """Cached junctions and segments must describe live topology."""
    graph = network.graph
    stale_segments = [list(key) for key in network.layout.segments
                      if not graph.has_edge(*key)]
    stale_junctions = [node for node in network.layout.junctions
                       if graph.degree(node) == 0]
    missing_segments = [list(edge_key(u, v)) for u, v in graph.edges()
                        if edge_key(u, v) not in network.layout.segments]

    passed = not stale_segments and not stale_junctions
    message = "Render caches match the graph"
    if not passed:
        message = f"{len(stale_segments)} stale segments, {len(stale_junctions)} stale junctions"

    return CheckResult(
        rule_id="cache_consistency",
        severity=Severity.ERROR,
        passed=passed,
        message=message,
        evidence={
            "stale_segments": stale_segments[:5],
            "stale_junctions": stale_junctions[:5],
            "edges_without_quad": missing_segments[:5],
        },
    )
