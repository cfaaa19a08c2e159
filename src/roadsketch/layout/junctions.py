"""
Junction polygons from angularly sorted incident roads.

Each road meeting a node contributes a left and right boundary line offset
by half the road width. Consecutive roads around the node are joined where
their boundary lines meet (the miter point), and the resulting ring is fan
triangulated around the node centre.
"""

import math

import numpy as np

from roadsketch.geometry.primitives import TOLERANCE, as_point, intersect, point_at, tangent
from roadsketch.models import Mesh, SideOffsets


LEFT = "left"
RIGHT = "right"

QUAD_INDICES = [0, 1, 2, 2, 3, 0]


def outward_angle(a, b):
    """
    Angle of b - a in [0, 2*pi), used to order roads around a.

    A horizontal vector gives 0 (+x) or pi (-x). Otherwise the unsigned
    angle to +x is used directly for y < 0 and mirrored for y > 0.
    """
    v = as_point(b) - as_point(a)
    if v[1] == 0:
        return math.pi if v[0] < 0 else 0.0
    cos_angle = v[0] / np.linalg.norm(v)
    inner = math.acos(min(max(cos_angle, -1.0), 1.0))
    return 2 * math.pi - inner if v[1] > 0 else inner


def side_point(center, direction, side, width):
    """Point half a road width to the left or right of center."""
    if side == LEFT:
        normal = np.array([-direction[1], direction[0], 0.0])
    elif side == RIGHT:
        normal = np.array([direction[1], -direction[0], 0.0])
    else:
        raise ValueError(f"Unknown side: {side}")
    return as_point(center) + normal * (width / 2)


def offset_line(start, direction, length):
    return start, start + direction * length


def build_junction(center, neighbours, width, tolerance=TOLERANCE):
    """
    Boundary offsets and polygon ring for one node.

    Args:
        center: node position
        neighbours: list of (node_id, position) for adjacent nodes
        width: full road width
        tolerance: distance treated as zero

    Returns:
        (offsets, ring): offsets maps neighbour id to SideOffsets, ring is
        the list of polygon points in order (empty for an isolated node)
    """
    if width <= 0:
        raise ValueError(f"width must be positive, got {width}")

    center = as_point(center)
    if not neighbours:
        return {}, []

    ordered = sorted(neighbours, key=lambda item: outward_angle(center, item[1]))
    half = width / 2
    offsets = {}
    ring = []

    if len(ordered) == 1:
        # stub: a rectangle extending half a width past the node
        node, position = ordered[0]
        direction = tangent(position, center)
        left = side_point(center, direction, LEFT, width)
        right = side_point(center, direction, RIGHT, width)
        offsets[node] = SideOffsets(left=left.tolist(), right=right.tolist())
        ring = [left, left + direction * half, right + direction * half, right]
        return offsets, ring

    for i, (node, position) in enumerate(ordered):
        next_node, next_position = ordered[(i + 1) % len(ordered)]
        direction = tangent(position, center)
        next_direction = tangent(next_position, center)

        left = side_point(center, direction, LEFT, width)
        next_right = side_point(center, next_direction, RIGHT, width)
        left_line = offset_line(left, direction, half)
        right_line = offset_line(next_right, next_direction, half)

        hit = intersect(left_line, right_line, strict=False, tolerance=tolerance)
        if hit is None:
            continue
        point, t, u = hit

        current = offsets.setdefault(node, SideOffsets())
        following = offsets.setdefault(next_node, SideOffsets())
        if t < 0 and u < 0:
            current.left = point.tolist()
            following.right = point.tolist()
            ring.append(point)
        else:
            # gap wider than pi: bevel between the two offset points
            current.left = left.tolist()
            following.right = next_right.tolist()
            ring.extend([
                left,
                point_at(left_line, min(t, 1.0)),
                point_at(right_line, min(u, 1.0)),
                next_right,
            ])

    return offsets, ring


def fan_mesh(center, ring):
    """Triangle fan from center over the closed ring."""
    if not ring:
        return Mesh()

    vertices = list(as_point(center))
    for point in ring:
        vertices.extend(float(c) for c in point)

    count = len(ring)
    indices = []
    for i in range(count):
        if i == count - 1:
            indices.extend([0, i + 1, 1])
        else:
            indices.extend([0, i + 1, i + 2])

    return Mesh(vertices=[float(v) for v in vertices], indices=indices)


def quad_mesh(own, other):
    """
    Road surface between two junctions.

    own and other are the SideOffsets each endpoint keeps for the other.
    Left and right swap meaning between the two ends, so this vertex order
    walks the quad boundary without crossing itself.
    """
    vertices = []
    for point in (own.left, own.right, other.left, other.right):
        vertices.extend(float(c) for c in point)
    return Mesh(vertices=vertices, indices=list(QUAD_INDICES))
