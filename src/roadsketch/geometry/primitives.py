"""
Vector helpers and segment intersection for the planar road graph.

Points are float64 numpy arrays of shape (3,) with z = 0. Every function
returns new arrays; nothing is cached between calls.
"""

import numpy as np

from roadsketch.tracer import get_tracer


# Distance below which two points are the same point
TOLERANCE = 0.1

# Relative threshold on the cross product for treating segments as parallel
PARALLEL_EPSILON = 1e-12


def as_point(p):
    """Lift an [x, y] or [x, y, z] sequence to a float xyz array."""
    arr = np.asarray(p, dtype=np.float64)
    if arr.shape == (2,):
        return np.array([arr[0], arr[1], 0.0])
    if arr.shape != (3,):
        raise ValueError(f"Expected a 2D or 3D point, got shape {arr.shape}")
    return arr.copy()


def distance(a, b):
    return float(np.linalg.norm(np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)))


def tangent(a, b):
    """Unit vector from a towards b."""
    v = as_point(b) - as_point(a)
    return v / np.linalg.norm(v)


def point_at(line, t):
    """Point at parameter t along line (start + (end - start) * t)."""
    start, end = as_point(line[0]), as_point(line[1])
    return start + (end - start) * t


def format_point(p):
    """Fixed-precision text for diagnostics."""
    p = as_point(p)
    return f"({p[0]:.4f}, {p[1]:.4f}, {p[2]:.4f})"


def _cross_z(a, b):
    return a[0] * b[1] - a[1] * b[0]


def intersect(line_a, line_b, strict=True, tolerance=TOLERANCE):
    """
    Intersect two segments.

    Solves p + t*r = q + u*s. In strict mode t and u must lie in [0, 1],
    widened by tolerance / length at each end; otherwise the lines are
    treated as unbounded. A result within tolerance of an endpoint is
    replaced by that endpoint (checked in the order p, p_end, q, q_end).

    Args:
        line_a: (p, p_end)
        line_b: (q, q_end)
        strict: restrict t and u to the (widened) segment ranges
        tolerance: distance treated as zero

    Returns:
        (point, t, u), or None for degenerate, parallel or missed segments
    """
    p, p_end = as_point(line_a[0]), as_point(line_a[1])
    q, q_end = as_point(line_b[0]), as_point(line_b[1])
    r = p_end - p
    s = q_end - q

    r_len = float(np.linalg.norm(r))
    if r_len < tolerance:
        return None

    s_len = float(np.linalg.norm(s))
    if s_len < tolerance:
        return None

    denominator = _cross_z(r, s)
    if abs(denominator) <= PARALLEL_EPSILON * r_len * s_len:
        for point, other, t, u in (
            (p, q, 0.0, 0.0),
            (p, q_end, 0.0, 1.0),
            (p_end, q, 1.0, 0.0),
            (p_end, q_end, 1.0, 1.0),
        ):
            if distance(point, other) < tolerance:
                return point, t, u
        if not _collinear_overlap(p, r, r_len, q, q_end, tolerance):
            return None
        get_tracer().event(
            "parallel and overlapping, no unique intersection",
            level="WARN",
            line_a=f"{format_point(p)} - {format_point(p_end)}",
            line_b=f"{format_point(q)} - {format_point(q_end)}",
        )
        return None

    qp = q - p
    t = _cross_z(qp, s) / denominator
    u = _cross_z(qp, r) / denominator

    t_tol = tolerance / r_len
    u_tol = tolerance / s_len
    if strict and (t < -t_tol or t > 1 + t_tol or u < -u_tol or u > 1 + u_tol):
        return None

    x = p + r * t
    if distance(x, p) < tolerance:
        return p, 0.0, u
    if distance(x, p_end) < tolerance:
        return p_end, 1.0, u
    if distance(x, q) < tolerance:
        return q, t, 0.0
    if distance(x, q_end) < tolerance:
        return q_end, t, 1.0

    return x, t, u


def _collinear_overlap(p, r, r_len, q, q_end, tolerance):
    """True if q-q_end lies on the line of p-r and shares a stretch with it."""
    if abs(_cross_z(q - p, r)) / r_len >= tolerance:
        return False
    along = sorted((float(np.dot(q - p, r)) / r_len, float(np.dot(q_end - p, r)) / r_len))
    return along[1] > 0.0 and along[0] < r_len


def closest_point_on_segment(segment, point, tolerance=TOLERANCE):
    """
    Closest point to point on the segment.

    The projection is clamped to the segment; a segment shorter than
    tolerance collapses to its start.
    """
    start, end = as_point(segment[0]), as_point(segment[1])
    point = as_point(point)

    direction = end - start
    length = float(np.linalg.norm(direction))
    if length < tolerance:
        return start

    unit = direction / length
    along = float(np.dot(point - start, unit))
    along = min(max(along, 0.0), length)
    return start + unit * along
