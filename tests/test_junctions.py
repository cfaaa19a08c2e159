"""Tests for junction offsets and mesh construction."""

import math

import numpy as np
import pytest

from roadsketch.layout.junctions import (
    LEFT, RIGHT, build_junction, fan_mesh, outward_angle, quad_mesh, side_point,
)
from roadsketch.models import SideOffsets


def rounded(points):
    return {tuple(round(float(c), 6) for c in p) for p in points}


class TestOutwardAngle:
    """Tests for the angular ordering of incident roads."""

    @pytest.mark.parametrize("target, expected", [
        ((1, 0), 0.0),
        ((-1, 0), math.pi),
        ((0, -1), math.pi / 2),
        ((0, 1), 3 * math.pi / 2),
        ((1, 1), 7 * math.pi / 4),
        ((-1, -1), 3 * math.pi / 4),
    ])
    def test_quadrants(self, target, expected):
        assert outward_angle((0, 0), target) == pytest.approx(expected)

    def test_relative_to_origin(self):
        assert outward_angle((5, 5), (4, 5)) == pytest.approx(math.pi)


class TestSidePoint:
    """Tests for perpendicular offsets."""

    def test_left_and_right(self):
        direction = np.array([1.0, 0.0, 0.0])

        assert np.allclose(side_point((0, 0), direction, LEFT, 16), [0, 8, 0])
        assert np.allclose(side_point((0, 0), direction, RIGHT, 16), [0, -8, 0])

    def test_unknown_side(self):
        with pytest.raises(ValueError):
            side_point((0, 0), np.array([1.0, 0.0, 0.0]), "up", 16)


class TestBuildJunction:
    """Tests for junction polygons."""

    def test_isolated_node(self):
        offsets, ring = build_junction((0, 0), [], width=16)

        assert offsets == {}
        assert ring == []

    def test_stub_is_rectangle(self):
        """Test that a single road gives a w by w/2 rectangle past the node."""
        offsets, ring = build_junction((0, 0), [(1, (10, 0))], width=16)

        assert offsets[1].left == [0, -8, 0]
        assert offsets[1].right == [0, 8, 0]
        assert [p.tolist() for p in ring] == [[0, -8, 0], [-8, -8, 0], [-8, 8, 0], [0, 8, 0]]

        # width across the road, perpendicular to its direction
        left, right = np.array(offsets[1].left), np.array(offsets[1].right)
        assert np.linalg.norm(right - left) == pytest.approx(16)
        assert np.dot(right - left, [1, 0, 0]) == pytest.approx(0)

    def test_four_way_miters(self):
        """Test a perpendicular crossing has its corners at the miter points."""
        neighbours = [(1, (10, 0)), (2, (0, 10)), (3, (-10, 0)), (4, (0, -10))]
        offsets, ring = build_junction((0, 0), neighbours, width=16)

        assert rounded(ring) == {(8, -8, 0), (-8, -8, 0), (-8, 8, 0), (8, 8, 0)}
        assert all(o.complete for o in offsets.values())
        assert offsets[1].left == [8, -8, 0]
        assert offsets[4].right == [8, -8, 0]

    def test_straight_through_node(self):
        """Test collinear opposing roads keep plain side offsets."""
        offsets, _ = build_junction((0, 0), [(1, (-10, 0)), (2, (10, 0))], width=16)

        assert offsets[2].left == [0, -8, 0]
        assert offsets[2].right == [0, 8, 0]
        assert offsets[1].left == [0, 8, 0]
        assert offsets[1].right == [0, -8, 0]

    def test_corner_has_inner_miter_and_outer_bevel(self):
        """Test an L-shaped corner."""
        offsets, ring = build_junction((0, 0), [(1, (10, 0)), (2, (0, 10))], width=16)

        # inner corner shared by both roads
        assert offsets[1].right == [8, 8, 0]
        assert offsets[2].left == [8, 8, 0]
        # outer corner keeps each road's own side point
        assert offsets[1].left == [0, -8, 0]
        assert offsets[2].right == [-8, 0, 0]
        assert len(ring) == 5

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            build_junction((0, 0), [(1, (10, 0))], width=0)


class TestMeshes:
    """Tests for mesh assembly."""

    def test_fan_indices(self):
        """Test the fan closes back onto the first ring vertex."""
        ring = [np.array([1.0, 0, 0]), np.array([0, 1.0, 0]), np.array([-1.0, 0, 0])]
        mesh = fan_mesh((0, 0), ring)

        assert mesh.indices == [0, 1, 2, 0, 2, 3, 0, 3, 1]
        assert mesh.vertex_count == 4
        assert mesh.element_count == 9
        assert mesh.vertices[:3] == [0, 0, 0]

    def test_empty_fan(self):
        assert fan_mesh((0, 0), []).element_count == 0

    def test_quad_order(self):
        """Test the quad uses left, right, other left, other right."""
        own = SideOffsets(left=[0, 8, 0], right=[0, -8, 0])
        other = SideOffsets(left=[10, -8, 0], right=[10, 8, 0])
        mesh = quad_mesh(own, other)

        assert mesh.points() == [[0, 8, 0], [0, -8, 0], [10, -8, 0], [10, 8, 0]]
        assert mesh.indices == [0, 1, 2, 2, 3, 0]
