"""
Test Suite: Segment Ring
========================
Unit tests for ring construction, ordering and ray intersection.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from petalring.geometry import (
    Segment,
    SegmentRing,
    intersect_triangles,
    parse_segment_suffix,
    build_petal_segments,
    build_petal_ring
)


SQUARE_VERTICES = np.array([
    [-1.0, 0.0, -1.0],
    [1.0, 0.0, -1.0],
    [1.0, 0.0, 1.0],
    [-1.0, 0.0, 1.0],
])
SQUARE_FACES = np.array([[0, 1, 2], [0, 2, 3]])

DOWN = np.array([0.0, -1.0, 0.0])


def make_square(name: str, height: float = 0.0) -> Segment:
    return Segment(name=name, vertices=SQUARE_VERTICES, faces=SQUARE_FACES,
                   origin=np.array([0.0, height, 0.0]))


class TestSegmentSuffix:
    """Tests for identifier parsing"""

    def test_parses_dotted_suffix(self):
        assert parse_segment_suffix("leaf.007") == 7
        assert parse_segment_suffix("leaf.031") == 31

    def test_missing_suffix_raises(self):
        with pytest.raises(ValueError, match="no dotted numeric suffix"):
            parse_segment_suffix("leaf")

    def test_non_numeric_suffix_raises(self):
        with pytest.raises(ValueError, match="non-numeric suffix"):
            parse_segment_suffix("leaf.tip")


class TestSegment:
    """Tests for segment geometry validation"""

    def test_rejects_bad_vertex_shape(self):
        with pytest.raises(ValueError):
            Segment(name="leaf.000", vertices=np.zeros((4, 2)), faces=SQUARE_FACES)

    def test_rejects_out_of_range_face(self):
        with pytest.raises(ValueError):
            Segment(name="leaf.000", vertices=SQUARE_VERTICES, faces=np.array([[0, 1, 9]]))

    def test_defaults(self):
        segment = make_square("leaf.000")
        assert segment.scale == 1.0
        np.testing.assert_array_equal(segment.color, [1.0, 1.0, 1.0])

    def test_world_triangles_apply_origin_and_scale(self):
        segment = make_square("leaf.000", height=2.0)
        segment.scale = 2.0
        triangles = segment.world_triangles()

        assert triangles.shape == (2, 3, 3)
        np.testing.assert_array_almost_equal(triangles[0, 0], [-2.0, 2.0, -2.0])


class TestRingConstruction:
    """Tests for prefix filtering and numeric ordering"""

    def test_filters_and_sorts_numerically(self):
        candidates = [
            make_square("leaf.10"),
            make_square("stem.001"),
            make_square("leaf.9"),
            make_square("leaf.000"),
        ]
        ring = SegmentRing.from_segments(candidates, prefix="leaf")

        assert ring.names == ["leaf.000", "leaf.9", "leaf.10"]
        assert len(ring) == 3

    def test_malformed_member_raises(self):
        with pytest.raises(ValueError):
            SegmentRing.from_segments([make_square("leaf.001"), make_square("leaf")])

    def test_membership_is_by_handle(self):
        inside = make_square("leaf.000")
        outside = make_square("leaf.000")
        ring = SegmentRing([inside])

        assert ring.index_of(inside) == 0
        assert ring.index_of(outside) is None

    def test_generated_ring_is_ordered(self):
        ring = build_petal_ring(count=32)
        assert len(ring) == 32
        assert ring[0].name == "leaf.000"
        assert ring[31].name == "leaf.031"

    def test_generated_petals_follow_orbit_angles(self):
        segments = build_petal_segments(count=4, gap=0.0)
        # Petal 1 centres around 135 degrees: x < 0, z > 0
        centroid = segments[1].origin
        assert centroid[0] < 0
        assert centroid[2] > 0

    def test_invalid_radii(self):
        with pytest.raises(ValueError):
            build_petal_segments(count=4, inner_radius=2.0, outer_radius=1.0)

    def test_zero_petals(self):
        assert len(build_petal_ring(count=0)) == 0


class TestRaycast:
    """Tests for ray/triangle intersection"""

    def test_triangle_hit_distance(self):
        triangles = SQUARE_VERTICES[SQUARE_FACES]
        distances = intersect_triangles(np.array([0.2, 3.0, 0.1]), DOWN, triangles)

        assert np.isfinite(distances).any()
        assert distances[np.isfinite(distances)].min() == pytest.approx(3.0)

    def test_parallel_ray_misses(self):
        triangles = SQUARE_VERTICES[SQUARE_FACES]
        distances = intersect_triangles(np.array([-5.0, 0.0, 0.0]), np.array([1.0, 0.0, 0.0]), triangles)
        assert np.all(np.isinf(distances))

    def test_geometry_behind_origin_misses(self):
        triangles = SQUARE_VERTICES[SQUARE_FACES]
        distances = intersect_triangles(np.array([0.0, -1.0, 0.0]), DOWN, triangles)
        assert np.all(np.isinf(distances))

    def test_nearest_segment_wins(self):
        ring = SegmentRing([make_square("leaf.000", 0.0), make_square("leaf.001", 0.5)])
        hits = ring.raycast(np.array([0.1, 2.0, 0.2]), DOWN)

        assert [hit.index for hit in hits] == [1, 0]
        assert hits[0].distance == pytest.approx(1.5)
        np.testing.assert_array_almost_equal(hits[0].point, [0.1, 0.5, 0.2])

    def test_scale_grows_hit_area(self):
        segment = make_square("leaf.000")
        ring = SegmentRing([segment])
        origin = np.array([1.05, 1.0, 0.0])

        assert ring.raycast(origin, DOWN) == []
        segment.scale = 1.1
        assert len(ring.raycast(origin, DOWN)) == 1

    def test_empty_ring(self):
        assert SegmentRing().raycast(np.zeros(3), DOWN) == []

    def test_zero_direction(self):
        ring = SegmentRing([make_square("leaf.000")])
        assert ring.raycast(np.array([0.0, 1.0, 0.0]), np.zeros(3)) == []
