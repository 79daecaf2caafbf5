"""
Geometry Module
===============
Petal segments, ring ordering and downward hit testing.

- segment_ring: Segment, SegmentRing, ray/triangle intersection
- petal_mesh: procedural annular-sector petals
"""

from .segment_ring import (
    Segment,
    SegmentRing,
    RayHit,
    intersect_triangles,
    parse_segment_suffix
)

from .petal_mesh import (
    create_petal_geometry,
    build_petal_segments,
    build_petal_ring
)

__all__ = [
    'Segment',
    'SegmentRing',
    'RayHit',
    'intersect_triangles',
    'parse_segment_suffix',
    'create_petal_geometry',
    'build_petal_segments',
    'build_petal_ring',
]
