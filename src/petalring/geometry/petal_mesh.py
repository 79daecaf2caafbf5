"""
Procedural Petal Geometry
=========================
Builds a flat ring of annular-sector petals in the XZ plane (Y up).

Petal ``i`` spans the angles ``[i, i + 1] * 2*pi / count`` measured the same
way as the probe orbit: ``x = r*cos(a)``, ``z = r*sin(a)``. Each petal's
vertices are stored relative to its own centroid so scaling swells the petal
in place.
"""

import numpy as np
from typing import List, Tuple

from .segment_ring import Segment, SegmentRing


def create_petal_geometry(start_angle: float,
                          end_angle: float,
                          inner_radius: float,
                          outer_radius: float,
                          arc_steps: int = 4) -> Tuple[np.ndarray, np.ndarray]:
    """
    Create one annular sector as a triangle strip.

    Returns (vertices, faces) in world space, vertices shaped (2*(steps+1), 3).
    """
    arc_steps = max(1, int(arc_steps))
    angles = np.linspace(start_angle, end_angle, arc_steps + 1)

    vertices = []
    for a in angles:
        vertices.append((inner_radius * np.cos(a), 0.0, inner_radius * np.sin(a)))
        vertices.append((outer_radius * np.cos(a), 0.0, outer_radius * np.sin(a)))

    faces = []
    for k in range(arc_steps):
        i0 = 2 * k        # inner, this step
        o0 = i0 + 1       # outer, this step
        i1 = i0 + 2
        o1 = i0 + 3
        faces.append((i0, o0, o1))
        faces.append((i0, o1, i1))

    return np.array(vertices, dtype=np.float64), np.array(faces, dtype=np.int64)


def build_petal_segments(count: int = 32,
                         inner_radius: float = 0.6,
                         outer_radius: float = 2.4,
                         height: float = 0.0,
                         gap: float = 0.02,
                         prefix: str = "leaf",
                         arc_steps: int = 4) -> List[Segment]:
    """
    Generate ``count`` petals named ``<prefix>.000`` onward.

    ``gap`` is the angular spacing (radians) left between neighbours.
    """
    if count < 0:
        raise ValueError(f"Petal count must be non-negative, got {count}")
    if outer_radius <= inner_radius:
        raise ValueError("outer_radius must be greater than inner_radius")

    segments = []
    if count == 0:
        return segments

    sector = 2 * np.pi / count
    half_gap = min(gap, sector * 0.5) / 2

    for i in range(count):
        start = i * sector + half_gap
        end = (i + 1) * sector - half_gap
        vertices, faces = create_petal_geometry(start, end, inner_radius, outer_radius, arc_steps)
        vertices[:, 1] = height

        centroid = vertices.mean(axis=0)
        segments.append(Segment(
            name=f"{prefix}.{i:03d}",
            vertices=vertices - centroid,
            faces=faces,
            origin=centroid,
        ))

    return segments


def build_petal_ring(count: int = 32,
                     inner_radius: float = 0.6,
                     outer_radius: float = 2.4,
                     height: float = 0.0,
                     gap: float = 0.02,
                     prefix: str = "leaf") -> SegmentRing:
    """Generate petals and order them into a SegmentRing"""
    segments = build_petal_segments(count, inner_radius, outer_radius, height, gap, prefix)
    return SegmentRing.from_segments(segments, prefix=prefix)
