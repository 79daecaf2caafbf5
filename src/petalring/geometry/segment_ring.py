"""
Segment Ring
============
Ordered, closed ring of petal segments and downward hit testing.

Ring order is fixed once at construction by sorting segments on the numeric
suffix of their identifier (``leaf.000`` .. ``leaf.031``). That order is what
"ring distance" means everywhere else, so it never changes afterwards.

Hit testing uses a vectorised Moller-Trumbore ray/triangle test. Each segment's
own scale is applied to its triangles first, so a swollen petal also has a
slightly larger hit area.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence


RAY_EPSILON = 1e-9


def parse_segment_suffix(name: str) -> int:
    """
    Return the numeric suffix of a dotted segment identifier.

    ``leaf.007`` -> 7. Raises ValueError when the suffix is missing or is not
    an integer.
    """
    stem, sep, suffix = name.rpartition(".")
    if not sep or not stem:
        raise ValueError(f"Segment identifier '{name}' has no dotted numeric suffix")
    try:
        return int(suffix)
    except ValueError:
        raise ValueError(
            f"Segment identifier '{name}' has a non-numeric suffix '{suffix}'"
        ) from None


@dataclass
class Segment:
    """
    A single petal in the ring.

    Geometry is stored in local space around ``origin``; ``color`` and
    ``scale`` are write-only sink fields overwritten every tick.
    """
    name: str
    vertices: np.ndarray                 # (V, 3) local-space positions
    faces: np.ndarray                    # (F, 3) vertex indices
    origin: np.ndarray = field(default_factory=lambda: np.zeros(3))
    color: np.ndarray = field(default_factory=lambda: np.ones(3))
    scale: float = 1.0

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=np.float64)
        self.faces = np.asarray(self.faces, dtype=np.int64)
        self.origin = np.asarray(self.origin, dtype=np.float64)
        self.color = np.asarray(self.color, dtype=np.float64)

        if self.vertices.ndim != 2 or self.vertices.shape[1] != 3:
            raise ValueError(f"{self.name}: vertices must have shape (V, 3)")
        if self.faces.size and (self.faces.ndim != 2 or self.faces.shape[1] != 3):
            raise ValueError(f"{self.name}: faces must have shape (F, 3)")
        if self.faces.size and (self.faces.min() < 0 or self.faces.max() >= len(self.vertices)):
            raise ValueError(f"{self.name}: face index out of range")
        if self.origin.shape != (3,):
            raise ValueError(f"{self.name}: origin must be a 3-vector")

    @property
    def suffix(self) -> int:
        return parse_segment_suffix(self.name)

    def world_triangles(self) -> np.ndarray:
        """Triangles in world space, shape (F, 3, 3), with scale applied."""
        if not self.faces.size:
            return np.zeros((0, 3, 3))
        return self.origin + self.scale * self.vertices[self.faces]

    def intersect_ray(self, origin: np.ndarray, direction: np.ndarray) -> Optional[float]:
        """Distance along the ray to the nearest triangle, or None."""
        distances = intersect_triangles(origin, direction, self.world_triangles())
        if distances.size == 0:
            return None
        nearest = float(distances.min())
        return nearest if np.isfinite(nearest) else None


@dataclass
class RayHit:
    """One segment intersected by a ray"""
    index: int                 # Ring index of the segment
    distance: float            # Distance along the ray
    point: np.ndarray          # World-space intersection point


def intersect_triangles(origin: np.ndarray,
                        direction: np.ndarray,
                        triangles: np.ndarray) -> np.ndarray:
    """
    Moller-Trumbore ray/triangle intersection for many triangles at once.

    Triangles are tested double-sided. Returns the hit distance per triangle,
    ``inf`` where the ray misses or the triangle lies behind the origin.
    """
    triangles = np.asarray(triangles, dtype=np.float64).reshape(-1, 3, 3)
    if len(triangles) == 0:
        return np.zeros(0)

    origin = np.asarray(origin, dtype=np.float64)
    direction = np.asarray(direction, dtype=np.float64)

    v0 = triangles[:, 0]
    edge1 = triangles[:, 1] - v0
    edge2 = triangles[:, 2] - v0

    pvec = np.cross(direction, edge2)
    det = np.einsum("ij,ij->i", edge1, pvec)
    parallel = np.abs(det) < RAY_EPSILON
    inv_det = 1.0 / np.where(parallel, 1.0, det)

    tvec = origin - v0
    u = np.einsum("ij,ij->i", tvec, pvec) * inv_det
    qvec = np.cross(tvec, edge1)
    v = (qvec @ direction) * inv_det
    t = np.einsum("ij,ij->i", edge2, qvec) * inv_det

    hit = (~parallel) & (u >= 0.0) & (v >= 0.0) & (u + v <= 1.0) & (t > RAY_EPSILON)
    return np.where(hit, t, np.inf)


class SegmentRing:
    """
    Fixed-length ring of segments, index N-1 adjacent to index 0.

    Only segments that belong to the ring take part in ray tests; anything
    else in a scene is simply not a member.
    """

    def __init__(self, segments: Sequence[Segment] = ()):
        self._segments = tuple(segments)

    @classmethod
    def from_segments(cls, candidates: Iterable[Segment], prefix: str = "leaf") -> "SegmentRing":
        """
        Build a ring from arbitrary scene segments.

        Keeps only identifiers starting with ``prefix`` and sorts them
        ascending by numeric suffix to establish ring order.
        """
        members = [seg for seg in candidates if seg.name.startswith(prefix)]
        members.sort(key=lambda seg: seg.suffix)
        return cls(members)

    def __len__(self) -> int:
        return len(self._segments)

    def __getitem__(self, index: int) -> Segment:
        return self._segments[index]

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    @property
    def names(self) -> List[str]:
        return [seg.name for seg in self._segments]

    def index_of(self, segment: Segment) -> Optional[int]:
        """Ring index of a segment handle, or None if it is not a member"""
        for i, member in enumerate(self._segments):
            if member is segment:
                return i
        return None

    def raycast(self, origin: np.ndarray, direction: np.ndarray) -> List[RayHit]:
        """
        Intersect a ray with every ring segment.

        Returns hits sorted nearest first; empty when nothing is hit.
        """
        origin = np.asarray(origin, dtype=np.float64)
        direction = np.asarray(direction, dtype=np.float64)
        norm = np.linalg.norm(direction)
        if norm < RAY_EPSILON:
            return []
        direction = direction / norm

        hits = []
        for i, segment in enumerate(self._segments):
            distance = segment.intersect_ray(origin, direction)
            if distance is not None:
                hits.append(RayHit(index=i, distance=distance,
                                   point=origin + direction * distance))

        hits.sort(key=lambda hit: hit.distance)
        return hits
