"""
Orbit Driver
============
Moves the probe around its circular orbit and finds the petal beneath it.

Each tick:

    angle    -= speed * dt
    position  = base + radius * (cos(angle), 0, sin(angle))
    active    = first ring segment hit by a ray cast straight down

The angle only ever decreases (clockwise seen from above) and is never
wrapped; only its sine and cosine are used. ``radius`` and ``speed`` live on a
shared OrbitParameters object and are re-read every tick so a control surface
can change them between frames.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from ..geometry import SegmentRing


DOWN = np.array([0.0, -1.0, 0.0])

RADIUS_BOUNDS = (1.0, 10.0)
RADIUS_STEP = 0.1
SPEED_BOUNDS = (0.1, 5.0)


@dataclass
class OrbitParameters:
    """
    Runtime-tunable orbit settings.

    Plain attribute writes are taken as-is by the driver. The ``set_*``
    helpers are for control surfaces and keep values inside the documented
    bounds.
    """
    radius: float = 1.6                          # Orbit radius
    speed: float = 1.0                           # rad/s
    radius_bounds: Tuple[float, float] = RADIUS_BOUNDS
    radius_step: float = RADIUS_STEP
    speed_bounds: Tuple[float, float] = SPEED_BOUNDS

    def set_radius(self, value: float) -> float:
        lo, hi = self.radius_bounds
        value = float(np.clip(value, lo, hi))
        if self.radius_step > 0:
            value = lo + round((value - lo) / self.radius_step) * self.radius_step
            value = float(np.clip(round(value, 10), lo, hi))
        self.radius = value
        return value

    def set_speed(self, value: float) -> float:
        lo, hi = self.speed_bounds
        self.speed = float(np.clip(value, lo, hi))
        return self.speed


@dataclass
class Probe:
    """The orbiting probe and its renderable transform"""
    base_position: np.ndarray                    # Orbit center plus height offset
    angle: float = 0.0                           # radians, unbounded
    position: np.ndarray = None                  # Last written world position
    spin: float = 0.0                            # Cosmetic rotation about Y (rad)
    size: float = 0.075                          # Sphere radius for rendering

    def __post_init__(self):
        self.base_position = np.asarray(self.base_position, dtype=np.float64)
        if self.position is None:
            self.position = self.base_position.copy()


@dataclass
class OrbitSample:
    """Result of one OrbitDriver tick"""
    position: np.ndarray
    active_index: Optional[int]
    angle: float
    spin: float


class OrbitDriver:
    """
    Owns the probe's motion and hit-tests it against the ring.

    The spin increment is fixed per tick, not per second, and is unrelated
    to the orbit angle.
    """

    def __init__(self,
                 ring: SegmentRing,
                 params: Optional[OrbitParameters] = None,
                 base_position=(0.0, 0.75, 0.0),
                 spin_step: float = 0.01,
                 initial_angle: float = 0.0,
                 probe_size: float = 0.075):
        self.ring = ring
        self.params = params if params is not None else OrbitParameters()
        self.spin_step = spin_step
        self.probe = Probe(
            base_position=np.array(base_position, dtype=np.float64),
            angle=initial_angle,
            size=probe_size,
        )
        self.probe.position = self.orbit_position(initial_angle)

    @property
    def angle(self) -> float:
        return self.probe.angle

    def orbit_position(self, angle: float) -> np.ndarray:
        """World position on the orbit circle for a given angle"""
        base = self.probe.base_position
        radius = self.params.radius
        return np.array([
            base[0] + radius * np.cos(angle),
            base[1],
            base[2] + radius * np.sin(angle),
        ])

    def hit_test(self, position: np.ndarray) -> Optional[int]:
        """Index of the nearest ring segment straight below ``position``"""
        if len(self.ring) == 0:
            return None
        hits = self.ring.raycast(position, DOWN)
        if not hits:
            return None
        return hits[0].index

    def advance(self, dt: float) -> OrbitSample:
        """
        Advance the probe by one tick.

        Writes position and spin to the probe, then returns the new position
        together with the active segment index (or None).
        """
        self.probe.angle -= self.params.speed * dt
        position = self.orbit_position(self.probe.angle)

        self.probe.position = position
        self.probe.spin += self.spin_step

        active_index = self.hit_test(position)

        return OrbitSample(
            position=position.copy(),
            active_index=active_index,
            angle=self.probe.angle,
            spin=self.probe.spin,
        )
