"""
Animation Module
================
Per-frame logic, evaluated in order once per tick:

- orbit_driver: probe motion and downward hit test
- trail_field: intensity smoothing, colour and scale response
"""

from .orbit_driver import (
    OrbitDriver,
    OrbitParameters,
    OrbitSample,
    Probe,
    RADIUS_BOUNDS,
    SPEED_BOUNDS
)

from .trail_field import (
    TrailField,
    TrailConfig,
    TrailFrame,
    compute_trail_frame,
    ring_distances,
    target_intensities,
    scale_targets,
    blend_colors,
    hex_to_rgb
)

__all__ = [
    # Orbit
    'OrbitDriver',
    'OrbitParameters',
    'OrbitSample',
    'Probe',
    'RADIUS_BOUNDS',
    'SPEED_BOUNDS',
    # Trail
    'TrailField',
    'TrailConfig',
    'TrailFrame',
    'compute_trail_frame',
    'ring_distances',
    'target_intensities',
    'scale_targets',
    'blend_colors',
    'hex_to_rgb',
]
