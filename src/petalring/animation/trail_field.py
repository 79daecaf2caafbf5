"""
Trail Field
===========
Turns the active petal index into a per-petal colour and scale.

For every petal ``i`` in a ring of ``N``:

    distance  = min(|a - i|, N - |a - i|)           (inf when nothing is active)
    target    = 1 - distance / L   if distance < L  else 0
    intensity = lerp(previous, target, 0.1)
    color     = lerp(BASE_COLOR, ACTIVE_COLOR, intensity)
    scale     = lerp(previous_scale, 1 + sin(target * pi/2) * AMP, 0.075)

Colour follows the smoothed intensity while scale eases toward a target built
from the raw ``target``, at its own slower rate. The two never quite agree,
which keeps the size pop visually distinct from the colour fade.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Union

from ..geometry import SegmentRing


ColorLike = Union[str, tuple, list, np.ndarray]


def hex_to_rgb(value: ColorLike) -> np.ndarray:
    """
    Convert '#rrggbb' (or an RGB triple in [0, 1]) to a float array.
    """
    if isinstance(value, str):
        text = value.lstrip("#")
        if len(text) == 3:
            text = "".join(ch * 2 for ch in text)
        if len(text) != 6:
            raise ValueError(f"Invalid hex colour '{value}'")
        try:
            channels = [int(text[i:i + 2], 16) for i in (0, 2, 4)]
        except ValueError:
            raise ValueError(f"Invalid hex colour '{value}'") from None
        return np.array(channels, dtype=np.float64) / 255.0

    rgb = np.asarray(value, dtype=np.float64)
    if rgb.shape != (3,):
        raise ValueError(f"Colour must be an RGB triple, got shape {rgb.shape}")
    return rgb


def lerp(a, b, t):
    """(1 - t) * a + t * b, exact at both ends"""
    return (1.0 - t) * a + t * b


def ring_distances(active_index: Optional[int], count: int) -> np.ndarray:
    """
    Shortest hop count from the active index to every index on a closed ring.

    All ``inf`` when nothing is active.
    """
    if active_index is None:
        return np.full(count, np.inf)
    indices = np.arange(count)
    diff = np.abs(active_index - indices)
    return np.minimum(diff, count - diff).astype(np.float64)


def target_intensities(distances: np.ndarray, trail_length: float):
    """
    Linear ramp from 1 at distance 0 to 0 at ``trail_length``.

    Returns (targets, inside_trail).
    """
    inside = distances < trail_length
    with np.errstate(invalid="ignore"):
        ramp = 1.0 - distances / trail_length
    targets = np.where(inside, ramp, 0.0)
    return targets, inside


def scale_targets(targets: np.ndarray, inside: np.ndarray, amplitude: float) -> np.ndarray:
    """Sinusoidal size bulge: 1 outside the trail, up to 1 + amplitude at its head"""
    return np.where(inside, 1.0 + np.sin(targets * np.pi / 2) * amplitude, 1.0)


def blend_colors(base: np.ndarray, active: np.ndarray, intensity: np.ndarray) -> np.ndarray:
    """Per-channel linear blend, shape (N, 3)"""
    t = np.asarray(intensity, dtype=np.float64)[:, None]
    return lerp(base[None, :], active[None, :], t)


@dataclass
class TrailConfig:
    """Tuning constants for the trail"""
    trail_length: float = 5.0            # Ring distance where the target reaches 0
    intensity_smoothing: float = 0.1     # Per-tick lerp toward target intensity
    scale_smoothing: float = 0.075       # Per-tick lerp toward target scale
    amplitude: float = 0.065             # Extra scale at full intensity
    base_color: ColorLike = "#fdfcf7"
    active_color: ColorLike = "#6D00A3"

    def __post_init__(self):
        if self.trail_length <= 0:
            raise ValueError(f"trail_length must be positive, got {self.trail_length}")
        self.base_color = hex_to_rgb(self.base_color)
        self.active_color = hex_to_rgb(self.active_color)


@dataclass
class TrailFrame:
    """Output of one TrailField tick"""
    intensity: np.ndarray                # (N,) smoothed intensity in [0, 1]
    colors: np.ndarray                   # (N, 3) RGB
    scales: np.ndarray                   # (N,) smoothed uniform scale
    targets: np.ndarray                  # (N,) unsmoothed target intensity


def compute_trail_frame(active_index: Optional[int],
                        previous_intensity: np.ndarray,
                        previous_scales: np.ndarray,
                        config: TrailConfig) -> TrailFrame:
    """Pure per-tick transform; never mutates its inputs"""
    previous_intensity = np.asarray(previous_intensity, dtype=np.float64)
    previous_scales = np.asarray(previous_scales, dtype=np.float64)
    count = len(previous_intensity)

    distances = ring_distances(active_index, count)
    targets, inside = target_intensities(distances, config.trail_length)

    intensity = lerp(previous_intensity, targets, config.intensity_smoothing)
    colors = blend_colors(config.base_color, config.active_color, intensity)

    scale_goal = scale_targets(targets, inside, config.amplitude)
    scales = lerp(previous_scales, scale_goal, config.scale_smoothing)

    return TrailFrame(intensity=intensity, colors=colors, scales=scales, targets=targets)


class TrailField:
    """
    Carries the intensity and scale vectors between ticks.

    Lengths are fixed to the ring size at construction.
    """

    def __init__(self, count: int, config: Optional[TrailConfig] = None):
        self.config = config if config is not None else TrailConfig()
        self.count = count
        self._intensity = np.zeros(count)
        self._scales = np.ones(count)

    @classmethod
    def for_ring(cls, ring: SegmentRing, config: Optional[TrailConfig] = None) -> "TrailField":
        return cls(len(ring), config)

    @property
    def intensity(self) -> np.ndarray:
        return self._intensity.copy()

    @property
    def scales(self) -> np.ndarray:
        return self._scales.copy()

    def reset(self):
        self._intensity = np.zeros(self.count)
        self._scales = np.ones(self.count)

    def update(self, active_index: Optional[int]) -> TrailFrame:
        """Advance one tick toward the trail centred on ``active_index``"""
        frame = compute_trail_frame(active_index, self._intensity, self._scales, self.config)
        self._intensity = frame.intensity
        self._scales = frame.scales
        return frame

    def apply(self, ring: SegmentRing, frame: TrailFrame):
        """Write colours and scales into the ring's segments"""
        for i, segment in enumerate(ring):
            segment.color = frame.colors[i].copy()
            segment.scale = float(frame.scales[i])
