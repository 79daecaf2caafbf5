"""
Test Suite: Trail Field
=======================
Unit tests for the comet-trail intensity, colour and scale response.

Tests:
- Ring distance wraparound
- Target intensity ramp
- Smoothing convergence and decay
- Colour blend and scale bounds
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from petalring.animation import (
    TrailField,
    TrailConfig,
    compute_trail_frame,
    ring_distances,
    target_intensities,
    blend_colors,
    hex_to_rgb
)


class TestRingDistance:
    """Tests for shortest-arc distance on the closed ring"""

    def test_distance_to_self_is_zero(self):
        assert ring_distances(4, 8)[4] == 0

    def test_wraps_across_seam(self):
        """N=32, a=0: index 31 is one step away, not 31"""
        distances = ring_distances(0, 32)
        assert distances[31] == 1
        assert distances[30] == 2
        assert distances[16] == 16

    def test_symmetric_in_both_directions(self):
        n = 11
        for a in range(n):
            distances = ring_distances(a, n)
            for k in range(n):
                assert distances[(a + k) % n] == distances[(a - k) % n]

    def test_no_active_means_infinite(self):
        distances = ring_distances(None, 5)
        assert np.all(np.isinf(distances))

    def test_empty_ring(self):
        assert ring_distances(None, 0).shape == (0,)


class TestTargetIntensity:
    """Tests for the linear ramp of target intensity"""

    def test_full_at_zero_and_zero_at_trail_length(self):
        targets, inside = target_intensities(np.array([0.0, 5.0, 6.0, np.inf]), 5)
        np.testing.assert_array_equal(targets, [1.0, 0.0, 0.0, 0.0])
        np.testing.assert_array_equal(inside, [True, False, False, False])

    def test_monotonically_non_increasing(self):
        distances = np.arange(0, 10, dtype=float)
        targets, _ = target_intensities(distances, 5)
        assert np.all(np.diff(targets) <= 0)

    def test_ramp_values(self):
        targets, _ = target_intensities(np.array([1.0, 2.0, 3.0, 4.0]), 5)
        np.testing.assert_array_almost_equal(targets, [0.8, 0.6, 0.4, 0.2])


class TestTrailFieldUpdate:
    """Tests for per-tick smoothing"""

    def test_single_tick_from_rest(self):
        """N=8, active 3: petals 3, 0 and 5 rise by 0.1, 0.04 and 0.06"""
        field = TrailField(8)
        frame = field.update(3)

        assert frame.intensity[3] == pytest.approx(0.1)
        assert frame.intensity[0] == pytest.approx(0.04)
        assert frame.intensity[5] == pytest.approx(0.06)
        # Opposite side: min(4, 4) = 4 -> target 0.2
        assert frame.intensity[7] == pytest.approx(0.02)

    def test_state_is_carried_between_ticks(self):
        field = TrailField(8)
        field.update(3)
        frame = field.update(3)

        # 0.1 + 0.1 * (1 - 0.1)
        assert frame.intensity[3] == pytest.approx(0.19)
        np.testing.assert_array_equal(field.intensity, frame.intensity)

    def test_converges_to_targets(self):
        field = TrailField(16)
        for _ in range(300):
            frame = field.update(2)

        np.testing.assert_allclose(frame.intensity, frame.targets, atol=1e-9)
        assert frame.intensity[2] == pytest.approx(1.0)
        assert frame.intensity[10] == pytest.approx(0.0)

    def test_stays_within_unit_interval(self):
        field = TrailField(12)
        for tick in range(400):
            active = None if (tick // 50) % 2 else (tick * 7) % 12
            frame = field.update(active)
            assert np.all(frame.intensity >= 0.0)
            assert np.all(frame.intensity <= 1.0)

    def test_decays_after_active_is_lost(self):
        field = TrailField(8)
        for _ in range(60):
            field.update(0)

        previous = field.intensity
        for _ in range(100):
            frame = field.update(None)
            assert np.all(frame.intensity <= previous)
            assert np.all(frame.intensity >= 0.0)
            previous = frame.intensity

        assert previous.max() < 1e-4

    def test_pure_transform_leaves_inputs_alone(self):
        config = TrailConfig()
        intensity = np.zeros(6)
        scales = np.ones(6)
        compute_trail_frame(1, intensity, scales, config)

        np.testing.assert_array_equal(intensity, np.zeros(6))
        np.testing.assert_array_equal(scales, np.ones(6))

    def test_empty_ring_is_a_no_op(self):
        frame = TrailField(0).update(None)
        assert frame.intensity.shape == (0,)
        assert frame.colors.shape == (0, 3)


class TestColorResponse:
    """Tests for the linear colour blend"""

    def test_hex_parsing(self):
        np.testing.assert_array_almost_equal(
            hex_to_rgb("#6D00A3"), [0x6D / 255, 0.0, 0xA3 / 255]
        )
        np.testing.assert_array_equal(hex_to_rgb("#fff"), [1.0, 1.0, 1.0])

    def test_invalid_hex_raises(self):
        with pytest.raises(ValueError):
            hex_to_rgb("#12345")
        with pytest.raises(ValueError):
            hex_to_rgb("#zzzzzz")

    def test_endpoints_are_exact(self):
        config = TrailConfig()
        colors = blend_colors(config.base_color, config.active_color, np.array([0.0, 1.0]))

        np.testing.assert_array_equal(colors[0], config.base_color)
        np.testing.assert_array_equal(colors[1], config.active_color)

    def test_midpoint_is_linear(self):
        config = TrailConfig()
        colors = blend_colors(config.base_color, config.active_color, np.array([0.25]))
        expected = config.base_color + 0.25 * (config.active_color - config.base_color)
        np.testing.assert_array_almost_equal(colors[0], expected)

    def test_inactive_ring_stays_base_color(self):
        field = TrailField(4)
        frame = field.update(None)
        for color in frame.colors:
            np.testing.assert_array_equal(color, field.config.base_color)


class TestScaleResponse:
    """Tests for the sinusoidal, separately smoothed scale"""

    def test_scale_bounds_while_active(self):
        config = TrailConfig()
        field = TrailField(10, config)
        for _ in range(500):
            frame = field.update(4)
            assert np.all(frame.scales >= 1.0)
            assert np.all(frame.scales <= 1.0 + config.amplitude + 1e-12)

    def test_steady_state_scales(self):
        config = TrailConfig()
        field = TrailField(10, config)
        for _ in range(600):
            frame = field.update(4)

        assert frame.scales[4] == pytest.approx(1.0 + config.amplitude)
        assert frame.scales[5] == pytest.approx(1.0 + np.sin(0.8 * np.pi / 2) * config.amplitude)
        # Distance 5 and beyond is outside the trail
        assert frame.scales[9] == pytest.approx(1.0)

    def test_scale_smooths_at_its_own_rate(self):
        config = TrailConfig()
        frame = TrailField(8, config).update(3)

        assert frame.scales[3] == pytest.approx(1.0 + 0.075 * config.amplitude)
        # Colour moved 10% of the way while scale moved 7.5%
        assert frame.intensity[3] == pytest.approx(0.1)

    def test_apply_writes_segment_sink(self):
        from petalring.geometry import build_petal_ring

        ring = build_petal_ring(count=6)
        field = TrailField.for_ring(ring)
        frame = field.update(2)
        field.apply(ring, frame)

        assert ring[2].scale == pytest.approx(frame.scales[2])
        np.testing.assert_array_equal(ring[2].color, frame.colors[2])
        np.testing.assert_array_equal(ring[5].color, frame.colors[5])

    def test_invalid_trail_length(self):
        with pytest.raises(ValueError):
            TrailConfig(trail_length=0)
