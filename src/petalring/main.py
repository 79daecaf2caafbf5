"""
Petal Ring - Main Simulation
============================
Entry point for the orbiting-probe petal ring animation.

This simulation demonstrates:
1. A probe orbiting clockwise above a ring of 32 petals
2. Downward hit testing to find the petal under the probe
3. A comet trail of colour and size that fades with ring distance
4. Runtime tuning of orbit radius and speed between frames
"""

import copy
import time
import numpy as np
import yaml
from pathlib import Path
from typing import Callable, Dict, Optional

from .geometry import build_petal_ring
from .animation import (
    OrbitDriver, OrbitParameters,
    TrailField, TrailConfig
)


# Intensity above which a petal counts as part of the visible trail
TRAIL_VISIBILITY = 0.01


def _default_config() -> Dict:
    """Default configuration if no file provided"""
    return {
        'ring': {
            'count': 32,
            'inner_radius': 0.6,
            'outer_radius': 2.4,
            'height': 0.0,
            'gap': 0.02,
            'prefix': 'leaf'
        },
        'probe': {
            'radius': 1.6,
            'speed': 1.0,
            'base_position': [0.0, 0.75, 0.0],
            'spin_step': 0.01,
            'size': 0.075,
            'radius_bounds': [1.0, 10.0],
            'radius_step': 0.1,
            'speed_bounds': [0.1, 5.0]
        },
        'trail': {
            'length': 5,
            'intensity_smoothing': 0.1,
            'scale_smoothing': 0.075,
            'amplitude': 0.065,
            'base_color': '#fdfcf7',
            'active_color': '#6D00A3'
        },
        'simulation': {
            'timestep': 1.0 / 60.0,
            'duration': 10.0
        },
        'camera': {
            'position': [0.0, 7.5, 0.0],
            'fov': 50.0
        }
    }


def merge_config(base: Dict, overrides: Optional[Dict]) -> Dict:
    """
    Merge a (possibly partial) config over the defaults.

    Unknown top-level sections raise ValueError.
    """
    merged = copy.deepcopy(base)
    if not overrides:
        return merged

    for section, values in overrides.items():
        if section not in merged:
            available = ', '.join(merged.keys())
            raise ValueError(f"Unknown config section '{section}'. Available: {available}")
        if not isinstance(values, dict):
            raise ValueError(f"Config section '{section}' must be a mapping")
        merged[section].update(values)

    return merged


def load_config(config_path: Optional[str] = None) -> Dict:
    """Load YAML config over the defaults; missing explicit paths raise"""
    if config_path is None:
        return _default_config()
    with open(config_path, 'r') as f:
        overrides = yaml.safe_load(f)
    return merge_config(_default_config(), overrides)


class PetalRingSimulation:
    """
    Main controller for the petal ring animation.

    Orchestrates, once per tick and in this order:
    - Probe orbit and hit test (OrbitDriver)
    - Trail intensity, colour and scale (TrailField)
    - Writes to the segment sink
    """

    def __init__(self, config_path: Optional[str] = None, config: Optional[Dict] = None):
        # Load configuration
        if config is not None:
            self.config = merge_config(_default_config(), config)
        else:
            self.config = load_config(config_path)

        ring_cfg = self.config['ring']
        self.ring = build_petal_ring(
            count=ring_cfg['count'],
            inner_radius=ring_cfg['inner_radius'],
            outer_radius=ring_cfg['outer_radius'],
            height=ring_cfg['height'],
            gap=ring_cfg['gap'],
            prefix=ring_cfg['prefix']
        )

        probe_cfg = self.config['probe']
        self.orbit_params = OrbitParameters(
            radius=probe_cfg['radius'],
            speed=probe_cfg['speed'],
            radius_bounds=tuple(probe_cfg['radius_bounds']),
            radius_step=probe_cfg['radius_step'],
            speed_bounds=tuple(probe_cfg['speed_bounds'])
        )
        self.orbit_driver = OrbitDriver(
            self.ring,
            self.orbit_params,
            base_position=probe_cfg['base_position'],
            spin_step=probe_cfg['spin_step'],
            probe_size=probe_cfg['size']
        )

        trail_cfg = self.config['trail']
        self.trail_field = TrailField.for_ring(self.ring, TrailConfig(
            trail_length=trail_cfg['length'],
            intensity_smoothing=trail_cfg['intensity_smoothing'],
            scale_smoothing=trail_cfg['scale_smoothing'],
            amplitude=trail_cfg['amplitude'],
            base_color=trail_cfg['base_color'],
            active_color=trail_cfg['active_color']
        ))

        # Simulation state
        self.time = 0.0
        self.frame = 0
        self.dt = self.config['simulation']['timestep']
        self.running = False
        self.active_index: Optional[int] = None

    @property
    def probe(self):
        return self.orbit_driver.probe

    def set_radius(self, value: float) -> float:
        """Tune orbit radius from a control surface (bounded)"""
        return self.orbit_params.set_radius(value)

    def set_speed(self, value: float) -> float:
        """Tune orbit speed from a control surface (bounded)"""
        return self.orbit_params.set_speed(value)

    def step(self, dt: Optional[float] = None) -> Dict:
        """
        Execute one animation tick.

        Returns telemetry data for visualization.
        """
        if dt is None:
            dt = self.dt

        # 1. Probe orbit + hit test
        sample = self.orbit_driver.advance(dt)
        self.active_index = sample.active_index

        # 2. Trail response
        frame = self.trail_field.update(sample.active_index)

        # 3. Write to the segment sink
        self.trail_field.apply(self.ring, frame)

        # 4. Update time
        self.time += dt
        self.frame += 1

        trail = [int(i) for i in np.flatnonzero(frame.intensity > TRAIL_VISIBILITY)]

        return {
            'time': self.time,
            'frame': self.frame,
            'probe': {
                'position': sample.position,
                'angle': sample.angle,
                'spin': sample.spin,
                'radius': self.orbit_params.radius,
                'speed': self.orbit_params.speed
            },
            'active_index': sample.active_index,
            'active_name': self.ring[sample.active_index].name if sample.active_index is not None else None,
            'intensity': frame.intensity,
            'scales': frame.scales,
            'colors': frame.colors,
            'trail': trail
        }

    def run(self, duration: Optional[float] = None, callback: Optional[Callable[[Dict], None]] = None):
        """
        Run the animation for a simulated duration.

        Args:
            duration: Simulation time in seconds (default from config)
            callback: Optional function called each step with telemetry
        """
        if duration is None:
            duration = self.config['simulation']['duration']

        self.running = True
        start_time = time.time()

        print(f"Starting Petal Ring - {len(self.ring)} petals, Duration: {duration}s")
        print("=" * 50)

        while self.time < duration and self.running:
            telemetry = self.step()

            if callback:
                callback(telemetry)

            # Status once per simulated second
            if int(self.time) != int(self.time - self.dt):
                self._print_status(telemetry)

        self.running = False
        real_time = max(time.time() - start_time, 1e-9)
        print("=" * 50)
        print(f"Animation complete. Sim time: {self.time:.2f}s, Frames: {self.frame}")
        print(f"Speed ratio: {self.time/real_time:.1f}x realtime")

    def stop(self):
        self.running = False

    def _print_status(self, telemetry: Dict):
        """Print compact status line"""
        active = telemetry['active_name'] or '--'
        peak = float(telemetry['intensity'].max()) if len(telemetry['intensity']) else 0.0
        print(f"T={telemetry['time']:6.1f}s | "
              f"Angle: {np.degrees(telemetry['probe']['angle']):8.1f}° | "
              f"Active: {active:>8} | "
              f"Trail: {len(telemetry['trail']):2d} | "
              f"Peak: {peak:.2f}")


def demo_sweep():
    """
    Demonstration: one full orbit.

    Prints each petal as the probe passes over it, in visiting order.
    """
    print("\n" + "=" * 60)
    print("DEMO: FULL ORBIT SWEEP")
    print("=" * 60 + "\n")

    sim = PetalRingSimulation()
    orbit_time = 2 * np.pi / sim.orbit_params.speed

    visited = []
    while sim.time < orbit_time:
        telemetry = sim.step()
        name = telemetry['active_name']
        if name is not None and (not visited or visited[-1] != name):
            visited.append(name)

    print(f"Orbit time: {orbit_time:.2f}s over {sim.frame} frames")
    print(f"Petals visited ({len(visited)}): {' -> '.join(visited[:8])} ...")


def demo_stall():
    """
    Demonstration: trail decay after the probe leaves the ring.

    Builds a trail, then widens the orbit past the petals so nothing is hit.
    """
    print("\n" + "=" * 60)
    print("DEMO: TRAIL DECAY")
    print("=" * 60 + "\n")

    sim = PetalRingSimulation()

    print("Phase 1: Building trail...")
    for _ in range(120):
        telemetry = sim.step()
    print(f"  Active: {telemetry['active_name']} | Trail: {len(telemetry['trail'])} petals")

    print("\nPhase 2: Probe leaves the ring...")
    sim.set_radius(sim.orbit_params.radius_bounds[1])
    for _ in range(6):
        for _ in range(30):
            telemetry = sim.step()
        print(f"  T={sim.time:.1f}s - Peak intensity: {telemetry['intensity'].max():.3f}")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1:
        if sys.argv[1] == "sweep":
            demo_sweep()
        elif sys.argv[1] == "stall":
            demo_stall()
        elif sys.argv[1] == "view":
            from .visualization import run_visualization
            run_visualization()
        else:
            print("Unknown demo. Options: 'sweep', 'stall', 'view'")
    else:
        config_path = Path(__file__).parent.parent.parent / "config" / "petal_ring.yaml"

        if config_path.exists():
            sim = PetalRingSimulation(str(config_path))
        else:
            sim = PetalRingSimulation()

        sim.run()
