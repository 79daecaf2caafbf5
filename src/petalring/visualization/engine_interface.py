"""
Petal Ring Visualization Engine Interface
=========================================

Pluggable renderer abstraction.
Swap between engines without touching the animation logic.

Supported engines:
- Panda3D - Interactive 3D view with keyboard tuning
- Headless - No rendering, just steps the simulation and counts frames

Usage:
    from petalring.visualization.engine_interface import create_renderer

    renderer = create_renderer('headless')  # or 'panda3d'
    renderer.set_simulation(sim)
    renderer.run()
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
import numpy as np
from dataclasses import dataclass


@dataclass
class RenderState:
    """Common state representation for all renderers."""

    # Probe
    probe_position: np.ndarray
    probe_spin: float = 0.0

    # Petals, in ring order
    segment_colors: Optional[np.ndarray] = None   # (N, 3)
    segment_scales: Optional[np.ndarray] = None   # (N,)
    active_index: Optional[int] = None

    # Camera
    camera_position: Optional[np.ndarray] = None
    camera_fov: float = 50.0

    # HUD
    hud_text: Dict[str, str] = None

    @classmethod
    def from_telemetry(cls, telemetry: Dict, camera: Optional[Dict] = None) -> "RenderState":
        camera = camera or {}
        probe = telemetry['probe']
        return cls(
            probe_position=np.asarray(probe['position'], dtype=np.float64),
            probe_spin=probe['spin'],
            segment_colors=telemetry['colors'],
            segment_scales=telemetry['scales'],
            active_index=telemetry['active_index'],
            camera_position=np.asarray(camera.get('position', (0.0, 7.5, 0.0)), dtype=np.float64),
            camera_fov=camera.get('fov', 50.0),
            hud_text={
                'time': f"T={telemetry['time']:.1f}s",
                'active': f"Active: {telemetry['active_name'] or '--'}",
                'orbit': f"R={probe['radius']:.1f} | Speed={probe['speed']:.2f}",
            }
        )


class RendererInterface(ABC):
    """Abstract base for all petal ring renderers."""

    @abstractmethod
    def initialize(self):
        """Initialize the rendering engine."""
        pass

    @abstractmethod
    def set_simulation(self, sim):
        """Connect to a PetalRingSimulation."""
        pass

    @abstractmethod
    def update_state(self, state: RenderState):
        """Push new state to renderer."""
        pass

    @abstractmethod
    def render_frame(self, dt: float):
        """Render one frame."""
        pass

    @abstractmethod
    def run(self):
        """Run the render loop (blocking)."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if renderer is still active."""
        pass

    @abstractmethod
    def shutdown(self):
        """Clean up resources."""
        pass


class HeadlessRenderer(RendererInterface):
    """No-display renderer: drives the simulation and keeps the last state."""

    def __init__(self, duration: Optional[float] = None):
        self._running = False
        self._frame_count = 0
        self.duration = duration
        self.sim = None
        self.last_state: Optional[RenderState] = None

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def initialize(self):
        self._running = True
        print("[Headless] Renderer initialized (no display)")

    def set_simulation(self, sim):
        self.sim = sim

    def update_state(self, state: RenderState):
        self.last_state = state

    def render_frame(self, dt: float):
        if self.sim is not None:
            telemetry = self.sim.step(dt)
            self.update_state(RenderState.from_telemetry(telemetry, self.sim.config.get('camera')))
        self._frame_count += 1

    def run(self):
        self._running = True
        if self.sim is None:
            print("[Headless] No simulation attached")
            return

        duration = self.duration
        if duration is None:
            duration = self.sim.config['simulation']['duration']
        dt = self.sim.dt

        print(f"[Headless] Running {duration:.1f}s (no visual output)")
        while self._running and self.sim.time < duration:
            self.render_frame(dt)
        self.shutdown()

    def is_running(self) -> bool:
        return self._running

    def shutdown(self):
        self._running = False
        print(f"[Headless] Shutdown after {self._frame_count} frames")


class Panda3DRenderer(RendererInterface):
    """Interactive Panda3D renderer."""

    def __init__(self):
        self._app = None
        self._running = False
        self.sim = None

    def initialize(self):
        from .renderer import PANDA3D_AVAILABLE
        if not PANDA3D_AVAILABLE:
            raise RuntimeError("Panda3D not installed. Install with: pip install panda3d")
        self._running = True
        print("[Panda3D] Renderer initialized")

    def set_simulation(self, sim):
        self.sim = sim

    def update_state(self, state: RenderState):
        pass  # The visualizer reads the segment sink directly

    def render_frame(self, dt: float):
        if self._app is not None:
            self._app.taskMgr.step()

    def run(self):
        from .renderer import PetalRingVisualizer
        self._app = PetalRingVisualizer(self.sim)
        self._app.run()

    def is_running(self) -> bool:
        return self._running

    def shutdown(self):
        self._running = False
        if self._app is not None:
            self._app.userExit()


# Registry of available engines
RENDERERS = {
    'panda3d': Panda3DRenderer,
    'panda': Panda3DRenderer,  # Alias
    'headless': HeadlessRenderer,
    'none': HeadlessRenderer,  # Alias
}


def create_renderer(engine: str = 'panda3d') -> RendererInterface:
    """
    Create a renderer instance.

    Args:
        engine: One of 'panda3d', 'headless'

    Returns:
        Initialized renderer
    """
    engine = engine.lower()

    if engine not in RENDERERS:
        available = ', '.join(RENDERERS.keys())
        raise ValueError(f"Unknown engine '{engine}'. Available: {available}")

    renderer = RENDERERS[engine]()
    renderer.initialize()

    return renderer


def list_available_engines() -> list:
    """List available rendering engines."""
    return list(set(RENDERERS.values()))


def get_recommended_engine() -> str:
    """Get the recommended engine for this system."""
    try:
        from panda3d.core import PandaSystem
        return 'panda3d'
    except ImportError:
        pass

    return 'headless'
