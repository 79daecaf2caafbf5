"""
Panda3D Visualization Renderer
==============================
3D view of the petal ring using Panda3D.

Renders:
- Petals with their per-frame colour and scale
- The orbiting probe with its slow self-rotation
- A ground plane below the ring

The animation works in Y-up coordinates; Panda3D is Z-up, so every point goes
through ``to_panda`` on its way in.
"""

import numpy as np
from typing import List

# Note: Panda3D imports will fail if not installed
# This module is optional for visualization
try:
    from direct.showbase.ShowBase import ShowBase
    from panda3d.core import (
        Vec4, Point3,
        NodePath, GeomNode,
        AmbientLight, DirectionalLight,
        TextNode, CardMaker,
        GeomVertexFormat, GeomVertexData, GeomVertexWriter,
        Geom, GeomTriangles, ClockObject
    )
    from direct.task import Task
    globalClock = ClockObject.getGlobalClock()
    PANDA3D_AVAILABLE = True
except ImportError:
    PANDA3D_AVAILABLE = False


def to_panda(point) -> tuple:
    """Y-up (x, y, z) -> Panda3D Z-up (x, -z, y)"""
    x, y, z = (float(c) for c in point)
    return (x, -z, y)


def create_sphere_geom(radius: float = 1.0, segments: int = 24):
    """Create a sphere geometry procedurally"""
    format = GeomVertexFormat.getV3n3()
    vdata = GeomVertexData("sphere", format, Geom.UHStatic)

    vertex = GeomVertexWriter(vdata, "vertex")
    normal = GeomVertexWriter(vdata, "normal")

    for i in range(segments + 1):
        lat = np.pi * (-0.5 + float(i) / segments)
        for j in range(segments + 1):
            lon = 2 * np.pi * float(j) / segments

            x = np.cos(lat) * np.cos(lon)
            y = np.cos(lat) * np.sin(lon)
            z = np.sin(lat)

            vertex.addData3f(radius * x, radius * y, radius * z)
            normal.addData3f(x, y, z)

    prim = GeomTriangles(Geom.UHStatic)
    for i in range(segments):
        for j in range(segments):
            v0 = i * (segments + 1) + j
            v1 = v0 + 1
            v2 = v0 + segments + 1
            v3 = v2 + 1
            prim.addVertices(v0, v2, v1)
            prim.addVertices(v1, v2, v3)

    geom = Geom(vdata)
    geom.addPrimitive(prim)
    node = GeomNode("probe")
    node.addGeom(geom)
    return node


def create_segment_geom(segment):
    """
    Build a GeomNode from a segment's local-space triangles.

    Face normals are computed per triangle (flat shading).
    """
    format = GeomVertexFormat.getV3n3()
    vdata = GeomVertexData(segment.name, format, Geom.UHStatic)

    vertex = GeomVertexWriter(vdata, "vertex")
    normal = GeomVertexWriter(vdata, "normal")

    prim = GeomTriangles(Geom.UHStatic)
    triangles = segment.vertices[segment.faces]
    for k, tri in enumerate(triangles):
        n = np.cross(tri[1] - tri[0], tri[2] - tri[0])
        length = np.linalg.norm(n)
        n = n / length if length > 1e-12 else np.array([0.0, 1.0, 0.0])
        for corner in tri:
            vertex.addData3f(*to_panda(corner))
            normal.addData3f(*to_panda(n))
        prim.addVertices(3 * k, 3 * k + 1, 3 * k + 2)

    geom = Geom(vdata)
    geom.addPrimitive(prim)
    node = GeomNode(segment.name)
    node.addGeom(geom)
    return node


if PANDA3D_AVAILABLE:

    class PetalRingVisualizer(ShowBase):
        """
        Panda3D-based visualizer for the petal ring.

        Each frame steps the simulation with the real frame delta, then copies
        every petal's colour and scale and the probe transform onto the scene
        graph.
        """

        def __init__(self, simulation=None):
            ShowBase.__init__(self)

            self.simulation = simulation
            camera_cfg = simulation.config['camera'] if simulation else {}

            # Camera state for orbital controls
            cam_pos = np.asarray(camera_cfg.get('position', (0.0, 7.5, 0.0)), dtype=np.float64)
            self.default_camera_distance = float(np.linalg.norm(cam_pos)) or 7.5
            self.camera_distance = self.default_camera_distance
            self.camera_heading = 0.0   # degrees
            self.camera_pitch = 85.0    # degrees, near straight down
            self.camera_target = np.zeros(3)

            # Mouse state
            self.mouse_dragging = False
            self.last_mouse_x = 0
            self.last_mouse_y = 0

            self.disableMouse()
            self.camLens.setFov(camera_cfg.get('fov', 50.0))
            self._update_camera_position()

            self.setBackgroundColor(0, 0, 0)
            self._setup_lighting()

            # Visual nodes
            self.segment_nodes: List[NodePath] = []
            self.probe_node = None
            self.hud_texts = {}

            self._create_ground()
            self._create_segments()
            self._create_probe()
            self._create_ui()

            self.taskMgr.add(self._update_task, "update_animation")
            self.taskMgr.add(self._camera_control_task, "camera_control")

            # Keyboard controls
            self.accept("escape", self.userExit)
            self.accept("r", self._reset_camera)
            self.accept("[", self._nudge_radius, [-1])
            self.accept("]", self._nudge_radius, [1])
            self.accept("-", self._nudge_speed, [-0.1])
            self.accept("=", self._nudge_speed, [0.1])
            self.accept("wheel_up", self._zoom_in)
            self.accept("wheel_down", self._zoom_out)

            # Mouse controls
            self.accept("mouse1", self._start_drag)
            self.accept("mouse1-up", self._stop_drag)

            print("=" * 50)
            print("PETAL RING VISUALIZER - CONTROLS")
            print("=" * 50)
            print("  Mouse Drag  - Orbit camera")
            print("  Scroll      - Zoom in/out")
            print("  [ / ]       - Orbit radius -/+")
            print("  - / =       - Orbit speed -/+")
            print("  R           - Reset camera")
            print("  ESC         - Exit")
            print("=" * 50)

        def _update_camera_position(self):
            """Update camera based on orbital parameters"""
            rad_h = np.radians(self.camera_heading)
            rad_p = np.radians(self.camera_pitch)

            x = self.camera_distance * np.cos(rad_p) * np.sin(rad_h)
            y = self.camera_distance * np.cos(rad_p) * np.cos(rad_h)
            z = self.camera_distance * np.sin(rad_p)

            target = to_panda(self.camera_target)
            self.camera.setPos(target[0] + x, target[1] - y, target[2] + z)
            self.camera.lookAt(Point3(*target))

        def _camera_control_task(self, task):
            """Handle camera controls each frame"""
            if self.mouse_dragging and self.mouseWatcherNode.hasMouse():
                mx = self.mouseWatcherNode.getMouseX()
                my = self.mouseWatcherNode.getMouseY()

                dx = (mx - self.last_mouse_x) * 200
                dy = (my - self.last_mouse_y) * 200

                self.camera_heading += dx
                self.camera_pitch = np.clip(self.camera_pitch + dy, -85, 85)

                self.last_mouse_x = mx
                self.last_mouse_y = my

            self._update_camera_position()
            return Task.cont

        def _start_drag(self):
            if self.mouseWatcherNode.hasMouse():
                self.mouse_dragging = True
                self.last_mouse_x = self.mouseWatcherNode.getMouseX()
                self.last_mouse_y = self.mouseWatcherNode.getMouseY()

        def _stop_drag(self):
            self.mouse_dragging = False

        def _zoom_in(self):
            self.camera_distance = max(2, self.camera_distance * 0.85)
            self._update_camera_position()

        def _zoom_out(self):
            self.camera_distance = min(60, self.camera_distance * 1.15)
            self._update_camera_position()

        def _reset_camera(self):
            self.camera_distance = self.default_camera_distance
            self.camera_heading = 0.0
            self.camera_pitch = 85.0
            print("[i] Camera reset")

        def _nudge_radius(self, direction: int):
            if self.simulation:
                params = self.simulation.orbit_params
                value = self.simulation.set_radius(params.radius + direction * params.radius_step)
                print(f"[i] Orbit radius: {value:.1f}")

        def _nudge_speed(self, delta: float):
            if self.simulation:
                value = self.simulation.set_speed(self.simulation.orbit_params.speed + delta)
                print(f"[i] Orbit speed: {value:.2f}")

        def _setup_lighting(self):
            """Setup scene lighting"""
            ambient = AmbientLight("ambient")
            ambient.setColor(Vec4(0.25, 0.25, 0.25, 1))
            ambient_np = self.render.attachNewNode(ambient)
            self.render.setLight(ambient_np)

            sun = DirectionalLight("sun")
            sun.setColor(Vec4(1.0, 1.0, 1.0, 1))
            sun_np = self.render.attachNewNode(sun)
            sun_np.setPos(*to_panda((-2, 10, 2)))
            sun_np.lookAt(0, 0, 0)
            self.render.setLight(sun_np)

        def _create_ground(self):
            """Grey plane two units below the ring"""
            cm = CardMaker("ground")
            cm.setFrame(-15, 15, -10, 10)
            ground = self.render.attachNewNode(cm.generate())
            ground.setP(-90)
            ground.setPos(0, 0, -2)
            ground.setColor(0.8, 0.8, 0.8, 1)

        def _create_segments(self):
            """One node per petal, positioned at its origin"""
            if not self.simulation:
                return
            for segment in self.simulation.ring:
                node = self.render.attachNewNode(create_segment_geom(segment))
                node.setPos(*to_panda(segment.origin))
                node.setTwoSided(True)
                node.setColor(*segment.color, 1)
                self.segment_nodes.append(node)

        def _create_probe(self):
            size = self.simulation.probe.size if self.simulation else 0.075
            self.probe_node = self.render.attachNewNode(create_sphere_geom(radius=size))
            self.probe_node.setColor(0.99, 0.99, 0.97, 1)

        def _create_ui(self):
            labels = ["time", "active", "orbit"]
            for i, label in enumerate(labels):
                txt = TextNode(f"hud_{label}")
                txt.setText(f"{label}: --")
                txt.setAlign(TextNode.ALeft)
                txt_np = self.aspect2d.attachNewNode(txt)
                txt_np.setScale(0.045)
                txt_np.setPos(-1.3, 0, 0.9 - i * 0.07)
                txt_np.setColor(0.9, 0.9, 0.9, 1)
                self.hud_texts[label] = txt

            hint_txt = TextNode("hint")
            hint_txt.setText("Mouse:Orbit | Scroll:Zoom | [ ]:Radius | - =:Speed | R:Reset")
            hint_txt.setAlign(TextNode.ACenter)
            hint_np = self.aspect2d.attachNewNode(hint_txt)
            hint_np.setScale(0.03)
            hint_np.setPos(0, 0, -0.95)
            hint_np.setColor(0.6, 0.6, 0.7, 1)

        def _update_task(self, task):
            """Main update loop"""
            if self.simulation is None:
                return Task.cont

            telemetry = self.simulation.step(globalClock.getDt())

            for segment, node in zip(self.simulation.ring, self.segment_nodes):
                node.setColor(*segment.color, 1)
                node.setScale(segment.scale)

            probe = self.simulation.probe
            self.probe_node.setPos(*to_panda(probe.position))
            self.probe_node.setH(np.degrees(probe.spin))

            probe_info = telemetry['probe']
            self.hud_texts["time"].setText(f"T={telemetry['time']:.1f}s")
            self.hud_texts["active"].setText(f"Active: {telemetry['active_name'] or '--'}")
            self.hud_texts["orbit"].setText(
                f"Radius: {probe_info['radius']:.1f} | Speed: {probe_info['speed']:.2f}"
            )

            return Task.cont


def run_visualization(simulation=None):
    """Run the Panda3D visualization"""
    if not PANDA3D_AVAILABLE:
        print("Cannot run visualization: Panda3D not installed")
        print("Install with: pip install panda3d")
        return

    if simulation is None:
        from ..main import PetalRingSimulation
        simulation = PetalRingSimulation()

    viz = PetalRingVisualizer(simulation)
    viz.run()


if __name__ == "__main__":
    run_visualization()
