"""
Visualization Module
====================
Renderers for the petal ring: headless and Panda3D.
"""

from .engine_interface import (
    RenderState,
    RendererInterface,
    HeadlessRenderer,
    Panda3DRenderer,
    create_renderer,
    get_recommended_engine
)
from .renderer import run_visualization, PANDA3D_AVAILABLE

__all__ = [
    'RenderState',
    'RendererInterface',
    'HeadlessRenderer',
    'Panda3DRenderer',
    'create_renderer',
    'get_recommended_engine',
    'run_visualization',
    'PANDA3D_AVAILABLE',
]
