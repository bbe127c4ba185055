"""Layout resolution and drawing helpers for fishbone graphs."""

from .constraints import apply_fishbone_constraints, interpolate_connector
from .forces import ForceSimulation, LinkForce, ManyBodyForce, log_scale
from .simulator import (
    LayoutFrame,
    LayoutSimulator,
    Renderer,
    SimulationContext,
    StaticRenderer,
    link_distances,
)
from .gestures import GestureController, ResizeDebouncer
from .scene import FishboneScene, SceneEdge, SceneNode, build_fishbone_scene

__all__ = [
    "FishboneScene",
    "ForceSimulation",
    "GestureController",
    "LayoutFrame",
    "LayoutSimulator",
    "LinkForce",
    "ManyBodyForce",
    "Renderer",
    "ResizeDebouncer",
    "SceneEdge",
    "SceneNode",
    "SimulationContext",
    "StaticRenderer",
    "apply_fishbone_constraints",
    "build_fishbone_scene",
    "interpolate_connector",
    "link_distances",
    "log_scale",
]
