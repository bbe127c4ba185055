"""
fishbone package root.

This module exposes the high-level API surface for building and laying out
cause-and-effect (Ishikawa) diagrams.
"""

from importlib.metadata import version, PackageNotFoundError

from .causes import build_fishbone_graph, ingest_tree, load_cause_tree
from .errors import ConfigurationError, FishboneError, SimulationError, ValidationError
from .layout import LayoutSimulator
from .styles import DEFAULT_STYLES, StyleConfig, select


def __getattr__(name: str) -> str:
    if name == "__version__":
        try:
            return version("fishbone")
        except PackageNotFoundError:
            return "0.0.0"
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ConfigurationError",
    "DEFAULT_STYLES",
    "FishboneError",
    "LayoutSimulator",
    "SimulationError",
    "StyleConfig",
    "ValidationError",
    "__version__",
    "build_fishbone_graph",
    "ingest_tree",
    "load_cause_tree",
    "select",
]
