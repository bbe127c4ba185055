"""Interactive viewers for fishbone diagrams."""

from .tk.fishbone_viewer import TkFishboneViewer

__all__ = ["TkFishboneViewer"]
