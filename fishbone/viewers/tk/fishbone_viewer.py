from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import tkinter as tk
from tkinter import font as tkfont

from fishbone.causes.graph import FishboneGraph, Node, NodeRef
from fishbone.config import DEFAULT_SETTINGS, LayoutSettings
from fishbone.layout import (
    FishboneScene,
    GestureController,
    LayoutFrame,
    LayoutSimulator,
    build_fishbone_scene,
)
from fishbone.styles import DEFAULT_STYLES, StyleConfig

logger = logging.getLogger(__name__)

Box = Tuple[float, float, float, float]

_TEXT_ANCHORS = {
    ("start", "middle"): "w",
    ("end", "middle"): "e",
    ("middle", "middle"): "center",
    ("middle", "below"): "n",
    ("middle", "above"): "s",
}


class TkFishboneViewer:
    """Render and interactively relax a fishbone graph using Tkinter."""

    def __init__(
        self,
        graph: FishboneGraph,
        title: str,
        *,
        styles: StyleConfig = DEFAULT_STYLES,
        settings: LayoutSettings = DEFAULT_SETTINGS,
        maximize: bool = False,
    ) -> None:
        self.graph = graph
        self.title = title
        self.styles = styles
        self.settings = settings
        self.maximize = maximize

    def run(self, output: Path | None = None) -> None:
        root = tk.Tk()
        root.withdraw()
        root.title(self.title)
        width, height = self.settings.viewport
        root.geometry(f"{int(width)}x{int(height)}")
        if self.maximize:
            try:
                root.state("zoomed")
            except tk.TclError:
                root.attributes("-zoomed", True)

        info_font = tkfont.Font(family="Helvetica", size=12)

        container = tk.Frame(root, background="#f0f0f0")
        container.pack(fill="both", expand=True)

        status = _StatusBar(container, info_font=info_font)
        status.pack(side=tk.BOTTOM, fill="x")

        canvas = _FishboneCanvas(
            container,
            self.graph,
            styles=self.styles,
            settings=self.settings,
            status=status,
        )
        canvas.pack(fill="both", expand=True)

        simulator = LayoutSimulator(self.graph, canvas, settings=self.settings)
        controller = GestureController(simulator)
        canvas.attach(simulator, controller)

        root.update_idletasks()
        root.deiconify()
        root.lift()
        root.focus_force()

        simulator.start()
        if output:
            simulator.run()
            try:
                canvas.save_postscript(output)
            except tk.TclError as exc:
                logger.error("Failed to save canvas: %s", exc)

        canvas.start_loop()
        root.mainloop()


class _FishboneCanvas(tk.Canvas):
    """Canvas that draws layout frames and turns pointer events into gestures."""

    def __init__(
        self,
        master: tk.Misc,
        graph: FishboneGraph,
        *,
        styles: StyleConfig,
        settings: LayoutSettings,
        status: "_StatusBar",
        **kwargs,
    ) -> None:
        super().__init__(master, background="white", highlightthickness=0, **kwargs)
        self.graph = graph
        self.styles = styles
        self.settings = settings
        self.status = status
        self.node_boxes: Dict[NodeRef, Box] = {}
        self._fonts: Dict[int, tkfont.Font] = {}
        self._simulator: Optional[LayoutSimulator] = None
        self._controller: Optional[GestureController] = None
        self._dragging: Optional[NodeRef] = None
        self._after_id: Optional[str] = None

        self.bind("<Configure>", self._on_resize)
        self.bind("<ButtonPress-1>", self._on_press)
        self.bind("<B1-Motion>", self._on_drag)
        self.bind("<ButtonRelease-1>", self._on_release)
        self.bind("<Destroy>", self._on_destroy)

    def attach(self, simulator: LayoutSimulator, controller: GestureController) -> None:
        self._simulator = simulator
        self._controller = controller

    # Renderer interface -------------------------------------------------

    def viewport_size(self) -> Tuple[float, float]:
        width = self.winfo_width()
        height = self.winfo_height()
        if width <= 1 or height <= 1:
            return self.settings.viewport
        return float(width), float(height)

    def measure_label(self, node: Node) -> float:
        return float(self._font_for(node.depth).measure(node.name))

    def render(self, frame: LayoutFrame) -> None:
        scene = build_fishbone_scene(self.graph, frame, self.styles)
        self._draw(scene)
        self.status.show_frame(frame)

    # Frame loop ---------------------------------------------------------

    def start_loop(self) -> None:
        self._after_id = self.after(self.settings.frame_interval_ms, self._on_frame)

    def _on_frame(self) -> None:
        if self._simulator is not None and self._controller is not None:
            self._controller.poll()
            if self._simulator.active:
                self._simulator.step()
        self._after_id = self.after(self.settings.frame_interval_ms, self._on_frame)

    def _on_destroy(self, event: tk.Event) -> None:
        if event.widget is self and self._after_id is not None:
            self.after_cancel(self._after_id)
            self._after_id = None
            if self._simulator is not None:
                self._simulator.stop()

    def save_postscript(self, destination: Path) -> None:
        self.update_idletasks()
        self.postscript(file=str(destination))

    # Drawing ------------------------------------------------------------

    def _font_for(self, depth: int) -> tkfont.Font:
        style = self.styles.node_for(depth)
        pixels = max(int(round(style.font_size_em * self.settings.base_font_px)), 1)
        if pixels not in self._fonts:
            # Negative sizes are pixels in Tk.
            self._fonts[pixels] = tkfont.Font(family="Helvetica", size=-pixels)
        return self._fonts[pixels]

    def _draw(self, scene: FishboneScene) -> None:
        self.delete("all")
        self.node_boxes.clear()

        for edge in scene.edges:
            style = edge.visual_style
            self.create_line(
                *edge.start,
                *edge.end,
                fill=style.get("stroke", "#00b3f6"),
                width=style.get("width", 1),
            )
            if edge.arrow:
                x, y = edge.end
                radius = 6
                self.create_oval(
                    x - radius,
                    y - radius,
                    x + radius,
                    y + radius,
                    outline=style.get("marker_outline", "#ffbd00"),
                    fill=style.get("marker_fill", "#ffffff"),
                    width=2,
                )

        for node in scene.nodes:
            style = node.visual_style
            anchor = _TEXT_ANCHORS.get((node.anchor, style.get("baseline", "middle")), "center")
            text_id = self.create_text(
                *node.position,
                text=node.name,
                anchor=anchor,
                fill=style.get("font_color", "#000000"),
                font=self._font_for(node.depth),
            )
            x0, y0, x1, y1 = self.bbox(text_id)
            shape = style.get("shape", "rectangle")
            padding = style.get("padding", 2.0)
            background = None
            if shape == "circle":
                cx, cy = (x0 + x1) / 2, (y0 + y1) / 2
                radius = max(x1 - x0, y1 - y0) / 2 + padding
                x0, y0, x1, y1 = cx - radius, cy - radius, cx + radius, cy + radius
                background = self.create_oval(
                    x0, y0, x1, y1, fill=style.get("fill"), outline=""
                )
            elif shape == "rectangle":
                x0, y0, x1, y1 = x0 - padding, y0 - padding, x1 + padding, y1 + padding
                background = self._create_box(
                    x0,
                    y0,
                    x1,
                    y1,
                    style.get("corner_radius", 0.0),
                    fill=style.get("fill"),
                    outline=style.get("outline") or "",
                    width=style.get("outline_width", 0),
                )
            if background is not None:
                self.tag_lower(background, text_id)
            self.node_boxes[node.ref] = (x0, y0, x1, y1)

    def _create_box(
        self, x0: float, y0: float, x1: float, y1: float, radius: float, **options
    ) -> int:
        if radius <= 0:
            return self.create_rectangle(x0, y0, x1, y1, **options)
        r = min(radius, (x1 - x0) / 2, (y1 - y0) / 2)
        # A smoothed polygon with doubled corner points approximates rounded corners.
        points = [
            x0 + r, y0, x1 - r, y0, x1, y0, x1, y0 + r,
            x1, y1 - r, x1, y1, x1 - r, y1, x0 + r, y1,
            x0, y1, x0, y1 - r, x0, y0 + r, x0, y0,
        ]
        return self.create_polygon(points, smooth=True, **options)

    # Gestures -----------------------------------------------------------

    def _hit(self, x: float, y: float) -> Optional[NodeRef]:
        for ref, (x0, y0, x1, y1) in self.node_boxes.items():
            if x0 <= x <= x1 and y0 <= y <= y1:
                return ref
        return None

    def _on_press(self, event: tk.Event) -> None:
        ref = self._hit(event.x, event.y)
        if ref is None or self._controller is None:
            return
        if self._controller.click(ref):
            return
        self._dragging = ref
        self._controller.drag_start(ref, event.x, event.y)
        self.status.show_node(self.graph, ref)

    def _on_drag(self, event: tk.Event) -> None:
        if self._dragging is None or self._controller is None:
            return
        self._controller.drag_move(self._dragging, event.x, event.y)

    def _on_release(self, _: tk.Event) -> None:
        if self._dragging is None or self._controller is None:
            return
        self._controller.drag_end(self._dragging)
        self._dragging = None

    def _on_resize(self, event: tk.Event) -> None:
        if self._controller is not None:
            self._controller.resize(event.width, event.height)


class _StatusBar(tk.Frame):
    """One-line readout of the simulation energy and the selected cause."""

    def __init__(self, master: tk.Misc, *, info_font: tkfont.Font) -> None:
        super().__init__(master, background="#fafafa", borderwidth=1, relief=tk.FLAT)
        self._energy = tk.Label(self, font=info_font, anchor="w", background="#fafafa")
        self._energy.pack(side=tk.LEFT, padx=8, pady=4)
        self._selection = tk.Label(self, font=info_font, anchor="e", background="#fafafa")
        self._selection.pack(side=tk.RIGHT, padx=8, pady=4)

    def show_frame(self, frame: LayoutFrame) -> None:
        self._energy.configure(text=f"step {frame.step}   alpha {frame.alpha:.3f}")

    def show_node(self, graph: FishboneGraph, ref: NodeRef) -> None:
        node = graph.nodes[ref.index]
        parts: List[str] = [node.name, f"depth {node.depth}"]
        if node.region is not None:
            parts.append("top" if node.region == -1 else "bottom")
        parts.append(f"{node.subtree_size} causes")
        self._selection.configure(text="  |  ".join(parts))
