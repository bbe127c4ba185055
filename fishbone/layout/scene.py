from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from fishbone.causes.graph import EndpointRef, FishboneGraph, Node, NodeRef, Position
from fishbone.errors import ConfigurationError
from fishbone.styles import DEFAULT_STYLES, StyleConfig

from .simulator import LayoutFrame

_ACCENT = "#00b3f6"
_ARROW_OUTLINE = "#ffbd00"


@dataclass(slots=True)
class SceneNode:
    """A labelled cause in a drawable scene."""

    ref: NodeRef
    name: str
    position: Position
    depth: int
    anchor: str
    visual_style: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SceneEdge:
    """A straight line between two resolved endpoints."""

    source: EndpointRef
    target: EndpointRef
    start: Position
    end: Position
    depth: int
    arrow: bool = False
    visual_style: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class FishboneScene:
    """Renderer-agnostic draw list for one layout frame."""

    nodes: List[SceneNode]
    edges: List[SceneEdge]
    metadata: dict[str, Any] = field(default_factory=dict)


def build_fishbone_scene(
    graph: FishboneGraph,
    frame: LayoutFrame,
    styles: Optional[StyleConfig] = None,
) -> FishboneScene:
    """Construct a :class:`FishboneScene` from ``graph`` and the coordinates in ``frame``."""

    styles = styles or DEFAULT_STYLES

    edges: List[SceneEdge] = []
    for link, (start, end) in zip(graph.links, frame.segments):
        line = styles.line_for(link.depth)
        visual_style = {"stroke": line.color, "width": line.stroke_width_px}
        if link.is_arrow:
            visual_style["marker_outline"] = _ARROW_OUTLINE
            visual_style["marker_fill"] = "#ffffff"
        edges.append(
            SceneEdge(
                source=link.source,
                target=link.target,
                start=start,
                end=end,
                depth=link.depth,
                arrow=link.is_arrow,
                visual_style=visual_style,
            )
        )

    nodes: List[SceneNode] = []
    for index, node in enumerate(graph.nodes):
        if node.is_tail:
            continue
        nodes.append(
            SceneNode(
                ref=NodeRef(index),
                name=node.name,
                position=frame.node_positions[index],
                depth=node.depth,
                anchor=_label_anchor(node),
                visual_style=_node_style(node, styles),
            )
        )

    metadata = {
        "root": graph.root.name,
        "alpha": frame.alpha,
        "step": frame.step,
    }
    return FishboneScene(nodes=nodes, edges=edges, metadata=metadata)


def _label_anchor(node: Node) -> str:
    if node.is_root:
        return "start"
    if node.horizontal:
        return "end"
    return "middle"


def _node_style(node: Node, styles: StyleConfig) -> dict[str, Any]:
    style = styles.node_for(node.depth)
    fill = style.background_color or _ACCENT
    outline = None
    if node.depth == 2:
        fill = "#ffffff"
        outline = _ACCENT
    circular, corner_radius = _border_radius(style.border_radius)
    if node.is_root or circular:
        shape = "circle"
    elif node.depth == 3:
        shape = "none"
    else:
        shape = "rectangle"
    padding = style.padding
    if padding is None:
        padding = 4.0 if shape == "circle" else 2.0
    return {
        "shape": shape,
        "fill": fill,
        "outline": outline,
        "outline_width": 2 if outline else 0,
        "padding": float(padding),
        "corner_radius": corner_radius,
        "font_color": style.color,
        "font_size_em": style.font_size_em,
        # Horizontal labels sit on their line, vertical ones above or below it.
        "baseline": "middle" if node.horizontal else ("below" if node.depth == 1 else "above"),
    }


def _border_radius(value: str | None) -> Tuple[bool, float]:
    """Parse a CSS-like radius (``"6px"``, ``"6"``, ``"50%"``) into ``(circular, pixels)``.

    Percentages of 50 or more round the background into a circle.
    """

    if value is None:
        return False, 0.0
    text = str(value).strip().lower()
    try:
        if text.endswith("%"):
            return float(text[:-1]) >= 50.0, 0.0
        if text.endswith("px"):
            text = text[:-2]
        radius = float(text)
    except ValueError as exc:
        raise ConfigurationError(f"Unsupported border radius {value!r}") from exc
    if radius < 0:
        raise ConfigurationError(f"Border radius must be non-negative, got {value!r}")
    return False, radius
