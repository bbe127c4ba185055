from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Tuple, TypeVar

from fishbone.errors import ConfigurationError

T = TypeVar("T")


def select(index: Optional[int], table: Sequence[T]) -> T:
    """Return the style entry for ``index``, clamped into ``table``.

    ``None`` and negative indices map to the first entry; indices past the
    end map to the last one.
    """

    if not table:
        raise ConfigurationError("Style table must contain at least one entry.")
    if index is None or index < 0:
        return table[0]
    return table[min(index, len(table) - 1)]


@dataclass(slots=True, frozen=True)
class LineStyle:
    color: str
    stroke_width_px: float


@dataclass(slots=True, frozen=True)
class NodeStyle:
    color: str
    font_size_em: float
    background_color: str | None = None
    border_radius: str | None = None
    padding: float | None = None


@dataclass(slots=True, frozen=True)
class StyleConfig:
    """Depth-indexed line and node styles."""

    lines: Tuple[LineStyle, ...]
    nodes: Tuple[NodeStyle, ...]

    def __post_init__(self) -> None:
        if not self.lines:
            raise ConfigurationError("At least one line style is required.")
        if not self.nodes:
            raise ConfigurationError("At least one node style is required.")

    def line_for(self, depth: Optional[int]) -> LineStyle:
        return select(depth, self.lines)

    def node_for(self, depth: Optional[int]) -> NodeStyle:
        return select(depth, self.nodes)


DEFAULT_STYLES = StyleConfig(
    lines=(
        LineStyle(color="#00b3f6", stroke_width_px=2.0),
        LineStyle(color="#00b3f6", stroke_width_px=1.0),
        LineStyle(color="#00b3f6", stroke_width_px=0.5),
    ),
    nodes=(
        NodeStyle(color="white", font_size_em=2.0),
        NodeStyle(color="white", font_size_em=1.5),
        NodeStyle(color="black", font_size_em=1.0),
        NodeStyle(color="#00b3f6", font_size_em=0.8),
        NodeStyle(color="#aaa", font_size_em=0.8),
    ),
)

_LINE_KEYS = {
    "color": "color",
    "strokeWidthPx": "stroke_width_px",
    "stroke_width_px": "stroke_width_px",
}
_NODE_KEYS = {
    "color": "color",
    "fontSizeEm": "font_size_em",
    "font_size_em": "font_size_em",
    "backgroundColor": "background_color",
    "background_color": "background_color",
    "borderRadius": "border_radius",
    "border_radius": "border_radius",
    "padding": "padding",
}


def _translate(entry: Any, keys: Mapping[str, str], kind: str) -> dict[str, Any]:
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"Each {kind} style must be an object, got {entry!r}")
    translated: dict[str, Any] = {}
    for key, value in entry.items():
        if key not in keys:
            raise ConfigurationError(f"Unknown {kind} style key {key!r}")
        translated[keys[key]] = value
    return translated


def style_config_from_mapping(data: Mapping[str, Any]) -> StyleConfig:
    """Build a :class:`StyleConfig`, keeping defaults for an omitted table."""

    lines = DEFAULT_STYLES.lines
    nodes = DEFAULT_STYLES.nodes
    try:
        if "lines" in data:
            lines = tuple(
                LineStyle(**_translate(entry, _LINE_KEYS, "line")) for entry in data["lines"]
            )
        if "nodes" in data:
            nodes = tuple(
                NodeStyle(**_translate(entry, _NODE_KEYS, "node")) for entry in data["nodes"]
            )
    except TypeError as exc:
        raise ConfigurationError(f"Invalid style entry: {exc}") from exc
    return StyleConfig(lines=lines, nodes=nodes)


def load_style_config(path: Path | str) -> StyleConfig:
    resolved = Path(path).expanduser().resolve()
    with resolved.open(encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{resolved}: invalid JSON ({exc})") from exc
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Expected a JSON object in {resolved}")
    return style_config_from_mapping(data)
