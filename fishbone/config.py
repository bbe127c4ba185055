"""
Layout settings and project paths.

The numeric defaults below are the tuning the fishbone layout was designed
around; CLIs may override individual values from the command line or from a
JSON settings file.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Tuple

from fishbone.errors import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DIAGRAMS_DIR = PROJECT_ROOT / "diagrams"

MARGIN = 50.0
LINK_SCALE_DOMAIN = (1.0, 5.0)
LINK_SCALE_RANGE = (60.0, 30.0)
ENERGY_FACTOR = 6.0
RIB_NUDGE = 5.0
RESIZE_DEBOUNCE = 0.2
ALPHA_MIN = 0.001
VELOCITY_DECAY = 0.4
NODE_CHARGE = -30.0
VIEWPORT = (1200.0, 800.0)
FRAME_INTERVAL_MS = 16
BASE_FONT_PX = 16.0


@dataclass(slots=True, frozen=True)
class LayoutSettings:
    margin: float = MARGIN
    link_scale_domain: Tuple[float, float] = LINK_SCALE_DOMAIN
    link_scale_range: Tuple[float, float] = LINK_SCALE_RANGE
    energy_factor: float = ENERGY_FACTOR
    rib_nudge: float = RIB_NUDGE
    resize_debounce: float = RESIZE_DEBOUNCE
    alpha_min: float = ALPHA_MIN
    velocity_decay: float = VELOCITY_DECAY
    node_charge: float = NODE_CHARGE
    viewport: Tuple[float, float] = VIEWPORT
    frame_interval_ms: int = FRAME_INTERVAL_MS
    base_font_px: float = BASE_FONT_PX

    @property
    def alpha_decay(self) -> float:
        # Reaches alpha_min after roughly 300 ticks.
        return 1.0 - self.alpha_min ** (1.0 / 300.0)

    def validate(self) -> "LayoutSettings":
        width, height = self.viewport
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Viewport must be positive, got {self.viewport!r}")
        if self.margin < 0:
            raise ConfigurationError(f"Margin must be non-negative, got {self.margin!r}")
        low, high = self.link_scale_domain
        if low <= 0 or high <= 0 or math.isclose(low, high):
            raise ConfigurationError(
                f"Link scale domain must be two distinct positive values, got {self.link_scale_domain!r}"
            )
        if not 0.0 < self.alpha_min < 1.0:
            raise ConfigurationError(f"alpha_min must lie in (0, 1), got {self.alpha_min!r}")
        if not 0.0 <= self.velocity_decay <= 1.0:
            raise ConfigurationError(
                f"velocity_decay must lie in [0, 1], got {self.velocity_decay!r}"
            )
        if self.resize_debounce < 0:
            raise ConfigurationError("resize_debounce must be non-negative.")
        if self.frame_interval_ms <= 0:
            raise ConfigurationError("frame_interval_ms must be positive.")
        return self

    def with_overrides(self, **overrides: Any) -> "LayoutSettings":
        """Return a copy with the non-``None`` overrides applied and validated."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes).validate()


DEFAULT_SETTINGS = LayoutSettings()


def settings_from_mapping(data: Mapping[str, Any]) -> LayoutSettings:
    known = {f.name for f in fields(LayoutSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown layout settings: {', '.join(unknown)}")
    values: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, list):
            value = tuple(value)
        values[key] = value
    return DEFAULT_SETTINGS.with_overrides(**values)


def load_layout_settings(path: Path | str) -> LayoutSettings:
    resolved = Path(path).expanduser().resolve()
    with resolved.open(encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{resolved}: invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a JSON object in {resolved}")
    return settings_from_mapping(data)
