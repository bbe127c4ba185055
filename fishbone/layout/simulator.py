from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

import numpy as np

from fishbone.causes.graph import ConnectorRef, EndpointRef, FishboneGraph, Link, Node, NodeRef, Position
from fishbone.config import DEFAULT_SETTINGS, LayoutSettings
from fishbone.errors import SimulationError
from fishbone.styles import DEFAULT_STYLES, StyleConfig

from .constraints import apply_fishbone_constraints
from .forces import ForceSimulation, LinkForce, ManyBodyForce, log_scale

logger = logging.getLogger(__name__)

Segment = Tuple[Position, Position]


@dataclass(slots=True, frozen=True)
class LayoutFrame:
    """Resolved coordinates of one simulation step."""

    node_positions: Tuple[Position, ...]
    connector_positions: Tuple[Position, ...]
    segments: Tuple[Segment, ...]
    alpha: float
    step: int

    def position(self, ref: EndpointRef) -> Position:
        if isinstance(ref, NodeRef):
            return self.node_positions[ref.index]
        if isinstance(ref, ConnectorRef):
            return self.connector_positions[ref.index]
        raise TypeError(f"Unsupported endpoint reference: {ref!r}")


class Renderer(Protocol):
    def viewport_size(self) -> Tuple[float, float]:
        ...

    def measure_label(self, node: Node) -> float:
        ...

    def render(self, frame: LayoutFrame) -> None:
        ...


class StaticRenderer:
    """Headless renderer with a fixed viewport that keeps the latest frame."""

    # Average glyph width relative to the font size.
    CHAR_WIDTH = 0.6

    def __init__(
        self,
        viewport: Tuple[float, float] = DEFAULT_SETTINGS.viewport,
        styles: StyleConfig = DEFAULT_STYLES,
        *,
        base_font_px: float = DEFAULT_SETTINGS.base_font_px,
    ) -> None:
        self.viewport = viewport
        self.styles = styles
        self.base_font_px = base_font_px
        self.frames_rendered = 0
        self.last_frame: Optional[LayoutFrame] = None

    def viewport_size(self) -> Tuple[float, float]:
        return self.viewport

    def measure_label(self, node: Node) -> float:
        font_px = self.styles.node_for(node.depth).font_size_em * self.base_font_px
        return len(node.name) * font_px * self.CHAR_WIDTH

    def render(self, frame: LayoutFrame) -> None:
        self.frames_rendered += 1
        self.last_frame = frame


@dataclass(slots=True)
class SimulationContext:
    """Mutable state shared by the simulator and the gesture handlers."""

    viewport: Tuple[float, float]
    dragging: bool = False
    running: bool = False
    steps: int = 0
    restarts: int = 0


def link_distances(graph: FishboneGraph, settings: LayoutSettings = DEFAULT_SETTINGS) -> List[float]:
    """Target length of every link, shorter for deeper links and longer for wide fan-outs."""

    scale = log_scale(settings.link_scale_domain, settings.link_scale_range)
    return [
        (_fan_out_for(graph, link) + 1) * float(scale(link.depth + 1))
        for link in graph.links
    ]


def _fan_out_for(graph: FishboneGraph, link: Link) -> int:
    for ref in (link.target, link.source):
        if isinstance(ref, ConnectorRef):
            return graph.connectors[ref.index].max_child_idx
    return graph.fan_out(link.target)


class LayoutSimulator:
    """Iteratively resolves fishbone positions.

    Each :meth:`step` runs one tick of the generic force simulation, then the
    fishbone constraint pass (unless a drag is in progress), then hands the
    resulting coordinates to the renderer.
    """

    def __init__(
        self,
        graph: FishboneGraph,
        renderer: Optional[Renderer] = None,
        *,
        settings: LayoutSettings = DEFAULT_SETTINGS,
        seed: Optional[int] = None,
    ) -> None:
        self.graph = graph
        self.settings = settings.validate()
        self.renderer: Renderer = renderer or StaticRenderer(settings.viewport)
        self.context = SimulationContext(viewport=tuple(self.renderer.viewport_size()))
        self.engine = ForceSimulation(
            graph.positions,
            graph.velocities,
            graph.pinned,
            alpha_min=settings.alpha_min,
            alpha_decay=settings.alpha_decay,
            velocity_decay=settings.velocity_decay,
            seed=seed,
        )
        body_links = [
            (graph.body_index(link.source), graph.body_index(link.target))
            for link in graph.links
        ]
        self.engine.add_force("link", LinkForce(body_links, link_distances(graph, settings)))
        charges = [settings.node_charge] * len(graph.nodes) + [0.0] * len(graph.connectors)
        self.engine.add_force("charge", ManyBodyForce(charges))

    @property
    def alpha(self) -> float:
        return self.engine.alpha

    @property
    def active(self) -> bool:
        return self.context.running and self.engine.active

    def start(self) -> None:
        self.context.running = True
        self.engine.restart(1.0)
        logger.debug("Simulation started with %d bodies", self.graph.body_count)

    def stop(self) -> None:
        self.context.running = False
        logger.debug("Simulation stopped after %d steps", self.context.steps)

    def restart(self, alpha: float = 1.0) -> None:
        """Re-energise the simulation; a stopped simulation is started again."""

        self.engine.restart(alpha)
        self.context.running = True
        self.context.restarts += 1
        logger.debug("Simulation restarted at alpha=%.3f", alpha)

    def step(self) -> bool:
        """Advance one tick; return whether the simulation is still active."""

        self.engine.tick()
        if not np.all(np.isfinite(self.graph.positions)):
            self.context.running = False
            logger.error("Simulation diverged at step %d", self.context.steps)
            raise SimulationError(
                f"Layout diverged at step {self.context.steps}: non-finite body positions"
            )

        if not self.context.dragging:
            apply_fishbone_constraints(
                self.graph,
                alpha=self.engine.alpha,
                viewport=self.context.viewport,
                root_label_width=self.renderer.measure_label(self.graph.root),
                settings=self.settings,
            )

        self.context.steps += 1
        self.renderer.render(self.frame())
        if not self.engine.active and self.context.running:
            self.context.running = False
            logger.debug("Simulation converged after %d steps", self.context.steps)
        return self.active

    def run(self, max_steps: Optional[int] = None) -> int:
        """Step until the energy drops below ``alpha_min`` or ``max_steps`` is reached."""

        if not self.context.running:
            self.start()
        count = 0
        while self.active and (max_steps is None or count < max_steps):
            self.step()
            count += 1
        logger.info("Layout settled after %d steps (alpha=%.4f)", count, self.engine.alpha)
        return count

    def frame(self) -> LayoutFrame:
        graph = self.graph
        node_count = len(graph.nodes)
        points = [(float(x), float(y)) for x, y in graph.positions]
        segments = tuple(
            (points[graph.body_index(link.source)], points[graph.body_index(link.target)])
            for link in graph.links
        )
        return LayoutFrame(
            node_positions=tuple(points[:node_count]),
            connector_positions=tuple(points[node_count:]),
            segments=segments,
            alpha=self.engine.alpha,
            step=self.context.steps,
        )
