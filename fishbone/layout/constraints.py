from __future__ import annotations

from typing import Tuple

import numpy as np

from fishbone.causes.graph import Connector, FishboneGraph, Position
from fishbone.config import DEFAULT_SETTINGS, LayoutSettings


def interpolate_connector(
    start: Position, end: Position, child_idx: int, max_child_idx: int
) -> Position:
    """Point ``(1 + child_idx) / (max_child_idx + 1)`` of the way back from ``end`` to ``start``.

    ``max_child_idx`` is the number of positions on the segment, so every
    ``child_idx`` below it lands strictly between the two endpoints.
    """

    ax, ay = start
    bx, by = end
    fraction = (1 + child_idx) / (max_child_idx + 1)
    return bx - fraction * (bx - ax), by - fraction * (by - ay)


def apply_fishbone_constraints(
    graph: FishboneGraph,
    *,
    alpha: float,
    viewport: Tuple[float, float],
    root_label_width: float,
    settings: LayoutSettings = DEFAULT_SETTINGS,
) -> None:
    """Pull the bodies of ``graph`` into fishbone shape, in place.

    Rules run in a fixed order because connectors are interpolated from the
    already adjusted positions of their endpoints:

    1. the root sits ``margin + root_label_width`` from the right edge;
    2. the tail anchor sits at the left margin, vertically centred;
    3. ribs stick to the top or bottom margin by region and drift left;
    4. vertical causes drift toward their rib side, and every cause below
       the root drifts left, both by ``k = energy_factor * alpha``;
    5. connectors are placed exactly on the segment between their endpoints.

    Pinned bodies are left untouched.
    """

    width, height = viewport
    margin = settings.margin
    k = settings.energy_factor * alpha
    positions = graph.positions
    pinned = np.all(np.isfinite(graph.pinned), axis=1)

    for index, node in enumerate(graph.nodes):
        if pinned[index]:
            continue
        point = positions[index]
        if node.is_root:
            point[0] = width - (margin + root_label_width)
        if node.is_tail:
            point[0] = margin
            point[1] = height / 2.0
            continue
        if node.depth == 1:
            point[1] = margin if node.region == -1 else height - margin
            point[0] -= settings.rib_nudge * k
        if node.vertical and node.region is not None:
            point[1] += k * node.region
        if node.depth > 0:
            point[0] -= k

    offset = len(graph.nodes)
    for index, connector in enumerate(graph.connectors):
        if pinned[offset + index]:
            continue
        positions[offset + index] = _connector_position(graph, connector)


def _connector_position(graph: FishboneGraph, connector: Connector) -> Position:
    start, end = connector.between
    return interpolate_connector(
        graph.position(start),
        graph.position(end),
        connector.child_idx,
        connector.max_child_idx,
    )
