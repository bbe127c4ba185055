from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from fishbone.analysis.invariants import check_graph_invariants
from fishbone.errors import ValidationError

from .graph import Connector, ConnectorRef, EndpointRef, FishboneGraph, Link, NodeRef
from .ingest import IngestedTree, ingest_tree

logger = logging.getLogger(__name__)


def _fan_out_slots(count: int, along_spine: bool) -> Tuple[List[int], int]:
    """Return the ``child_idx`` of each of ``count`` children and the number of positions used."""

    slots: List[int] = []
    positions = 0
    paired_with: Optional[int] = None
    for _ in range(count):
        if paired_with is not None:
            slots.append(paired_with)
            paired_with = None
            continue
        slots.append(positions)
        if along_spine:
            paired_with = positions
        positions += 1
    return slots, positions


def build_fishbone_graph(tree: IngestedTree | Any) -> FishboneGraph:
    """Build the connector and link topology of a fishbone diagram.

    The children of the root fan out along the spine, the segment from the
    tail anchor to the root. Every other node fans its children out along its
    own edge, the segment from the node to its connector. Each child gets
    one connector on that segment and two links: its own arrow edge
    (child to connector) and the fan-out edge (connector to child).

    A fan-out with ``n`` distinct positions spaces its connectors at
    ``1/(n+1) .. n/(n+1)`` of the segment, so no connector lands on either
    endpoint. Along the spine, consecutive ribs are paired: the rib after a
    freshly placed one reuses its ``child_idx`` so that a top and a bottom
    rib meet the spine at the same point.
    """

    ingested = tree if isinstance(tree, IngestedTree) else ingest_tree(tree)
    nodes = ingested.nodes
    connectors: List[Connector] = []
    links: List[Link] = []
    root_total_links: List[int] = []
    tail_ref = NodeRef(ingested.tail_index)
    root_ref = NodeRef(ingested.root_index)
    slots: Dict[int, Tuple[List[int], int]] = {}

    links.append(Link(source=tail_ref, target=root_ref, depth=0, is_arrow=True))

    # Pre-order walk: a connector exists before any of its child's own fan-out.
    stack = list(reversed(nodes[ingested.root_index].children))
    while stack:
        child_index = stack.pop()
        child = nodes[child_index]
        parent_index = child.parent
        if parent_index is None:
            raise ValidationError(f"Cause {child.name!r} has no parent")
        parent = nodes[parent_index]
        between: tuple[EndpointRef, EndpointRef]
        if parent.is_root:
            between = (tail_ref, root_ref)
            total_links = root_total_links
        else:
            own_connector = parent.connector
            if not isinstance(own_connector, ConnectorRef):
                raise ValidationError(f"Cause {parent.name!r} has no connector to its parent")
            between = (NodeRef(parent_index), own_connector)
            total_links = connectors[own_connector.index].total_links

        if parent_index not in slots:
            slots[parent_index] = _fan_out_slots(len(parent.children), parent.is_root)
        child_slots, positions = slots[parent_index]

        connectors.append(
            Connector(
                between=between,
                child=child_index,
                depth=child.depth,
                child_idx=child_slots[child.child_index],
                max_child_idx=positions,
            )
        )
        ref = ConnectorRef(len(connectors) - 1)
        child.connector = ref
        links.append(Link(source=ref, target=NodeRef(child_index), depth=child.depth))
        links.append(
            Link(source=NodeRef(child_index), target=ref, depth=child.depth, is_arrow=True)
        )
        total_links.append(child.subtree_size)
        stack.extend(reversed(child.children))

    graph = FishboneGraph(
        nodes=nodes,
        connectors=connectors,
        links=links,
        root_index=ingested.root_index,
        tail_index=ingested.tail_index,
        root_total_links=root_total_links,
    )

    failures = [check for check in check_graph_invariants(graph) if not check.passed]
    if failures:
        summary = "; ".join(f"{check.check}: {check.message}" for check in failures)
        raise ValidationError(f"Fishbone graph violates its invariants ({summary})")

    logger.info(
        "Built fishbone graph: %d causes, %d connectors, %d links",
        graph.root.subtree_size,
        len(connectors),
        len(links),
    )
    return graph
