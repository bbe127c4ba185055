from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from fishbone.errors import ValidationError

from .graph import Node, NodeRef, Orientation
from .loader import CauseTree, parse_cause_tree

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IngestedTree:
    """Flat, annotated node list: the tail anchor first, then causes in pre-order."""

    nodes: List[Node]
    root_index: int
    tail_index: int

    @property
    def root(self) -> Node:
        return self.nodes[self.root_index]

    @property
    def tail(self) -> Node:
        return self.nodes[self.tail_index]


def ingest_tree(tree: CauseTree | Any) -> IngestedTree:
    """Walk ``tree`` once and annotate every cause with its fishbone attributes.

    Depth increases by one per level, orientation flips between horizontal
    and vertical, and every rib (depth 1) takes the side given by its index
    parity: even ribs go on top (``-1``), odd ribs below (``+1``). Deeper
    causes inherit the side of their rib.
    """

    cause_tree = parse_cause_tree(tree)

    tail = Node(
        name="",
        depth=0,
        orientation=Orientation.HORIZONTAL,
        is_tail=True,
    )
    nodes: List[Node] = [tail]
    tail_index = 0

    stack: List[Tuple[CauseTree, str, Optional[int], int]] = [(cause_tree, "root", None, 0)]
    while stack:
        entry, path, parent_index, child_index = stack.pop()
        if not isinstance(entry.name, str) or not entry.name:
            raise ValidationError(f"{path}: every cause needs a non-empty 'name'")

        index = len(nodes)
        if parent_index is None:
            node = Node(
                name=entry.name,
                depth=0,
                orientation=Orientation.HORIZONTAL,
                connector=NodeRef(tail_index),
                is_root=True,
            )
        else:
            parent = nodes[parent_index]
            region = parent.region
            if region is None:
                region = 1 if child_index & 1 else -1
            node = Node(
                name=entry.name,
                depth=parent.depth + 1,
                orientation=parent.orientation.flipped(),
                region=region,
                parent=parent_index,
                child_index=child_index,
            )
            parent.children.append(index)
        nodes.append(node)

        for idx in reversed(range(len(entry.children))):
            stack.append((entry.children[idx], f"{path}/children[{idx}]", index, idx))

    root_index = tail_index + 1
    # Children always come after their parent in pre-order.
    for node in reversed(nodes[root_index:]):
        node.subtree_size = 1 + sum(nodes[child].subtree_size for child in node.children)

    logger.debug(
        "Ingested %d causes (max depth %d) below %r",
        nodes[root_index].subtree_size,
        max(node.depth for node in nodes),
        nodes[root_index].name,
    )
    return IngestedTree(nodes=nodes, root_index=root_index, tail_index=tail_index)
