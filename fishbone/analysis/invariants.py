from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from fishbone.causes.graph import EndpointRef, FishboneGraph


@dataclass(slots=True)
class GraphCheck:
    check: str
    passed: bool
    severity: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


def summarize_graph(graph: FishboneGraph) -> Dict[str, Any]:
    causes = [node for node in graph.nodes if not node.is_tail]
    return {
        "root": graph.root.name,
        "causes": len(causes),
        "ribs": sum(1 for node in causes if node.depth == 1),
        "max_depth": max((node.depth for node in causes), default=0),
        "connectors": len(graph.connectors),
        "links": len(graph.links),
    }


def check_graph_invariants(graph: FishboneGraph) -> List[GraphCheck]:
    results: List[GraphCheck] = []
    results.append(_check_single_root(graph))
    results.append(_check_depths(graph))
    results.append(_check_subtree_sizes(graph))
    results.append(_check_regions(graph))
    results.extend(_check_child_indices(graph))
    return results


def _check_single_root(graph: FishboneGraph) -> GraphCheck:
    roots = [idx for idx, node in enumerate(graph.nodes) if node.is_root]
    tails = [idx for idx, node in enumerate(graph.nodes) if node.is_tail]
    root = graph.root
    passed = (
        roots == [graph.root_index]
        and tails == [graph.tail_index]
        and root.depth == 0
        and root.parent is None
    )
    return GraphCheck(
        check="single_root",
        passed=passed,
        severity="info" if passed else "error",
        message="Exactly one root with a tail anchor." if passed else "Graph must have exactly one root at depth 0 and one tail anchor.",
        details={"roots": roots, "tails": tails},
    )


def _check_depths(graph: FishboneGraph) -> GraphCheck:
    offenders = [
        node.name
        for node in graph.nodes
        if node.parent is not None and node.depth != graph.nodes[node.parent].depth + 1
    ]
    passed = not offenders
    return GraphCheck(
        check="depth_consistency",
        passed=passed,
        severity="info" if passed else "error",
        message="Every child is one level below its parent." if passed else "Child depth differs from parent depth + 1.",
        details={"offenders": offenders},
    )


def _check_subtree_sizes(graph: FishboneGraph) -> GraphCheck:
    offenders = [
        node.name
        for node in graph.nodes
        if not node.is_tail
        and node.subtree_size != 1 + sum(graph.nodes[child].subtree_size for child in node.children)
    ]
    cause_count = sum(1 for node in graph.nodes if not node.is_tail)
    passed = not offenders and graph.root.subtree_size == cause_count
    return GraphCheck(
        check="subtree_size",
        passed=passed,
        severity="info" if passed else "error",
        message="Subtree sizes add up." if passed else "Subtree size does not equal 1 + sum of children.",
        details={"offenders": offenders, "root_size": graph.root.subtree_size, "causes": cause_count},
    )


def _check_regions(graph: FishboneGraph) -> GraphCheck:
    offenders: List[str] = []
    for index, node in enumerate(graph.nodes):
        if node.is_tail or node.is_root:
            if node.region is not None:
                offenders.append(node.name or "tail")
            continue
        if node.region not in (-1, 1):
            offenders.append(node.name)
            continue
        if node.depth == 1:
            offenders.extend(
                graph.nodes[descendant].name
                for descendant in graph.descendants(index)
                if graph.nodes[descendant].region != node.region
            )
    passed = not offenders
    return GraphCheck(
        check="region_consistency",
        passed=passed,
        severity="info" if passed else "error",
        message="Every rib subtree stays on one side." if passed else "Region changes inside a rib subtree.",
        details={"offenders": offenders},
    )


def _check_child_indices(graph: FishboneGraph) -> List[GraphCheck]:
    groups: Dict[Tuple[EndpointRef, EndpointRef], List[int]] = defaultdict(list)
    for position, connector in enumerate(graph.connectors):
        groups[connector.between].append(position)

    gaps: List[Dict[str, Any]] = []
    duplicates: List[Dict[str, Any]] = []
    for between, members in groups.items():
        connectors = [graph.connectors[position] for position in members]
        indices = [connector.child_idx for connector in connectors]
        max_values = {connector.max_child_idx for connector in connectors}
        positions = max(indices) + 1
        if set(indices) != set(range(positions)) or max_values != {positions}:
            gaps.append(
                {
                    "between": [graph.label_of(ref) for ref in between],
                    "child_idx": indices,
                    "max_child_idx": sorted(max_values),
                }
            )

        # Ribs may share a spine position only when they sit on opposite sides.
        seen: Dict[Tuple[int | None, int], int] = {}
        for connector in connectors:
            key = (graph.nodes[connector.child].region, connector.child_idx)
            seen[key] = seen.get(key, 0) + 1
        repeated = sorted(key for key, count in seen.items() if count > 1)
        if repeated:
            duplicates.append(
                {
                    "between": [graph.label_of(ref) for ref in between],
                    "repeated": repeated,
                }
            )

    contiguous = not gaps
    unique = not duplicates
    return [
        GraphCheck(
            check="child_idx_contiguous",
            passed=contiguous,
            severity="info" if contiguous else "error",
            message="Child indices cover 0 to max_child_idx - 1 in every fan-out." if contiguous else "Fan-out child indices have gaps or a stale max_child_idx.",
            details={"groups": len(groups), "offenders": gaps},
        ),
        GraphCheck(
            check="child_idx_unique_per_side",
            passed=unique,
            severity="info" if unique else "error",
            message="No two connectors on the same side share a child index." if unique else "Connectors on the same side share a child index.",
            details={"offenders": duplicates},
        ),
    ]
