from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Sequence, Tuple

from fishbone.errors import ValidationError


@dataclass(slots=True, frozen=True)
class CauseTree:
    """One entry of a cause-and-effect tree."""

    name: str
    children: Tuple["CauseTree", ...] = ()

    def walk(self) -> Iterator["CauseTree"]:
        """Pre-order traversal starting at this entry."""

        stack = [self]
        while stack:
            entry = stack.pop()
            yield entry
            stack.extend(reversed(entry.children))

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())


def _child_entries(raw: Any) -> Sequence[Any]:
    # Anything that is not a list or tuple is treated as a leaf.
    if isinstance(raw, (list, tuple)):
        return raw
    return ()


def parse_cause_tree(data: Any, path: str = "root") -> CauseTree:
    """Validate ``data`` (``{"name": str, "children": [...]}``) into a :class:`CauseTree`.

    Entries are validated in pre-order and assembled bottom-up, so the depth
    of the tree is not limited by the interpreter's recursion limit.
    """

    if isinstance(data, CauseTree):
        return data

    names: List[str] = []
    child_positions: List[List[int]] = []
    prebuilt: Dict[int, CauseTree] = {}
    stack: List[Tuple[Any, str, int]] = [(data, path, -1)]
    while stack:
        raw, raw_path, parent = stack.pop()
        position = len(names)
        if parent >= 0:
            child_positions[parent].append(position)
        child_positions.append([])
        if isinstance(raw, CauseTree):
            names.append(raw.name)
            prebuilt[position] = raw
            continue
        if not isinstance(raw, Mapping):
            raise ValidationError(
                f"{raw_path}: expected an object with a 'name', got {type(raw).__name__}"
            )
        name = raw.get("name")
        if not isinstance(name, str) or not name:
            raise ValidationError(f"{raw_path}: every cause needs a non-empty 'name'")
        names.append(name)
        children = _child_entries(raw.get("children"))
        for idx in reversed(range(len(children))):
            stack.append((children[idx], f"{raw_path}/children[{idx}]", position))

    # Children always come after their parent, so a reverse sweep builds leaves first.
    built: Dict[int, CauseTree] = dict(prebuilt)
    for position in reversed(range(len(names))):
        if position not in built:
            built[position] = CauseTree(
                name=names[position],
                children=tuple(built[child] for child in child_positions[position]),
            )
    return built[0]


def load_cause_tree(path: Path | str) -> CauseTree:
    resolved = Path(path).expanduser().resolve()
    with resolved.open(encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"{resolved}: invalid JSON ({exc})") from exc
    return parse_cause_tree(data)
