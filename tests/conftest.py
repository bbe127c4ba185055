import copy

import pytest

from fishbone.causes import build_fishbone_graph, load_cause_tree
from fishbone.config import DIAGRAMS_DIR
from fishbone.layout import LayoutSimulator, StaticRenderer


THREE_RIBS = {
    "name": "root",
    "children": [
        {
            "name": "a",
            "children": [
                {"name": "a1"},
                {"name": "a2", "children": [{"name": "a2x"}]},
            ],
        },
        {"name": "b"},
        {"name": "c", "children": [{"name": "c1"}]},
    ],
}


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def three_ribs():
    return copy.deepcopy(THREE_RIBS)


@pytest.fixture
def three_rib_graph(three_ribs):
    return build_fishbone_graph(three_ribs)


@pytest.fixture(scope="session")
def late_delivery_tree():
    return load_cause_tree(DIAGRAMS_DIR / "late_delivery.json")


@pytest.fixture
def renderer():
    return StaticRenderer((800.0, 600.0))


@pytest.fixture
def simulator(three_rib_graph, renderer):
    return LayoutSimulator(three_rib_graph, renderer, seed=7)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cause_chain():
    """Build a single line of causes ``levels`` deep without recursion."""

    def build(levels):
        tree = {"name": f"n{levels - 1}"}
        for level in reversed(range(levels - 1)):
            tree = {"name": f"n{level}", "children": [tree]}
        return tree

    return build
