import pytest

from fishbone.causes import CauseTree, NodeRef, Orientation, ingest_tree
from fishbone.errors import ValidationError


def _by_name(ingested):
    return {node.name: node for node in ingested.nodes if not node.is_tail}


def test_tail_anchor_comes_first(three_ribs):
    ingested = ingest_tree(three_ribs)
    assert ingested.nodes[0].is_tail
    assert ingested.tail_index == 0
    assert [node.name for node in ingested.nodes[1:]] == [
        "root", "a", "a1", "a2", "a2x", "b", "c", "c1",
    ]
    assert ingested.root.connector == NodeRef(ingested.tail_index)


def test_root_subtree_size_counts_every_cause(three_ribs):
    ingested = ingest_tree(three_ribs)
    causes = [node for node in ingested.nodes if not node.is_tail]
    assert ingested.root.subtree_size == len(causes) == 8
    nodes = _by_name(ingested)
    assert nodes["a"].subtree_size == 4
    assert nodes["a2"].subtree_size == 2
    assert nodes["c"].subtree_size == 2


def test_subtree_size_adds_up(late_delivery_tree):
    ingested = ingest_tree(late_delivery_tree)
    for node in ingested.nodes:
        if node.is_tail:
            continue
        children = [ingested.nodes[child] for child in node.children]
        assert node.subtree_size == 1 + sum(child.subtree_size for child in children)


def test_depth_increases_by_one(three_ribs):
    ingested = ingest_tree(three_ribs)
    for node in ingested.nodes:
        if node.parent is not None:
            assert node.depth == ingested.nodes[node.parent].depth + 1
    assert _by_name(ingested)["a2x"].depth == 3


def test_regions_alternate_and_inherit():
    ingested = ingest_tree(
        {
            "name": "root",
            "children": [
                {"name": "a", "children": [{"name": "a1", "children": [{"name": "a11"}]}]},
                {"name": "b", "children": [{"name": "b1"}]},
                {"name": "c"},
            ],
        }
    )
    nodes = _by_name(ingested)
    assert [nodes[name].region for name in ("a", "b", "c")] == [-1, 1, -1]
    assert nodes["a1"].region == -1
    assert nodes["a11"].region == -1
    assert nodes["b1"].region == 1
    assert nodes["root"].region is None
    assert ingested.tail.region is None


def test_orientation_alternates(three_ribs):
    nodes = _by_name(ingest_tree(three_ribs))
    assert nodes["root"].orientation is Orientation.HORIZONTAL
    assert nodes["a"].vertical
    assert nodes["a1"].horizontal
    assert nodes["a2x"].orientation is Orientation.VERTICAL


def test_single_root_tree():
    ingested = ingest_tree({"name": "Only effect"})
    assert len(ingested.nodes) == 2
    assert ingested.tail.is_tail
    assert ingested.root.is_root
    assert ingested.root.subtree_size == 1
    assert ingested.root.children == []


def test_missing_name_fails():
    with pytest.raises(ValidationError):
        ingest_tree({"name": "root", "children": [{"name": "a", "children": [{}]}]})


def test_empty_name_on_prebuilt_tree_fails():
    with pytest.raises(ValidationError):
        ingest_tree(CauseTree(name="root", children=(CauseTree(name=""),)))


def test_deep_chain_ingests(cause_chain):
    ingested = ingest_tree(cause_chain(3000))
    assert len(ingested.nodes) == 3001
    assert ingested.root.subtree_size == 3000
    deepest = ingested.nodes[-1]
    assert deepest.name == "n2999"
    assert deepest.depth == 2999
    assert deepest.subtree_size == 1
    assert ingested.nodes[2].subtree_size == 2999
