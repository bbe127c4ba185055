import json

import pytest

from fishbone.causes import CauseTree, load_cause_tree, parse_cause_tree
from fishbone.errors import ValidationError


def test_loads_late_delivery(late_delivery_tree):
    assert late_delivery_tree.name == "Late delivery"
    assert [child.name for child in late_delivery_tree.children] == [
        "People",
        "Process",
        "Equipment",
        "Environment",
    ]
    assert len(late_delivery_tree) == 14


def test_walk_is_pre_order():
    tree = parse_cause_tree(
        {"name": "r", "children": [{"name": "a", "children": [{"name": "a1"}]}, {"name": "b"}]}
    )
    assert [entry.name for entry in tree.walk()] == ["r", "a", "a1", "b"]


def test_missing_name_reports_path():
    with pytest.raises(ValidationError, match=r"root/children\[1\]"):
        parse_cause_tree({"name": "r", "children": [{"name": "a"}, {"children": []}]})


def test_non_sequence_children_is_leaf():
    tree = parse_cause_tree({"name": "r", "children": "not a list"})
    assert tree == CauseTree(name="r")
    assert parse_cause_tree({"name": "r", "children": None}).children == ()


def test_non_object_entry_rejected():
    with pytest.raises(ValidationError):
        parse_cause_tree(["r"])


def test_invalid_json_raises_validation_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ValidationError):
        load_cause_tree(path)


def test_load_from_file(tmp_path):
    path = tmp_path / "tree.json"
    path.write_text(json.dumps({"name": "Effect", "children": [{"name": "Cause"}]}))
    tree = load_cause_tree(path)
    assert tree == CauseTree(name="Effect", children=(CauseTree(name="Cause"),))


def test_deep_chain_parses(cause_chain):
    tree = parse_cause_tree(cause_chain(3000))
    names = [entry.name for entry in tree.walk()]
    assert len(names) == 3000
    assert names[0] == "n0"
    assert names[-1] == "n2999"


def test_missing_name_deep_in_chain_reports_path(cause_chain):
    tree = cause_chain(5)
    tree["children"][0]["children"][0]["name"] = ""
    with pytest.raises(ValidationError, match=r"root/children\[0\]/children\[0\]:"):
        parse_cause_tree(tree)
