from fishbone.analysis import check_graph_invariants, summarize_graph
from fishbone.causes import build_fishbone_graph


def _checks(graph):
    return {check.check: check for check in check_graph_invariants(graph)}


def test_summary_counts(late_delivery_tree):
    summary = summarize_graph(build_fishbone_graph(late_delivery_tree))
    assert summary == {
        "root": "Late delivery",
        "causes": 14,
        "ribs": 4,
        "max_depth": 3,
        "connectors": 13,
        "links": 27,
    }


def test_gap_in_child_indices_detected(three_rib_graph):
    connector = three_rib_graph.connectors[-1]
    connector.child_idx = 5
    checks = _checks(three_rib_graph)
    assert not checks["child_idx_contiguous"].passed
    assert checks["child_idx_contiguous"].severity == "error"


def test_duplicate_child_index_on_same_side_detected(three_rib_graph):
    graph = three_rib_graph
    a_ref = graph.ref_by_name("a")
    for connector in graph.connectors:
        if connector.between[0] == a_ref:
            connector.child_idx = 0
            connector.max_child_idx = 1
    checks = _checks(graph)
    assert checks["child_idx_contiguous"].passed
    assert not checks["child_idx_unique_per_side"].passed


def test_region_flip_inside_rib_detected(three_rib_graph):
    three_rib_graph.node_by_name("a2x").region = 1
    check = _checks(three_rib_graph)["region_consistency"]
    assert not check.passed
    assert "a2x" in check.details["offenders"]


def test_subtree_size_mismatch_detected(three_rib_graph):
    three_rib_graph.node_by_name("c").subtree_size = 5
    assert not _checks(three_rib_graph)["subtree_size"].passed


def test_depth_mismatch_detected(three_rib_graph):
    three_rib_graph.node_by_name("a1").depth = 4
    assert not _checks(three_rib_graph)["depth_consistency"].passed
