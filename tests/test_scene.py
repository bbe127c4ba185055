import pytest
from pytest import approx

from fishbone.causes import build_fishbone_graph
from fishbone.errors import ConfigurationError
from fishbone.layout import LayoutSimulator, StaticRenderer, build_fishbone_scene
from fishbone.styles import DEFAULT_STYLES, NodeStyle, StyleConfig


def _deep_tree(levels):
    tree = {"name": f"level{levels}"}
    for level in reversed(range(levels)):
        tree = {"name": f"level{level}", "children": [tree]}
    return tree


def _settled_scene(tree):
    graph = build_fishbone_graph(tree)
    renderer = StaticRenderer((800.0, 600.0))
    simulator = LayoutSimulator(graph, renderer, seed=5)
    simulator.run(max_steps=20)
    return graph, build_fishbone_scene(graph, renderer.last_frame, DEFAULT_STYLES)


def test_scene_skips_tail_and_keeps_every_link():
    graph, scene = _settled_scene(
        {"name": "root", "children": [{"name": "a", "children": [{"name": "a1"}]}]}
    )
    assert [node.name for node in scene.nodes] == ["root", "a", "a1"]
    assert len(scene.edges) == len(graph.links)
    assert [edge.arrow for edge in scene.edges] == [link.is_arrow for link in graph.links]
    assert scene.metadata["root"] == "root"


def test_deep_nodes_clamp_to_last_style():
    graph, scene = _settled_scene(_deep_tree(8))
    deepest = scene.nodes[-1]
    assert deepest.depth == 8
    assert deepest.visual_style["font_color"] == DEFAULT_STYLES.nodes[-1].color
    deepest_edge = max(scene.edges, key=lambda edge: edge.depth)
    assert deepest_edge.visual_style["width"] == DEFAULT_STYLES.lines[-1].stroke_width_px


def test_node_shapes_and_anchors():
    _, scene = _settled_scene(_deep_tree(3))
    by_depth = {node.depth: node for node in scene.nodes}
    assert by_depth[0].visual_style["shape"] == "circle"
    assert by_depth[0].anchor == "start"
    assert by_depth[1].anchor == "middle"
    assert by_depth[2].anchor == "end"
    assert by_depth[2].visual_style["fill"] == "#ffffff"
    assert by_depth[3].visual_style["shape"] == "none"


def test_edges_use_frame_coordinates():
    graph, scene = _settled_scene({"name": "root", "children": [{"name": "a"}]})
    spine = scene.edges[0]
    assert spine.start == approx(graph.position(graph.tail_ref))
    assert spine.end == approx(graph.position(graph.root_ref))


def _styled_scene(tree, node_styles):
    graph = build_fishbone_graph(tree)
    styles = StyleConfig(lines=DEFAULT_STYLES.lines, nodes=node_styles)
    renderer = StaticRenderer((800.0, 600.0), styles)
    simulator = LayoutSimulator(graph, renderer, seed=5)
    simulator.step()
    return build_fishbone_scene(graph, renderer.last_frame, styles)


def test_padding_and_border_radius_reach_the_scene():
    scene = _styled_scene(
        _deep_tree(2),
        (
            NodeStyle(color="white", font_size_em=2.0),
            NodeStyle(color="white", font_size_em=1.5, border_radius="50%", padding=6.0),
            NodeStyle(color="black", font_size_em=1.0, border_radius="8px"),
        ),
    )
    by_depth = {node.depth: node for node in scene.nodes}
    assert by_depth[0].visual_style["padding"] == 4.0
    assert by_depth[1].visual_style["shape"] == "circle"
    assert by_depth[1].visual_style["padding"] == 6.0
    assert by_depth[2].visual_style["shape"] == "rectangle"
    assert by_depth[2].visual_style["corner_radius"] == 8.0
    assert by_depth[2].visual_style["padding"] == 2.0


def test_unreadable_border_radius_rejected():
    with pytest.raises(ConfigurationError):
        _styled_scene(
            {"name": "root"},
            (NodeStyle(color="white", font_size_em=2.0, border_radius="round"),),
        )
