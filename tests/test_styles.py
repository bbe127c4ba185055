import json

import pytest

from fishbone.errors import ConfigurationError
from fishbone.styles import (
    DEFAULT_STYLES,
    LineStyle,
    NodeStyle,
    StyleConfig,
    load_style_config,
    select,
)


TABLE = ("first", "second", "third")


def test_select_defaults_to_first_entry():
    assert select(None, TABLE) == "first"
    assert select(-1, TABLE) == "first"
    assert select(0, TABLE) == "first"


def test_select_clamps_to_last_entry():
    assert select(2, TABLE) == "third"
    assert select(10**9, TABLE) == "third"


def test_select_is_monotonic_and_bounded():
    positions = [TABLE.index(select(index, TABLE)) for index in range(-5, 20)]
    assert positions == sorted(positions)
    assert all(0 <= position <= len(TABLE) - 1 for position in positions)


def test_select_rejects_empty_table():
    with pytest.raises(ConfigurationError):
        select(0, ())


def test_style_config_requires_entries():
    with pytest.raises(ConfigurationError):
        StyleConfig(lines=(), nodes=DEFAULT_STYLES.nodes)
    with pytest.raises(ConfigurationError):
        StyleConfig(lines=DEFAULT_STYLES.lines, nodes=())


def test_default_styles_lookup_by_depth():
    assert DEFAULT_STYLES.line_for(0).stroke_width_px == 2.0
    assert DEFAULT_STYLES.line_for(7).stroke_width_px == 0.5
    assert DEFAULT_STYLES.node_for(0).font_size_em == 2.0
    assert DEFAULT_STYLES.node_for(12).color == "#aaa"


def test_load_style_config_accepts_camel_case(tmp_path):
    path = tmp_path / "styles.json"
    path.write_text(
        json.dumps(
            {
                "lines": [{"color": "#333", "strokeWidthPx": 3}],
                "nodes": [{"color": "black", "fontSizeEm": 1.2, "backgroundColor": "#eee"}],
            }
        )
    )
    styles = load_style_config(path)
    assert styles.lines == (LineStyle(color="#333", stroke_width_px=3),)
    assert styles.nodes == (NodeStyle(color="black", font_size_em=1.2, background_color="#eee"),)
    assert styles.line_for(4).color == "#333"


def test_load_style_config_keeps_defaults_for_missing_table(tmp_path):
    path = tmp_path / "styles.json"
    path.write_text(json.dumps({"lines": [{"color": "red", "stroke_width_px": 1}]}))
    styles = load_style_config(path)
    assert styles.nodes == DEFAULT_STYLES.nodes


def test_load_style_config_rejects_empty_table(tmp_path):
    path = tmp_path / "styles.json"
    path.write_text(json.dumps({"nodes": []}))
    with pytest.raises(ConfigurationError):
        load_style_config(path)


def test_load_style_config_rejects_unknown_key(tmp_path):
    path = tmp_path / "styles.json"
    path.write_text(json.dumps({"lines": [{"colour": "red", "strokeWidthPx": 1}]}))
    with pytest.raises(ConfigurationError):
        load_style_config(path)


def test_load_style_config_rejects_malformed_json(tmp_path):
    path = tmp_path / "styles.json"
    path.write_text('{"lines": [')
    with pytest.raises(ConfigurationError, match="invalid JSON"):
        load_style_config(path)
