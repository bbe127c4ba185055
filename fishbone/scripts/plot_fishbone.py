"""Static matplotlib rendering of a settled fishbone layout.

Usage examples:
- python -m fishbone.scripts.plot_fishbone late_delivery
- python -m fishbone.scripts.plot_fishbone diagrams/late_delivery.json --output fishbone.png
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Sequence

import matplotlib.pyplot as plt
import networkx as nx

from fishbone.causes import ConnectorRef, FishboneGraph, build_fishbone_graph, load_cause_tree
from fishbone.config import DIAGRAMS_DIR, LayoutSettings
from fishbone.errors import FishboneError
from fishbone.layout import LayoutSimulator, StaticRenderer
from fishbone.logging_config import setup_logging
from fishbone.scripts.show_fishbone import add_layout_arguments, layout_options, resolve_diagram_path
from fishbone.styles import StyleConfig


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Plot a fishbone diagram with matplotlib."
    )
    parser.add_argument(
        "target",
        nargs="?",
        help="Diagram name or path to a cause-tree JSON file.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Image file to write instead of opening a window.",
    )
    add_layout_arguments(parser)
    return parser.parse_args(argv)


def plot_fishbone(
    graph: FishboneGraph,
    styles: StyleConfig,
    settings: LayoutSettings,
    title: str,
):
    digraph = graph.to_networkx()
    # Screen coordinates grow downward; flip y for matplotlib.
    width, height = settings.viewport
    positions = {
        ref: (x, height - y) for ref, (x, y) in graph.positions_by_ref().items()
    }
    causes = [ref for ref, data in digraph.nodes(data=True) if not data["connector"]]
    labels = {
        ref: digraph.nodes[ref]["label"]
        for ref in causes
        if not graph.nodes[ref.index].is_tail
    }

    fig, ax = plt.subplots(figsize=(width / 100.0, height / 100.0))
    edge_list = list(digraph.edges(data=True))
    nx.draw_networkx_edges(
        digraph,
        pos=positions,
        edgelist=[(u, v) for u, v, _ in edge_list],
        edge_color=[styles.line_for(data["depth"]).color for _, _, data in edge_list],
        width=[styles.line_for(data["depth"]).stroke_width_px for _, _, data in edge_list],
        arrows=False,
        ax=ax,
    )
    arrow_heads = [
        positions[v] for u, v, data in edge_list if data["arrow"] and isinstance(v, ConnectorRef)
    ]
    if arrow_heads:
        xs, ys = zip(*arrow_heads)
        ax.scatter(xs, ys, s=40, facecolors="white", edgecolors="#ffbd00", linewidths=2, zorder=3)

    for ref, label in labels.items():
        node = graph.nodes[ref.index]
        style = styles.node_for(node.depth)
        x, y = positions[ref]
        if node.is_root:
            ha = "left"
        elif node.horizontal:
            ha = "right"
        else:
            ha = "center"
        ax.text(
            x,
            y,
            label,
            ha=ha,
            va="center",
            fontsize=style.font_size_em * 10,
            color=style.color,
            bbox={
                "facecolor": style.background_color or "#00b3f6",
                "edgecolor": "none",
                "pad": style.padding if style.padding is not None else 2,
            },
        )

    ax.set_xlim(0, width)
    ax.set_ylim(0, height)
    ax.set_title(title)
    ax.axis("off")
    fig.tight_layout()
    return fig


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    try:
        diagram_path = resolve_diagram_path(args.target, DIAGRAMS_DIR)
        styles, settings = layout_options(args)
        graph = build_fishbone_graph(load_cause_tree(diagram_path))
        renderer = StaticRenderer(settings.viewport, styles, base_font_px=settings.base_font_px)
        LayoutSimulator(graph, renderer, settings=settings).run()
    except (FileNotFoundError, FishboneError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    fig = plot_fishbone(graph, styles, settings, title=graph.root.name)
    if args.output:
        fig.savefig(args.output, dpi=150)
        print(f"Saved plot to {args.output}")
    else:
        plt.show()


if __name__ == "__main__":
    main()
