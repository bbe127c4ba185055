from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Callable, Sequence

from fishbone.analysis import GraphCheck, check_graph_invariants, summarize_graph
from fishbone.causes import FishboneGraph, build_fishbone_graph, load_cause_tree
from fishbone.config import DEFAULT_SETTINGS, DIAGRAMS_DIR, LayoutSettings, load_layout_settings
from fishbone.errors import FishboneError
from fishbone.layout import LayoutSimulator, StaticRenderer
from fishbone.logging_config import setup_logging
from fishbone.styles import DEFAULT_STYLES, StyleConfig, load_style_config

logger = logging.getLogger(__name__)


def list_diagrams(diagrams_root: Path) -> dict[str, list[Path]]:
    """Return a mapping of diagram names to JSON files beneath ``diagrams_root``.

    A diagram is either a top-level ``*.json`` file (named by its stem) or a
    directory holding one or more JSON files (named by the directory).
    """

    if not diagrams_root.exists():
        return {}

    mapping: dict[str, list[Path]] = {}
    for entry in sorted(diagrams_root.iterdir(), key=lambda p: p.name.lower()):
        if entry.is_file() and entry.suffix.lower() == ".json":
            mapping.setdefault(entry.stem, []).append(entry)
        elif entry.is_dir():
            files = _list_directory_diagrams(entry)
            if files:
                mapping.setdefault(entry.name, []).extend(files)
    return mapping


def prompt_choice(
    prompt: str,
    options: Sequence[str],
    input_fn: Callable[[str], str] = input,
    print_fn: Callable[[str], None] = print,
) -> int:
    """Prompt the user to choose from ``options`` and return the selected index."""

    if not options:
        raise ValueError("No options available for selection.")
    if len(options) == 1:
        return 0

    while True:
        print_fn("")
        print_fn(prompt)
        for idx, option in enumerate(options, start=1):
            print_fn(f"  {idx}. {option}")
        response = input_fn("Enter selection number: ").strip()
        try:
            index = int(response)
        except ValueError:
            print_fn("Please enter a valid integer selection.")
            continue
        if 1 <= index <= len(options):
            return index - 1
        print_fn(f"Selection must be between 1 and {len(options)}.")


def _list_directory_diagrams(directory: Path) -> list[Path]:
    return sorted(
        (
            path
            for path in directory.iterdir()
            if path.is_file() and path.suffix.lower() == ".json"
        ),
        key=lambda p: p.name.lower(),
    )


def resolve_diagram_path(
    target: str | None,
    diagrams_root: Path,
    *,
    input_fn: Callable[[str], str] = input,
    print_fn: Callable[[str], None] = print,
) -> Path:
    """Resolve a cause-tree JSON path from an optional name or direct path."""

    diagrams = list_diagrams(diagrams_root)
    name_lookup = {name.lower(): name for name in diagrams}

    if target:
        candidate = Path(target).expanduser()
        if candidate.is_file():
            return candidate.resolve()
        if candidate.is_dir():
            files = _list_directory_diagrams(candidate)
            if not files:
                raise FileNotFoundError(f"No diagram files found under {candidate}")
            index = prompt_choice(
                f"Select diagram inside {candidate}:",
                [path.name for path in files],
                input_fn=input_fn,
                print_fn=print_fn,
            )
            return files[index].resolve()
        key = Path(target).stem.lower() if target.lower().endswith(".json") else target.lower()
        if key not in name_lookup:
            raise FileNotFoundError(f"Diagram {target!r} not found under {diagrams_root}.")
        diagram_name = name_lookup[key]
        candidates = diagrams[diagram_name]
    else:
        if not diagrams:
            raise FileNotFoundError(f"No diagrams found under {diagrams_root}.")
        names = list(diagrams.keys())
        index = prompt_choice(
            "Select a diagram:",
            names,
            input_fn=input_fn,
            print_fn=print_fn,
        )
        diagram_name = names[index]
        candidates = diagrams[diagram_name]

    index = prompt_choice(
        f"Select a file for {diagram_name}:",
        [path.name for path in candidates],
        input_fn=input_fn,
        print_fn=print_fn,
    )
    return candidates[index].resolve()


def add_layout_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--styles", type=Path, default=None, help="JSON file with line and node styles.")
    parser.add_argument("--settings", type=Path, default=None, help="JSON file with layout settings.")
    parser.add_argument("--width", type=float, default=None, help="Viewport width in pixels.")
    parser.add_argument("--height", type=float, default=None, help="Viewport height in pixels.")
    parser.add_argument("--margin", type=float, default=None, help="Margin around the diagram in pixels.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")


def layout_options(args: argparse.Namespace) -> tuple[StyleConfig, LayoutSettings]:
    styles = load_style_config(args.styles) if args.styles else DEFAULT_STYLES
    settings = load_layout_settings(args.settings) if args.settings else DEFAULT_SETTINGS
    viewport = None
    if args.width is not None or args.height is not None:
        width, height = settings.viewport
        viewport = (
            args.width if args.width is not None else width,
            args.height if args.height is not None else height,
        )
    settings = settings.with_overrides(viewport=viewport, margin=args.margin)
    return styles, settings


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Lay out and display a fishbone (cause-and-effect) diagram."
    )
    parser.add_argument(
        "target",
        nargs="?",
        help=(
            "Diagram name (e.g. 'late_delivery') or path to a cause-tree JSON file. "
            "If omitted, an interactive selector will be shown."
        ),
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional PostScript file path to export the settled rendering.",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run the layout without a window and print the final positions.",
    )
    add_layout_arguments(parser)
    return parser.parse_args(argv)


def _print_invariant_summary(graph: FishboneGraph, checks: list[GraphCheck]) -> None:
    use_color = sys.stdout.isatty()

    def colorize(text: str, code: str) -> str:
        if not use_color:
            return text
        reset = "\033[0m"
        return f"{code}{text}{reset}"

    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"

    summary = summarize_graph(graph)
    print(
        f"  {summary['root']}: {summary['causes']} causes, {summary['ribs']} ribs, "
        f"depth {summary['max_depth']}, {summary['connectors']} connectors, {summary['links']} links"
    )

    stats = {"ok": 0, "warn": 0, "fail": 0}
    for check in checks:
        if check.passed:
            status_label = "OK"
            status_color = GREEN
            stats["ok"] += 1
        elif check.severity == "warning":
            status_label = "WARN"
            status_color = YELLOW
            stats["warn"] += 1
        else:
            status_label = "FAIL"
            status_color = RED
            stats["fail"] += 1

        formatted = colorize(f"[{status_label}]", status_color)
        print(f"    {formatted} {check.check}: {check.message}")
        if not check.passed:
            for key, value in check.details.items():
                print(f"      - {key}: {value}")

    summary_parts = []
    if stats["ok"]:
        summary_parts.append(colorize(f"{stats['ok']} ok", GREEN))
    if stats["warn"]:
        summary_parts.append(colorize(f"{stats['warn']} warnings", YELLOW))
    if stats["fail"]:
        summary_parts.append(colorize(f"{stats['fail']} failures", RED))
    if not summary_parts:
        summary_parts.append("no checks run")

    print("  Summary: " + ", ".join(summary_parts))


def _print_positions(graph: FishboneGraph) -> None:
    for index, node in enumerate(graph.nodes):
        x, y = graph.position(graph.ref_for_body(index))
        label = "(tail)" if node.is_tail else node.name
        print(f"  {'  ' * node.depth}{label}: ({x:.1f}, {y:.1f})")


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    try:
        diagram_path = resolve_diagram_path(args.target, DIAGRAMS_DIR)
        styles, settings = layout_options(args)
        tree = load_cause_tree(diagram_path)
        graph = build_fishbone_graph(tree)
    except (FileNotFoundError, FishboneError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print("Graph checks:")
    _print_invariant_summary(graph, check_graph_invariants(graph))
    print("")

    if args.headless:
        renderer = StaticRenderer(settings.viewport, styles, base_font_px=settings.base_font_px)
        simulator = LayoutSimulator(graph, renderer, settings=settings)
        try:
            steps = simulator.run()
        except FishboneError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        print(f"Positions after {steps} steps:")
        _print_positions(graph)
        return

    from fishbone.viewers import TkFishboneViewer

    viewer = TkFishboneViewer(
        graph,
        title=f"{graph.root.name} fishbone",
        styles=styles,
        settings=settings,
    )
    viewer.run(output=args.output)


if __name__ == "__main__":
    main()
