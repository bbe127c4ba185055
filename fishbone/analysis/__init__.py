"""Analysis routines for fishbone graphs."""

from .invariants import GraphCheck, check_graph_invariants, summarize_graph

__all__ = [
    "GraphCheck",
    "check_graph_invariants",
    "summarize_graph",
]
