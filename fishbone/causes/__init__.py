"""Utilities for loading cause trees and turning them into fishbone graphs."""

from .graph import (
    Connector,
    ConnectorRef,
    EndpointRef,
    FishboneGraph,
    Link,
    Node,
    NodeRef,
    Orientation,
)
from .loader import CauseTree, load_cause_tree, parse_cause_tree
from .ingest import IngestedTree, ingest_tree
from .connectors import build_fishbone_graph

__all__ = [
    "CauseTree",
    "Connector",
    "ConnectorRef",
    "EndpointRef",
    "FishboneGraph",
    "IngestedTree",
    "Link",
    "Node",
    "NodeRef",
    "Orientation",
    "build_fishbone_graph",
    "ingest_tree",
    "load_cause_tree",
    "parse_cause_tree",
]
