"""Mutable presentation cache for diagram views.

The cache mirrors what a view currently shows. Structural edits can be
patched in right away; schedule values and critical styling only come from
a fresh ``CPMResult``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..cpm.analyzer import CPMResult
from ..graph.model import Graph

logger = logging.getLogger(__name__)


def edge_key(from_id: str, to_id: str) -> str:
    return f"{from_id}->{to_id}"


@dataclass
class NodeView:
    """Display state of one node."""

    id: str
    label: str
    is_critical: bool = False
    is_complete: bool = False


@dataclass
class EdgeView:
    """Display state of one edge."""

    from_id: str
    to_id: str
    is_critical: bool = False


def node_label(name: str, duration: int, es: int, ef: int, slack: int) -> str:
    return f"{name}\n{duration}w | ES {es} EF {ef} | slack {slack}"


class PresentationCache:
    """Nodes and edges as last shown, keyed by node ID and ``from->to``."""

    def __init__(self):
        self.nodes: dict[str, NodeView] = {}
        self.edges: dict[str, EdgeView] = {}
        self.stale = False

    def clear(self) -> None:
        self.nodes.clear()
        self.edges.clear()
        self.stale = False

    def sync(self, graph: Graph, result: Optional[CPMResult]) -> None:
        """Rebuild the cache from a graph and its analysis."""
        self.clear()
        for node_id, node in graph.nodes.items():
            self.nodes[node_id] = NodeView(id=node_id, label=node.name, is_complete=node.is_complete)
        for from_id, to_id in graph.edges():
            self.edges[edge_key(from_id, to_id)] = EdgeView(from_id=from_id, to_id=to_id)
        if result is not None:
            self.apply_analysis(result)

    def add_edge(self, from_id: str, to_id: str) -> bool:
        """Patch in one edge. No-op if it is already shown."""
        key = edge_key(from_id, to_id)
        if key in self.edges:
            return False
        self.edges[key] = EdgeView(from_id=from_id, to_id=to_id)
        self.stale = True
        return True

    def remove_edge(self, from_id: str, to_id: str) -> bool:
        """Patch out one edge. No-op if it is not shown."""
        if self.edges.pop(edge_key(from_id, to_id), None) is None:
            return False
        self.stale = True
        return True

    def apply_analysis(self, result: CPMResult) -> None:
        """Refresh labels and critical flags from a fresh analysis."""
        for node_id, entry in result.schedule.items():
            view = self.nodes.get(node_id)
            if view is None:
                continue
            view.label = node_label(entry.name, entry.duration, entry.es, entry.ef, entry.slack)
            view.is_critical = entry.is_critical
            view.is_complete = entry.is_complete

        critical = {edge_key(e.from_id, e.to_id) for e in result.edges if e.is_critical}
        for key, view in self.edges.items():
            view.is_critical = key in critical

        self.stale = False

    def critical_edge_keys(self) -> list[str]:
        return [key for key, view in self.edges.items() if view.is_critical]
