"""Critical Path Method over a task graph.

Forward pass (ES/EF), backward pass (LS/LF), slack, critical path and
critical edges. All values are whole weeks.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional

from ..graph.model import Graph
from ..graph.ordering import GraphNotAcyclicError, require_topological_order

logger = logging.getLogger(__name__)


class CPMAnalysisError(Exception):
    """Analysis refused: the graph cannot be scheduled."""

    pass


@dataclass(frozen=True)
class NodeSchedule:
    """Schedule bounds of one node at the time of an analysis run."""

    id: str
    name: str
    duration: int
    es: int
    ef: int
    ls: int
    lf: int
    slack: int
    is_critical: bool
    is_complete: bool


@dataclass(frozen=True)
class EdgeInfo:
    """A dependency edge and whether it lies on the realized critical chain."""

    from_id: str
    to_id: str
    is_critical: bool


@dataclass(frozen=True)
class CPMResult:
    """Immutable outcome of one analysis run."""

    critical_path: tuple[str, ...]
    project_duration: int
    schedule: Mapping[str, NodeSchedule] = field(default_factory=dict)
    edges: tuple[EdgeInfo, ...] = ()

    @property
    def node_count(self) -> int:
        return len(self.schedule)

    @property
    def critical_count(self) -> int:
        return len(self.critical_path)

    def is_critical(self, node_id: str) -> bool:
        entry = self.schedule.get(node_id)
        return bool(entry and entry.is_critical)

    def slack_of(self, node_id: str) -> Optional[int]:
        entry = self.schedule.get(node_id)
        return entry.slack if entry else None

    def near_critical(self, max_slack: int) -> list[str]:
        """Non-critical node IDs with slack <= max_slack, least slack first."""
        candidates = [e for e in self.schedule.values() if 0 < e.slack <= max_slack]
        return [e.id for e in sorted(candidates, key=lambda e: e.slack)]

    def as_rows(self) -> list[dict]:
        """One dict per node in schedule order, for table and report views."""
        return [
            {
                "id": e.id,
                "name": e.name,
                "duration": e.duration,
                "es": e.es,
                "ef": e.ef,
                "ls": e.ls,
                "lf": e.lf,
                "slack": e.slack,
                "critical": e.is_critical,
                "complete": e.is_complete,
            }
            for e in self.schedule.values()
        ]


def forward_pass(graph: Graph, order: list[str]) -> None:
    """Compute early start / early finish.

    ES = max(EF of predecessors), or 0 without predecessors. EF = ES + duration.
    """
    for node_id in order:
        node = graph.nodes[node_id]
        predecessors = graph.reverse[node_id]

        if predecessors:
            node.es = max(graph.nodes[pred_id].ef for pred_id in predecessors)
        else:
            node.es = 0

        node.ef = node.es + node.duration


def backward_pass(graph: Graph, order: list[str]) -> None:
    """Compute late finish / late start, walking the order backwards.

    LF = min(LS of successors), or the project end without successors.
    LS = LF - duration.
    """
    project_end = project_duration(graph)

    for node_id in reversed(order):
        node = graph.nodes[node_id]
        successors = graph.forward[node_id]

        if successors:
            node.lf = min(graph.nodes[succ_id].ls for succ_id in successors)
        else:
            node.lf = project_end

        node.ls = node.lf - node.duration


def compute_slack(graph: Graph) -> None:
    """Slack = LS - ES; zero slack marks a node critical."""
    for node in graph.nodes.values():
        node.slack = node.ls - node.es
        node.is_critical = node.slack == 0


def find_critical_path(graph: Graph) -> list[str]:
    """Zero-slack node IDs ordered by early start (stable on insertion order)."""
    critical = [node for node in graph.nodes.values() if node.is_critical]
    return [node.id for node in sorted(critical, key=lambda node: node.es)]


def project_duration(graph: Graph) -> int:
    """Latest early finish across all nodes (0 for an empty graph)."""
    return max((node.ef for node in graph.nodes.values()), default=0)


def all_edges(graph: Graph) -> list[EdgeInfo]:
    """Every edge with its critical flag.

    Both ends being critical is not enough: the successor must also start
    exactly when the predecessor finishes.
    """
    edges = []
    for from_id, to_id in graph.edges():
        pred = graph.nodes[from_id]
        succ = graph.nodes[to_id]
        edges.append(
            EdgeInfo(
                from_id=from_id,
                to_id=to_id,
                is_critical=pred.is_critical and succ.is_critical and succ.es == pred.ef,
            )
        )
    return edges


def critical_edges(graph: Graph) -> list[EdgeInfo]:
    return [edge for edge in all_edges(graph) if edge.is_critical]


def _snapshot(graph: Graph) -> Mapping[str, NodeSchedule]:
    return MappingProxyType(
        {
            node_id: NodeSchedule(
                id=node.id,
                name=node.name,
                duration=node.duration,
                es=node.es,
                ef=node.ef,
                ls=node.ls,
                lf=node.lf,
                slack=node.slack,
                is_critical=node.is_critical,
                is_complete=node.is_complete,
            )
            for node_id, node in graph.nodes.items()
        }
    )


def run_cpm(graph: Graph) -> CPMResult:
    """Run the full analysis, updating the graph's nodes in place.

    Args:
        graph: Task graph

    Returns:
        CPMResult snapshot of the run

    Raises:
        CPMAnalysisError: If the graph has a cycle; no node is modified
    """
    try:
        order = require_topological_order(graph)
    except GraphNotAcyclicError as e:
        logger.error(f"Cannot analyze non-acyclic graph: {e}")
        raise CPMAnalysisError(f"Cannot analyze non-acyclic graph: {e}") from e

    graph.reset_schedule()
    forward_pass(graph, order)
    backward_pass(graph, order)
    compute_slack(graph)

    result = CPMResult(
        critical_path=tuple(find_critical_path(graph)),
        project_duration=project_duration(graph),
        schedule=_snapshot(graph),
        edges=tuple(all_edges(graph)),
    )

    logger.debug(
        f"CPM: {result.node_count} nodes, duration {result.project_duration}w, "
        f"{result.critical_count} critical"
    )
    return result
