"""In-memory dependency graph built from task records."""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ..tasks.models import Task
from .duration import resolve_duration

logger = logging.getLogger(__name__)

SCOPES = ("all", "milestones")


@dataclass
class Node:
    """A task in the graph with its schedule bounds (weeks)."""

    id: str
    name: str
    duration: int
    es: int = 0
    ef: int = 0
    ls: int = 0
    lf: int = 0
    slack: int = 0
    is_critical: bool = False
    is_complete: bool = False
    is_milestone: bool = False


class Graph:
    """Directed task graph with forward and reverse adjacency.

    Edges point predecessor -> successor. ``forward`` and ``reverse`` are only
    changed through ``add_edge`` / ``remove_edge``, which keeps them mirrored.
    """

    def __init__(self):
        self.nodes: dict[str, Node] = {}
        self.forward: dict[str, set[str]] = {}
        self.reverse: dict[str, set[str]] = {}
        self._edge_order: list[tuple[str, str]] = []

    def add_node(self, node: Node) -> None:
        """Add a node with empty adjacency. Re-adding an id replaces the record."""
        self.nodes[node.id] = node
        self.forward.setdefault(node.id, set())
        self.reverse.setdefault(node.id, set())

    def add_edge(self, pred_id: str, succ_id: str) -> bool:
        """Add pred -> succ.

        Returns:
            False for a self-loop, a duplicate, or an unknown endpoint
        """
        if pred_id == succ_id:
            return False
        if pred_id not in self.nodes or succ_id not in self.nodes:
            return False
        if succ_id in self.forward[pred_id]:
            return False

        self.forward[pred_id].add(succ_id)
        self.reverse[succ_id].add(pred_id)
        self._edge_order.append((pred_id, succ_id))
        return True

    def remove_edge(self, pred_id: str, succ_id: str) -> bool:
        """Remove pred -> succ. Returns False if the edge is absent."""
        if not self.has_edge(pred_id, succ_id):
            return False

        self.forward[pred_id].discard(succ_id)
        self.reverse[succ_id].discard(pred_id)
        self._edge_order.remove((pred_id, succ_id))
        return True

    def has_edge(self, pred_id: str, succ_id: str) -> bool:
        return succ_id in self.forward.get(pred_id, ())

    def predecessors(self, node_id: str) -> set[str]:
        return self.reverse.get(node_id, set())

    def successors(self, node_id: str) -> set[str]:
        return self.forward.get(node_id, set())

    def start_nodes(self) -> list[str]:
        """Node IDs without predecessors, in insertion order."""
        return [node_id for node_id in self.nodes if not self.reverse[node_id]]

    def end_nodes(self) -> list[str]:
        """Node IDs without successors, in insertion order."""
        return [node_id for node_id in self.nodes if not self.forward[node_id]]

    def edges(self) -> list[tuple[str, str]]:
        """All edges as (pred, succ), in the order they were added."""
        return list(self._edge_order)

    @property
    def edge_count(self) -> int:
        return len(self._edge_order)

    def reset_schedule(self) -> None:
        """Zero all schedule values before an analysis run."""
        for node in self.nodes.values():
            node.es = node.ef = node.ls = node.lf = node.slack = 0
            node.is_critical = False

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)

    def __repr__(self) -> str:
        return f"Graph({len(self.nodes)} nodes, {self.edge_count} edges)"


def build_graph(tasks: Iterable[Task]) -> Graph:
    """Build a graph from a task list.

    Dependencies on tasks outside ``tasks`` are dropped, which lets a filtered
    subset (e.g. milestones only) be analyzed on its own.

    Args:
        tasks: Tasks to include

    Returns:
        Fresh Graph; nothing in ``tasks`` is modified
    """
    tasks = list(tasks)
    graph = Graph()

    for task in tasks:
        graph.add_node(
            Node(
                id=task.id,
                name=task.name,
                duration=resolve_duration(task),
                is_complete=task.complete,
                is_milestone=task.is_milestone,
            )
        )

    dropped = 0
    for task in tasks:
        for pred_id in task.all_dependencies():
            if pred_id not in graph.nodes:
                dropped += 1
                continue
            graph.add_edge(pred_id, task.id)

    if dropped:
        logger.debug(f"Dropped {dropped} dependencies outside the graph scope")

    return graph


def validate_scope(scope: str) -> str:
    """Return scope unchanged, or raise ValueError if it is not one of SCOPES."""
    if scope not in SCOPES:
        raise ValueError(f"Unknown scope: {scope!r} (expected one of {', '.join(SCOPES)})")
    return scope


def select_tasks(tasks: list[Task], scope: str = "all") -> list[Task]:
    """Pick the tasks that feed the graph for a scope.

    Args:
        tasks: Full task list
        scope: "all" or "milestones"

    Returns:
        The list itself for "all"; milestones ordered by deadline otherwise

    Raises:
        ValueError: On an unknown scope
    """
    if validate_scope(scope) == "all":
        return tasks
    milestones = [task for task in tasks if task.is_milestone]
    return sorted(milestones, key=lambda task: task.milestone_deadline or "9999-12-31")
