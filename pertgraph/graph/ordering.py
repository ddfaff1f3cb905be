"""Topological ordering (Kahn's algorithm)."""

import logging
from collections import deque

from .model import Graph

logger = logging.getLogger(__name__)


class GraphNotAcyclicError(Exception):
    """The graph has a cycle, so no total order exists."""

    def __init__(self, remaining: set[str]):
        self.remaining = set(remaining)
        shown = ", ".join(sorted(self.remaining)[:20])
        more = " ..." if len(self.remaining) > 20 else ""
        super().__init__(
            f"Dependency graph is not acyclic: {len(self.remaining)} tasks on or behind a cycle: {shown}{more}"
        )


def kahn_order(graph: Graph) -> tuple[list[str], set[str]]:
    """Order nodes so every predecessor precedes its successors.

    Zero in-degree nodes are seeded in insertion order and processed FIFO.

    Returns:
        order, nodes that could not be ordered (non-empty only on a cycle)
    """
    position = {node_id: index for index, node_id in enumerate(graph.nodes)}
    in_degree = {node_id: len(graph.reverse[node_id]) for node_id in graph.nodes}
    queue = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
    order: list[str] = []

    while queue:
        node_id = queue.popleft()
        order.append(node_id)

        for succ_id in sorted(graph.forward[node_id], key=position.__getitem__):
            in_degree[succ_id] -= 1
            if in_degree[succ_id] == 0:
                queue.append(succ_id)

    remaining = set(graph.nodes) - set(order)
    return order, remaining


def topological_sort(graph: Graph) -> list[str]:
    """Return a topological order of the graph.

    A result shorter than ``len(graph)`` means the graph has a cycle; use
    ``require_topological_order`` where a total order is mandatory.
    """
    order, remaining = kahn_order(graph)
    if remaining:
        logger.warning(f"Graph contains a cycle - topological sort incomplete ({len(remaining)} tasks left)")
    return order


def require_topological_order(graph: Graph) -> list[str]:
    """Return a total topological order.

    Raises:
        GraphNotAcyclicError: If the graph has a cycle
    """
    order, remaining = kahn_order(graph)
    if remaining:
        raise GraphNotAcyclicError(remaining)
    return order


def is_acyclic(graph: Graph) -> bool:
    _, remaining = kahn_order(graph)
    return not remaining
