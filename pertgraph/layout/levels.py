"""Rank assignment: dependency depth of each node, grouped into columns."""

from ..graph.model import Graph
from ..graph.ordering import require_topological_order


def compute_levels(graph: Graph) -> dict[str, int]:
    """Longest-path depth (in edges) of every node from a source node.

    Every edge points from a strictly lower level to a strictly higher one.

    Raises:
        GraphNotAcyclicError: If the graph has a cycle
    """
    order = require_topological_order(graph)
    levels = {node_id: 0 for node_id in graph.nodes}

    for node_id in order:
        predecessors = graph.reverse[node_id]
        if predecessors:
            levels[node_id] = max(levels[pred_id] for pred_id in predecessors) + 1

    return levels


def group_by_level(levels: dict[str, int]) -> list[list[str]]:
    """Bucket node IDs by level, one bucket per level from 0 to the max."""
    if not levels:
        return []

    groups: list[list[str]] = [[] for _ in range(max(levels.values()) + 1)]
    for node_id, level in levels.items():
        groups[level].append(node_id)
    return groups


def order_within_levels(graph: Graph, groups: list[list[str]]) -> list[list[str]]:
    """Order each bucket to reduce edge crossings between adjacent columns.

    Level 0 puts nodes with more successors first. Later levels sort by the
    mean row of each node's predecessors in the already-ordered buckets.
    """
    ordered: list[list[str]] = []
    rows: dict[str, int] = {}

    for level, node_ids in enumerate(groups):
        if level == 0:
            bucket = sorted(node_ids, key=lambda node_id: -len(graph.forward[node_id]))
        else:

            def mean_pred_row(node_id: str) -> float:
                pred_rows = [rows[p] for p in graph.reverse[node_id] if p in rows]
                return sum(pred_rows) / len(pred_rows) if pred_rows else 0.0

            bucket = sorted(node_ids, key=mean_pred_row)

        for row, node_id in enumerate(bucket):
            rows[node_id] = row
        ordered.append(bucket)

    return ordered
