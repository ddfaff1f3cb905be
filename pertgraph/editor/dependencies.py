"""Cycle-safe edits to task dependency lists.

Every mutating function either applies its whole change or none of it and
returns whether it did. A rejected edit is an expected outcome, not an error.
"""

import logging
from collections import defaultdict
from typing import Optional

from ..graph.model import Graph
from ..tasks.models import Task

logger = logging.getLogger(__name__)


def _find_task(tasks: list[Task], task_id: str) -> Optional[Task]:
    for task in tasks:
        if task.id == task_id:
            return task
    return None


def _reachable(successors_of, start_id: str, target_id: str) -> bool:
    """Iterative DFS from start_id; True if target_id is reached."""
    visited: set[str] = set()
    stack = [start_id]

    while stack:
        current = stack.pop()
        if current == target_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        for succ_id in successors_of(current):
            if succ_id not in visited:
                stack.append(succ_id)

    return False


def cycle_check(graph: Graph, from_id: str, to_id: str) -> bool:
    """Would adding from_id -> to_id to the graph close a cycle?

    True for a self-loop, or when from_id is already reachable from to_id.
    """
    if from_id == to_id:
        return True
    return _reachable(graph.successors, to_id, from_id)


def would_create_cycle(tasks: list[Task], from_id: str, to_id: str) -> bool:
    """Same check as ``cycle_check``, computed from the task data itself."""
    if from_id == to_id:
        return True

    successors: dict[str, list[str]] = defaultdict(list)
    for task in tasks:
        for dep_id in task.all_dependencies():
            successors[dep_id].append(task.id)

    return _reachable(lambda node_id: successors.get(node_id, ()), to_id, from_id)


def edge_exists(graph: Graph, from_id: str, to_id: str) -> bool:
    return graph.has_edge(from_id, to_id)


def add_dependency(tasks: list[Task], pred_id: str, succ_id: str) -> bool:
    """Make pred_id a predecessor of succ_id.

    Rejected when either task is unknown, the dependency already exists, or
    the edge would create a cycle (self-loops included).

    Returns:
        True if the dependency was added
    """
    successor = _find_task(tasks, succ_id)
    if successor is None:
        logger.debug(f"Rejected {pred_id} -> {succ_id}: unknown task {succ_id}")
        return False
    if _find_task(tasks, pred_id) is None:
        logger.debug(f"Rejected {pred_id} -> {succ_id}: unknown task {pred_id}")
        return False
    if pred_id in successor.all_dependencies():
        logger.debug(f"Rejected {pred_id} -> {succ_id}: dependency exists")
        return False
    if would_create_cycle(tasks, pred_id, succ_id):
        logger.debug(f"Rejected {pred_id} -> {succ_id}: would create a cycle")
        return False

    successor.dependencies.append(pred_id)
    logger.info(f"Added dependency {pred_id} -> {succ_id}")
    return True


def _strip_dependency(task: Task, pred_id: str) -> bool:
    """Drop every occurrence of pred_id from both of task's dependency lists."""
    found = False
    for dep_list in (task.dependencies, task.milestone_dependencies):
        if pred_id in dep_list:
            dep_list[:] = [dep_id for dep_id in dep_list if dep_id != pred_id]
            found = True
    return found


def remove_dependency(tasks: list[Task], pred_id: str, succ_id: str) -> bool:
    """Drop pred_id from succ_id's dependencies.

    Every occurrence goes, in both lists, so no edge survives the removal.

    Returns:
        True if the dependency was removed
    """
    successor = _find_task(tasks, succ_id)
    if successor is None:
        logger.debug(f"Cannot remove {pred_id} -> {succ_id}: unknown task {succ_id}")
        return False

    if not _strip_dependency(successor, pred_id):
        logger.debug(f"Cannot remove {pred_id} -> {succ_id}: no such dependency")
        return False

    logger.info(f"Removed dependency {pred_id} -> {succ_id}")
    return True


def reverse_dependency(tasks: list[Task], from_id: str, to_id: str) -> bool:
    """Replace from_id -> to_id with to_id -> from_id.

    If the reversed edge is rejected, both of to_id's dependency lists are
    restored exactly and the task list is left unchanged.

    Returns:
        True if the dependency was reversed
    """
    successor = _find_task(tasks, to_id)
    if successor is None:
        return False

    saved = (list(successor.dependencies), list(successor.milestone_dependencies))
    if not _strip_dependency(successor, from_id):
        logger.debug(f"Cannot reverse {from_id} -> {to_id}: no such dependency")
        return False

    if add_dependency(tasks, to_id, from_id):
        logger.info(f"Reversed dependency {from_id} -> {to_id}")
        return True

    successor.dependencies[:], successor.milestone_dependencies[:] = saved
    logger.debug(f"Cannot reverse {from_id} -> {to_id}: reversed edge rejected, restored original")
    return False


def validate_integrity(tasks: list[Task]) -> int:
    """Prune dependency entries that reference unknown tasks.

    Self-references and repeated entries are pruned as well, including an
    id that appears in both lists (the ``dependencies`` copy is kept).

    Returns:
        Number of entries removed
    """
    task_ids = {task.id for task in tasks}
    removed = 0

    for task in tasks:
        kept_ids: set[str] = set()
        for attr in ("dependencies", "milestone_dependencies"):
            dep_list = getattr(task, attr)
            kept: list[str] = []
            for dep_id in dep_list:
                if dep_id not in task_ids or dep_id == task.id or dep_id in kept_ids:
                    removed += 1
                    continue
                kept.append(dep_id)
                kept_ids.add(dep_id)
            if len(kept) != len(dep_list):
                dep_list[:] = kept

    if removed:
        logger.info(f"Removed {removed} invalid dependencies")
    return removed


def potential_predecessors(tasks: list[Task], task_id: str) -> list[Task]:
    """Tasks that ``add_dependency`` would accept as predecessors of task_id."""
    task = _find_task(tasks, task_id)
    if task is None:
        return []

    current = set(task.all_dependencies())
    return [
        candidate
        for candidate in tasks
        if candidate.id != task_id
        and candidate.id not in current
        and not would_create_cycle(tasks, candidate.id, task_id)
    ]


def affected_tasks(graph: Graph, succ_id: str) -> list[str]:
    """succ_id and every node downstream of it.

    These are the nodes whose schedule a change to one of succ_id's
    incoming dependencies can move.
    """
    if succ_id not in graph:
        return []

    affected = [succ_id]
    seen = {succ_id}
    stack = [succ_id]

    while stack:
        current = stack.pop()
        for next_id in graph.successors(current):
            if next_id not in seen:
                seen.add(next_id)
                affected.append(next_id)
                stack.append(next_id)

    return affected
