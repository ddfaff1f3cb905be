"""Task duration derivation."""

from collections.abc import Mapping

DEFAULT_DURATION_WEEKS = 1


def resolve_duration(task) -> int:
    """Derive a task's schedule duration in weeks.

    The duration is the number of planned schedule units. A task with no
    planned units still occupies one week.

    Args:
        task: Task model, or any object/mapping exposing ``planned``

    Returns:
        Positive integer duration
    """
    if isinstance(task, Mapping):
        planned = task.get("planned")
    else:
        planned = getattr(task, "planned", None)

    if planned:
        return len(planned)
    return DEFAULT_DURATION_WEEKS
