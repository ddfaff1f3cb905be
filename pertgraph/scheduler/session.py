"""Planning session: the context object that owns one project's analysis."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..cpm.analyzer import CPMAnalysisError, CPMResult, run_cpm
from ..editor import dependencies as editor
from ..graph.model import Graph, build_graph, select_tasks, validate_scope
from ..layout.cache import PresentationCache
from ..layout.levels import compute_levels, group_by_level, order_within_levels
from ..tasks.models import ProjectData

logger = logging.getLogger(__name__)


@dataclass
class SessionSummary:
    """Headline numbers for a project view."""

    node_count: int = 0
    edge_count: int = 0
    project_duration: int = 0
    critical_count: int = 0
    valid: bool = True

    def __str__(self) -> str:
        if not self.valid:
            return f"Tasks: {self.node_count} | Dependency graph invalid"
        return (
            f"Tasks: {self.node_count} | "
            f"Dependencies: {self.edge_count} | "
            f"Duration: {self.project_duration}w | "
            f"Critical: {self.critical_count}"
        )


class PlanningSession:
    """Analysis state for one project.

    The task list is owned by ``project``; the session only holds derived
    state: the last graph, the last analysis (or the error that prevented it)
    and the presentation cache. Every accepted edit rebuilds the graph and
    re-runs CPM before results are trusted again.
    """

    def __init__(self, project: ProjectData, scope: str = "all"):
        """Initialize session.

        Args:
            project: Project whose task list is read and edited
            scope: "all" or "milestones"
        """
        self.project = project
        self.scope = validate_scope(scope)
        self.graph: Graph = Graph()
        self.result: Optional[CPMResult] = None
        self.error: Optional[CPMAnalysisError] = None
        self.cache = PresentationCache()

    @property
    def tasks(self):
        return self.project.tasks

    @property
    def valid(self) -> bool:
        return self.error is None

    def set_scope(self, scope: str) -> Optional[CPMResult]:
        """Switch scope and re-analyze."""
        self.scope = validate_scope(scope)
        return self.analyze(resync=True)

    def analyze(self, resync: bool = True) -> Optional[CPMResult]:
        """Rebuild the graph and run CPM.

        A cyclic graph leaves the session in the invalid state (``error`` set,
        ``result`` cleared) instead of raising.

        Args:
            resync: Rebuild the presentation cache wholesale

        Returns:
            The analysis, or None for an empty or invalid graph
        """
        self.graph = build_graph(select_tasks(self.tasks, self.scope))
        self.result = None
        self.error = None

        if len(self.graph) == 0:
            self.cache.clear()
            return None

        try:
            self.result = run_cpm(self.graph)
        except CPMAnalysisError as e:
            self.error = e
            logger.warning(f"Dependency graph invalid: {e}")

        if resync:
            self.cache.sync(self.graph, self.result)
        elif self.result is not None:
            self.cache.apply_analysis(self.result)

        return self.result

    def add_dependency(self, pred_id: str, succ_id: str) -> bool:
        if not editor.add_dependency(self.tasks, pred_id, succ_id):
            return False
        if pred_id in self.graph and succ_id in self.graph:
            self.cache.add_edge(pred_id, succ_id)
        self._reanalyze()
        return True

    def remove_dependency(self, pred_id: str, succ_id: str) -> bool:
        if not editor.remove_dependency(self.tasks, pred_id, succ_id):
            return False
        self.cache.remove_edge(pred_id, succ_id)
        self._reanalyze()
        return True

    def reverse_dependency(self, from_id: str, to_id: str) -> bool:
        if not editor.reverse_dependency(self.tasks, from_id, to_id):
            return False
        self.cache.remove_edge(from_id, to_id)
        if from_id in self.graph and to_id in self.graph:
            self.cache.add_edge(to_id, from_id)
        self._reanalyze()
        return True

    def _reanalyze(self) -> None:
        """Re-run CPM after an edit; an empty cache gets a full build."""
        self.analyze(resync=not self.cache.nodes)

    def can_add(self, pred_id: str, succ_id: str) -> bool:
        """Quick pre-check against the current graph, e.g. while drawing an edge."""
        if editor.edge_exists(self.graph, pred_id, succ_id):
            return False
        return not editor.cycle_check(self.graph, pred_id, succ_id)

    def validate(self) -> int:
        """Repair dangling references, then re-analyze."""
        removed = editor.validate_integrity(self.tasks)
        self.analyze()
        return removed

    def levels(self) -> dict[str, int]:
        return compute_levels(self.graph)

    def ordered_levels(self) -> list[list[str]]:
        return order_within_levels(self.graph, group_by_level(self.levels()))

    def summary(self) -> SessionSummary:
        summary = SessionSummary(
            node_count=len(self.graph),
            edge_count=self.graph.edge_count,
            valid=self.valid,
        )
        if self.result is not None:
            summary.project_duration = self.result.project_duration
            summary.critical_count = self.result.critical_count
        return summary
