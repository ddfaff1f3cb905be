"""Unit tests for the planning session."""

import pytest

from pertgraph.cpm.analyzer import CPMAnalysisError
from pertgraph.scheduler.session import PlanningSession, SessionSummary
from pertgraph.tasks.models import ProjectData, Task


def _project(*tasks: Task) -> ProjectData:
    return ProjectData(title="Test", tasks=list(tasks))


@pytest.fixture
def project():
    """1 -> 2 -> 3 plus a loose task 4, 2/3/1/1 weeks."""
    return _project(
        Task(id="1", name="One", planned=["a", "b"]),
        Task(id="2", name="Two", planned=["a", "b", "c"], dependencies=["1"]),
        Task(id="3", name="Three", planned=["a"], dependencies=["2"]),
        Task(id="4", name="Four", planned=["a"]),
    )


def test_session_summary_str():
    """Test SessionSummary string formatting."""
    summary = SessionSummary(node_count=3, edge_count=2, project_duration=6, critical_count=3)
    assert str(summary) == "Tasks: 3 | Dependencies: 2 | Duration: 6w | Critical: 3"

    invalid = SessionSummary(node_count=2, valid=False)
    assert str(invalid) == "Tasks: 2 | Dependency graph invalid"


def test_analyze(project):
    session = PlanningSession(project)
    result = session.analyze()

    assert session.valid
    assert result.project_duration == 6
    assert result.critical_path == ("1", "2", "3")
    assert str(session.summary()) == "Tasks: 4 | Dependencies: 2 | Duration: 6w | Critical: 3"
    assert set(session.cache.nodes) == {"1", "2", "3", "4"}
    assert session.cache.critical_edge_keys() == ["1->2", "2->3"]


def test_analyze_empty_project():
    session = PlanningSession(_project())
    assert session.analyze() is None
    assert session.valid
    assert session.summary().node_count == 0


def test_add_dependency_reanalyzes(project):
    """An accepted edit is visible in the next result right away."""
    session = PlanningSession(project)
    session.analyze()

    assert session.add_dependency("3", "4")

    assert project.get_task("4").dependencies == ["3"]
    assert session.result.project_duration == 7
    assert session.result.critical_path == ("1", "2", "3", "4")
    assert "3->4" in session.cache.edges
    assert session.cache.edges["3->4"].is_critical
    assert not session.cache.stale


def test_edit_before_first_analysis_builds_cache(project):
    """The first edit on a fresh session fills the cache wholesale."""
    session = PlanningSession(project)

    assert session.add_dependency("3", "4")

    assert set(session.cache.nodes) == {"1", "2", "3", "4"}
    assert session.cache.nodes["4"].is_critical
    assert session.cache.critical_edge_keys() == ["1->2", "2->3", "3->4"]
    assert not session.cache.stale


def test_remove_repeated_dependency_keeps_cache_and_graph_in_step():
    project = _project(
        Task(id="a", planned=[1, 2]),
        Task(id="m", dependencies=["a"], milestone_dependencies=["a"]),
    )
    session = PlanningSession(project)
    session.analyze()

    assert session.remove_dependency("a", "m")
    assert not session.graph.has_edge("a", "m")
    assert "a->m" not in session.cache.edges
    assert session.result.project_duration == 2


def test_rejected_edit_keeps_previous_result(project):
    session = PlanningSession(project)
    first = session.analyze()

    assert not session.add_dependency("3", "1")
    assert session.result is first
    assert project.get_task("1").dependencies == []


def test_remove_dependency(project):
    session = PlanningSession(project)
    session.analyze()

    assert session.remove_dependency("2", "3")
    assert "2->3" not in session.cache.edges
    assert session.result.project_duration == 5
    assert not session.remove_dependency("2", "3")


def test_reverse_dependency(project):
    session = PlanningSession(project)
    session.analyze()

    assert session.reverse_dependency("2", "3")
    assert "3->2" in session.cache.edges
    assert "2->3" not in session.cache.edges
    assert session.graph.has_edge("3", "2")


def test_can_add(project):
    session = PlanningSession(project)
    session.analyze()

    assert session.can_add("3", "4")
    assert not session.can_add("1", "2")
    assert not session.can_add("3", "1")
    assert not session.can_add("4", "4")


def test_cyclic_data_makes_session_invalid():
    """Cycles already in the data surface as an error, not an exception."""
    project = _project(
        Task(id="a", dependencies=["b"]),
        Task(id="b", dependencies=["a"]),
    )
    session = PlanningSession(project)

    assert session.analyze() is None
    assert not session.valid
    assert isinstance(session.error, CPMAnalysisError)
    assert str(session.summary()) == "Tasks: 2 | Dependency graph invalid"
    assert session.cache.critical_edge_keys() == []


def test_validate_repairs_dangling_references(project):
    project.get_task("4").dependencies.append("ghost")
    session = PlanningSession(project)

    assert session.validate() == 1
    assert project.get_task("4").dependencies == []
    assert session.result is not None


def test_milestone_scope():
    """Edits between tasks outside the scope do not patch the view."""
    project = _project(
        Task(id="t1"),
        Task(id="t2"),
        Task(id="m1", is_milestone=True, milestone_deadline="2026-05-01", planned=[1, 2]),
        Task(id="m2", is_milestone=True, milestone_deadline="2026-02-01", milestone_dependencies=["m1"]),
    )
    session = PlanningSession(project, scope="milestones")
    session.analyze()

    assert list(session.graph.nodes) == ["m2", "m1"]
    assert session.result.project_duration == 3

    assert session.add_dependency("t1", "t2")
    assert "t1->t2" not in session.cache.edges
    assert session.graph.edge_count == 1


def test_set_scope(project):
    session = PlanningSession(project)
    session.analyze()

    assert session.set_scope("milestones") is None
    assert len(session.graph) == 0

    with pytest.raises(ValueError):
        session.set_scope("sprint")


def test_levels(project):
    session = PlanningSession(project)
    session.analyze()

    assert session.levels() == {"1": 0, "2": 1, "3": 2, "4": 0}
    assert session.ordered_levels() == [["1", "4"], ["2"], ["3"]]
