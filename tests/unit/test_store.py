"""Unit tests for task models and project file storage."""

import json

import pytest

from pertgraph.tasks.models import ProjectData, Task
from pertgraph.tasks.store import ProjectFileError, load_project, save_project


@pytest.fixture
def sample_project_file(tmp_path):
    """Create a sample YAML project file."""
    project_path = tmp_path / "project.yml"
    project_path.write_text(
        """title: Launch
version: 3
tasks:
  - id: design
    name: Design
    planned: [w1, w2]
    color: blue
  - id: build
    name: Build
    planned: [w3, w4, w5]
    dependencies: [design]
  - id: release
    name: Release
    is_milestone: true
    milestone_dependencies: [build]
    milestone_deadline: "2026-09-30"
"""
    )
    return project_path


def test_all_dependencies_merges_lists():
    task = Task(id="m", dependencies=["a", "b"], milestone_dependencies=["b", "c"])
    assert task.all_dependencies() == ["a", "b", "c"]


def test_project_lookup():
    project = ProjectData(tasks=[Task(id="a"), Task(id="b")])
    assert project.title == "New Project"
    assert project.task_ids() == {"a", "b"}
    assert project.get_task("b").id == "b"
    assert project.get_task("zzz") is None


def test_load_project_yaml(sample_project_file):
    """Unknown fields are ignored, known ones are validated."""
    project = load_project(sample_project_file)

    assert project.title == "Launch"
    assert project.version == 3
    assert [t.id for t in project.tasks] == ["design", "build", "release"]
    assert project.tasks[1].dependencies == ["design"]
    assert project.tasks[2].is_milestone
    assert project.tasks[2].milestone_deadline == "2026-09-30"


def test_load_project_json(tmp_path):
    project_path = tmp_path / "project.json"
    project_path.write_text(json.dumps({"tasks": [{"id": "a", "planned": [1]}]}))

    project = load_project(project_path)
    assert project.tasks[0].planned == [1]


def test_load_project_camel_case_milestone_fields(tmp_path):
    """Web-app exports spell the milestone fields in camelCase."""
    project_path = tmp_path / "project.json"
    project_path.write_text(
        json.dumps(
            {
                "tasks": [
                    {"id": "a"},
                    {
                        "id": "m",
                        "isMilestone": True,
                        "milestoneDependencies": ["a"],
                        "milestoneDeadline": "2026-12-01",
                    },
                ]
            }
        )
    )

    milestone = load_project(project_path).tasks[1]
    assert milestone.is_milestone
    assert milestone.milestone_dependencies == ["a"]
    assert milestone.milestone_deadline == "2026-12-01"

    save_project(load_project(project_path), project_path)
    saved = json.loads(project_path.read_text())["tasks"][1]
    assert saved["milestone_dependencies"] == ["a"]
    assert "milestoneDependencies" not in saved


def test_load_project_missing(tmp_path):
    with pytest.raises(ProjectFileError, match="not found"):
        load_project(tmp_path / "missing.yml")


def test_load_project_empty(tmp_path):
    project_path = tmp_path / "project.yml"
    project_path.write_text("")

    with pytest.raises(ProjectFileError, match="Empty"):
        load_project(project_path)


def test_load_project_invalid_yaml(tmp_path):
    project_path = tmp_path / "project.yml"
    project_path.write_text("tasks: [unclosed")

    with pytest.raises(ProjectFileError, match="Cannot parse"):
        load_project(project_path)


def test_load_project_invalid_task(tmp_path):
    """A task without an id fails validation."""
    project_path = tmp_path / "project.yml"
    project_path.write_text("tasks:\n  - name: Nameless\n")

    with pytest.raises(ProjectFileError, match="validation failed"):
        load_project(project_path)


def test_save_project_roundtrip(sample_project_file):
    project = load_project(sample_project_file)
    project.tasks[2].milestone_dependencies.append("design")

    save_project(project, sample_project_file)

    reloaded = load_project(sample_project_file)
    assert reloaded.tasks[2].milestone_dependencies == ["build", "design"]
    assert not sample_project_file.with_suffix(".yml.tmp").exists()


def test_save_project_json(tmp_path):
    project_path = tmp_path / "project.json"
    save_project(ProjectData(tasks=[Task(id="a")]), project_path)

    data = json.loads(project_path.read_text())
    assert data["tasks"][0]["id"] == "a"
    assert data["tasks"][0]["dependencies"] == []
