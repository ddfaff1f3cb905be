"""Task records read and written by the engine."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Task(BaseModel):
    """A planned task as stored by the surrounding application.

    Records written by the planning web app use camelCase for the milestone
    fields; both spellings are accepted, snake_case is written back.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(description="Stable task identifier")
    name: str = Field(default="", description="Display name")
    planned: list[Any] = Field(
        default_factory=list,
        description="Planned schedule units; the count is the duration in weeks",
    )
    dependencies: list[str] = Field(default_factory=list, description="Predecessor task IDs")
    milestone_dependencies: list[str] = Field(
        default_factory=list,
        alias="milestoneDependencies",
        description="Predecessor task IDs recorded on milestones",
    )
    is_milestone: bool = Field(default=False, alias="isMilestone")
    milestone_deadline: Optional[str] = Field(
        default=None,
        alias="milestoneDeadline",
        description="ISO date, used for ordering",
    )
    complete: bool = Field(default=False)

    def all_dependencies(self) -> list[str]:
        """Union of both dependency lists, first occurrence wins."""
        seen: set[str] = set()
        merged = []
        for dep_id in [*self.dependencies, *self.milestone_dependencies]:
            if dep_id not in seen:
                seen.add(dep_id)
                merged.append(dep_id)
        return merged


class ProjectData(BaseModel):
    """Project file contents."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(default="New Project")
    version: int = Field(default=1)
    tasks: list[Task] = Field(default_factory=list)

    def task_ids(self) -> set[str]:
        return {task.id for task in self.tasks}

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
