"""Configuration models for pertgraph."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ProjectConfig(BaseModel):
    """Where the task data lives."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tasks_file: Path = Field(description="Project file holding the task list (YAML or JSON)")


class AnalysisConfig(BaseModel):
    """Analysis defaults."""

    scope: Literal["all", "milestones"] = Field(
        default="all",
        description="Which tasks feed the graph: every task or milestones only",
    )
    validate_on_load: bool = Field(
        default=True,
        description="Prune dangling dependency references when the project is loaded",
    )
    near_critical_weeks: int = Field(
        default=1,
        ge=0,
        description="Slack (weeks) at or under which a non-critical task is reported as near-critical",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    level: str = Field(default="INFO", description="Log level")
    log_dir: Path = Field(default=Path(".pertgraph/logs"), description="Log directory")
    rotation_mb: int = Field(default=10, ge=1, description="Log rotation size (MB)")
    retention_days: int = Field(default=7, ge=0, description="Log retention days (0 keeps every file)")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value):
        level = str(value).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}")
        return level


class PertConfig(BaseModel):
    """Main configuration model."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    project: ProjectConfig
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
