"""Project file loading and atomic saving."""

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import ProjectData

logger = logging.getLogger(__name__)


class ProjectFileError(Exception):
    """Project file could not be read or written."""

    pass


def _is_json(path: Path) -> bool:
    return path.suffix.lower() == ".json"


def load_project(project_path: Path) -> ProjectData:
    """Load a project file.

    Args:
        project_path: Path to a YAML or JSON project file

    Returns:
        Validated ProjectData

    Raises:
        ProjectFileError: If the file is missing, unparseable or invalid
    """
    if not project_path.exists():
        raise ProjectFileError(f"Project file not found: {project_path}")

    try:
        with open(project_path, "r") as f:
            if _is_json(project_path):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ProjectFileError(f"Cannot parse {project_path}: {e}")

    if not data:
        raise ProjectFileError(f"Empty project file: {project_path}")

    try:
        project = ProjectData(**data)
    except (TypeError, ValidationError) as e:
        raise ProjectFileError(f"Project validation failed: {e}")

    logger.info(f"Loaded {len(project.tasks)} tasks from {project_path}")
    return project


def save_project(project: ProjectData, project_path: Path) -> None:
    """Save project with atomic write.

    Args:
        project: Project to save
        project_path: Destination path
    """
    data = project.model_dump(mode="json")

    temp_path = project_path.with_suffix(project_path.suffix + ".tmp")
    with open(temp_path, "w") as f:
        if _is_json(project_path):
            json.dump(data, f, indent=2)
        else:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        f.flush()
    temp_path.replace(project_path)
    logger.debug(f"Saved project to {project_path}")
