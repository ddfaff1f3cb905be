"""Configuration loader with validation."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import PertConfig


class ConfigError(Exception):
    """Configuration error."""

    pass


def load_config(config_path: Path) -> PertConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config YAML file

    Returns:
        Validated PertConfig instance

    Raises:
        ConfigError: If config file missing or invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}")

    if not data:
        raise ConfigError(f"Empty configuration file: {config_path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping: {config_path}")

    # Resolve the tasks file relative to the config file
    project = data.get("project")
    if isinstance(project, dict) and project.get("tasks_file"):
        tasks_file = Path(project["tasks_file"])
        if not tasks_file.is_absolute():
            project["tasks_file"] = (config_path.parent / tasks_file).resolve()

    try:
        return PertConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}")


def create_default_config(config_path: Path, tasks_file: str = "../project.yml") -> None:
    """Create default configuration file.

    Args:
        config_path: Path where config should be created
        tasks_file: Project file path, relative to the config file
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)

    default_config = {
        "project": {
            "tasks_file": tasks_file,
        },
        "analysis": {
            "scope": "all",
            "validate_on_load": True,
            "near_critical_weeks": 1,
        },
        "logging": {
            "level": "INFO",
            "log_dir": ".pertgraph/logs",
        },
    }

    with open(config_path, "w") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)
