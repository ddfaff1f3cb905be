"""Unit tests for configuration models and loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from pertgraph.config.loader import ConfigError, create_default_config, load_config
from pertgraph.config.models import AnalysisConfig, LoggingConfig, PertConfig, ProjectConfig


def test_analysis_config_defaults():
    """Test AnalysisConfig default values."""
    config = AnalysisConfig()
    assert config.scope == "all"
    assert config.validate_on_load is True
    assert config.near_critical_weeks == 1


def test_analysis_config_rejects_unknown_scope():
    with pytest.raises(ValidationError):
        AnalysisConfig(scope="sprint")


def test_analysis_config_rejects_negative_threshold():
    with pytest.raises(ValidationError):
        AnalysisConfig(near_critical_weeks=-1)


def test_logging_config_defaults():
    config = LoggingConfig()
    assert config.level == "INFO"
    assert config.log_dir == Path(".pertgraph/logs")
    assert config.rotation_mb == 10
    assert config.retention_days == 7


def test_pert_config_minimal():
    """Test PertConfig with minimal required fields."""
    config = PertConfig(project=ProjectConfig(tasks_file=Path("/tmp/project.yml")))
    assert config.project.tasks_file == Path("/tmp/project.yml")
    assert config.analysis.scope == "all"
    assert config.logging.level == "INFO"


def test_pert_config_requires_project():
    with pytest.raises(ValidationError):
        PertConfig()


def test_create_and_load_default_config(tmp_path):
    """Default config loads and resolves the project file next to its directory."""
    config_path = tmp_path / ".pertgraph" / "config.yml"
    create_default_config(config_path)

    config = load_config(config_path)
    assert config.project.tasks_file == (tmp_path / "project.yml").resolve()
    assert config.analysis.validate_on_load is True


def test_load_config_keeps_absolute_tasks_file(tmp_path):
    config_path = tmp_path / "config.yml"
    config_path.write_text(yaml.dump({"project": {"tasks_file": "/data/plan.json"}}))

    assert load_config(config_path).project.tasks_file == Path("/data/plan.json")


def test_load_config_missing(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.yml")


def test_load_config_empty(tmp_path):
    config_path = tmp_path / "config.yml"
    config_path.write_text("")

    with pytest.raises(ConfigError, match="Empty"):
        load_config(config_path)


def test_load_config_not_a_mapping(tmp_path):
    config_path = tmp_path / "config.yml"
    config_path.write_text("- one\n- two\n")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(config_path)


def test_load_config_invalid_values(tmp_path):
    config_path = tmp_path / "config.yml"
    config_path.write_text(
        yaml.dump({"project": {"tasks_file": "p.yml"}, "analysis": {"scope": "sprint"}})
    )

    with pytest.raises(ConfigError, match="validation failed"):
        load_config(config_path)
