"""Configuration loader with validation."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import TaskMasterConfig

CONFIG_DIR_NAME = ".taskmaster"
DEFAULT_CONFIG_PATH = Path(CONFIG_DIR_NAME) / "config.yml"


class ConfigError(Exception):
    """Configuration error."""

    pass


def project_root_for(config_path: Path) -> Path:
    """Return the project root a config file belongs to.

    ``<root>/.taskmaster/config.yml`` belongs to ``<root>``; a config file
    anywhere else belongs to its own directory.
    """
    parent = config_path.resolve().parent
    if parent.name == CONFIG_DIR_NAME:
        return parent.parent
    return parent


def _resolve_paths(config: TaskMasterConfig, root: Path) -> TaskMasterConfig:
    paths = config.paths
    if not paths.tasks_file.is_absolute():
        paths.tasks_file = root / paths.tasks_file
    if not paths.complexity_report.is_absolute():
        paths.complexity_report = root / paths.complexity_report
    if not config.logging.log_dir.is_absolute():
        config.logging.log_dir = root / config.logging.log_dir
    return config


def load_config(config_path: Path) -> TaskMasterConfig:
    """Load and validate configuration from a YAML file.

    Relative paths in the file are resolved against the project root.

    Args:
        config_path: Path to config YAML file

    Returns:
        Validated TaskMasterConfig instance

    Raises:
        ConfigError: If config file missing or invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not data:
        raise ConfigError(f"Empty configuration file: {config_path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping: {config_path}")

    try:
        config = TaskMasterConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e

    return _resolve_paths(config, project_root_for(config_path))


def load_config_or_default(config_path: Path) -> TaskMasterConfig:
    """Load ``config_path`` if it exists, otherwise use defaults for its project.

    Raises:
        ConfigError: If the file exists but is invalid
    """
    if config_path.exists():
        return load_config(config_path)
    return _resolve_paths(TaskMasterConfig(), project_root_for(config_path))


def create_default_config(config_path: Path) -> None:
    """Write the default configuration file.

    Args:
        config_path: Path where config should be created
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)

    defaults = TaskMasterConfig()
    default_config = {
        "project": {
            "name": defaults.project.name,
        },
        "paths": {
            "tasks_file": str(defaults.paths.tasks_file),
            "complexity_report": str(defaults.paths.complexity_report),
        },
        "logging": {
            "level": defaults.logging.level,
            "log_dir": str(defaults.logging.log_dir),
            "rotation_mb": defaults.logging.rotation_mb,
            "retention_days": defaults.logging.retention_days,
        },
    }

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)
