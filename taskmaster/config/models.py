"""Configuration models for Task Master."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.logging import DEFAULT_LOG_DIR

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ProjectConfig(BaseModel):
    """Project metadata."""

    name: str = Field(default="Task Master", description="Project name")


class PathsConfig(BaseModel):
    """Locations of the task data files."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tasks_file: Path = Field(
        default=Path(".taskmaster/tasks/tasks.json"),
        description="Task list JSON file",
    )
    complexity_report: Path = Field(
        default=Path(".taskmaster/reports/task-complexity-report.json"),
        description="Complexity report JSON file (optional)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    level: str = Field(default="INFO", description="Log level")
    log_dir: Path = Field(default=DEFAULT_LOG_DIR, description="Log directory")
    rotation_mb: int = Field(default=10, description="Log rotation size (MB)")
    retention_days: int = Field(default=7, description="Log retention days")

    @field_validator("level")
    @classmethod
    def check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}")
        return level


class TaskMasterConfig(BaseModel):
    """Main configuration model."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
