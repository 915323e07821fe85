"""tasks.json and complexity report persistence with atomic writes."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..tasks.models import Task, TasksDocument

logger = logging.getLogger(__name__)


class TasksFileError(Exception):
    """tasks.json could not be read or written."""

    pass


class ComplexityAnalysis(BaseModel):
    """One entry of a complexity report."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    task_id: int = Field(alias="taskId")
    complexity_score: float = Field(alias="complexityScore")


class ComplexityReport(BaseModel):
    """Complexity report file."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    meta: dict[str, Any] = Field(default_factory=dict)
    complexity_analysis: list[ComplexityAnalysis] = Field(
        default_factory=list, alias="complexityAnalysis"
    )

    def scores(self) -> dict[int, float]:
        return {entry.task_id: entry.complexity_score for entry in self.complexity_analysis}


def load_tasks_document(path: Path) -> TasksDocument:
    """Load and validate a tasks.json file.

    Args:
        path: Path to tasks.json

    Returns:
        Parsed TasksDocument

    Raises:
        TasksFileError: If the file is missing, not JSON, or not a valid task list
    """
    if not path.exists():
        raise TasksFileError(f"Tasks file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise TasksFileError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict) or "tasks" not in data:
        raise TasksFileError(f"No valid tasks found in {path}")

    try:
        return TasksDocument.model_validate(data)
    except ValidationError as e:
        raise TasksFileError(f"Invalid task data in {path}: {e}") from e


def save_tasks_document(document: TasksDocument, path: Path) -> None:
    """Write a tasks.json file atomically.

    Args:
        document: Document to save
        path: Destination path
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = document.model_dump(mode="json", by_alias=True, exclude_unset=True)

    # Atomic write: temp file -> flush -> replace
    temp_path = path.with_suffix(path.suffix + ".tmp")
    with open(temp_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")
        f.flush()
    temp_path.replace(path)
    logger.debug(f"Wrote {len(document.tasks)} tasks to {path}")


def persist_to(document: TasksDocument, path: Path):
    """Build a repair ``persist`` callback that saves ``document`` to ``path``."""

    def _persist(tasks: list[Task]) -> None:
        document.tasks = list(tasks)
        save_tasks_document(document, path)

    return _persist


def load_complexity_report(path: Path) -> Optional[dict[int, float]]:
    """Load a complexity report as a task id -> score mapping.

    A missing report is normal and returns None. A report that cannot be
    parsed is logged and also returns None, so lookups still work without it.
    """
    if not path.exists():
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            report = ComplexityReport.model_validate(json.load(f))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Could not read complexity report {path}: {e}")
        return None

    return report.scores()
