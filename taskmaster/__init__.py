"""Task Master: task dependency graph validation, repair and lookup."""

from .dependencies.manager import (
    CircularDependencyError,
    DependencyError,
    SelfDependencyError,
    TaskNotFoundError,
    add_dependency,
    remove_dependency,
)
from .dependencies.repair import RepairReport, repair_dependencies, validate_and_fix_dependencies
from .dependencies.validator import (
    DependencyIssue,
    IssueType,
    ValidationResult,
    validate_task_dependencies,
)
from .graph.cycles import find_cycle_edges, has_cycle, is_circular_dependency
from .tasks.finder import FindResult, find_task_by_id, task_exists
from .tasks.ids import (
    Identifier,
    MalformedIdentifier,
    SubtaskRef,
    TaskRef,
    format_identifier,
    parse_identifier,
)
from .tasks.models import Subtask, Task, TaskPriority, TaskStatus, TasksDocument, parse_tasks
from .tasks.next_task import find_next_task

__version__ = "0.1.0"

__all__ = [
    "CircularDependencyError",
    "DependencyError",
    "DependencyIssue",
    "FindResult",
    "Identifier",
    "IssueType",
    "MalformedIdentifier",
    "RepairReport",
    "SelfDependencyError",
    "Subtask",
    "SubtaskRef",
    "Task",
    "TaskNotFoundError",
    "TaskPriority",
    "TaskRef",
    "TaskStatus",
    "TasksDocument",
    "ValidationResult",
    "add_dependency",
    "find_cycle_edges",
    "find_next_task",
    "find_task_by_id",
    "format_identifier",
    "has_cycle",
    "is_circular_dependency",
    "parse_identifier",
    "parse_tasks",
    "remove_dependency",
    "repair_dependencies",
    "task_exists",
    "validate_and_fix_dependencies",
    "validate_task_dependencies",
]
