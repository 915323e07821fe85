"""Task, subtask and tasks-file models."""

from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    TypeAdapter,
    field_validator,
)

from .ids import Identifier, SubtaskRef, TaskRef, format_identifier, parse_identifier


class TaskStatus(str, Enum):
    """Task and subtask status."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    DEFERRED = "deferred"
    BLOCKED = "blocked"
    REVIEW = "review"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    """Task priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_RANK: dict[str, int] = {
    TaskPriority.HIGH.value: 3,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.LOW.value: 1,
}

# Older task files mark finished work as "completed"
_STATUS_ALIASES = {"completed": TaskStatus.DONE.value}

DependencyId = Annotated[
    Identifier,
    PlainValidator(parse_identifier),
    PlainSerializer(format_identifier),
]


def _normalize_status(value: Any) -> Any:
    if isinstance(value, TaskStatus):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        return _STATUS_ALIASES.get(text, text)
    return value


class TaskNode(BaseModel):
    """Fields shared by tasks and subtasks."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int
    title: str = ""
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    dependencies: list[DependencyId] = Field(default_factory=list)
    details: str = ""
    test_strategy: str = Field(default="", alias="testStrategy")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> int:
        return _plain_id(value)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: Any) -> Any:
        return _normalize_status(value)

    @field_validator("dependencies", mode="before")
    @classmethod
    def default_dependencies(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE


class ParentTaskRef(BaseModel):
    """Parent summary attached to subtasks returned by lookups."""

    id: int
    title: str
    status: TaskStatus


class Subtask(TaskNode):
    """Subtask owned by exactly one task; ``id`` is unique within the parent."""

    is_subtask: bool = Field(default=False, exclude=True)
    parent_task: Optional[ParentTaskRef] = Field(default=None, exclude=True)


class Task(TaskNode):
    """Top-level task."""

    priority: str = Field(default=TaskPriority.MEDIUM.value)
    subtasks: list[Subtask] = Field(default_factory=list)
    complexity_score: Optional[float] = Field(default=None, exclude=True)

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, value: Any) -> Any:
        if value is None:
            return TaskPriority.MEDIUM.value
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("subtasks", mode="before")
    @classmethod
    def default_subtasks(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def ref(self) -> TaskRef:
        return TaskRef(self.id)

    def subtask_ref(self, subtask: Subtask) -> SubtaskRef:
        return SubtaskRef(self.id, subtask.id)

    def get_subtask(self, subtask_id: int) -> Optional[Subtask]:
        for subtask in self.subtasks:
            if subtask.id == subtask_id:
                return subtask
        return None


def _plain_id(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    ref = parse_identifier(value)
    if not isinstance(ref, TaskRef):
        raise ValueError(f"expected a plain numeric id, got {value!r}")
    return ref.task_id


class TasksDocument(BaseModel):
    """Contents of a tasks.json file."""

    model_config = ConfigDict(extra="allow")

    tasks: list[Task] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


_TASK_LIST = TypeAdapter(list[Task])


def parse_tasks(data: Any) -> list[Task]:
    """Validate a list of raw task dicts into Task models."""
    return _TASK_LIST.validate_python(data)
