"""Task and subtask lookup."""

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Optional, Union

from .ids import Identifier, SubtaskRef, TaskRef, format_identifier, parse_identifier
from .models import ParentTaskRef, Subtask, Task

logger = logging.getLogger(__name__)

Node = Union[Task, Subtask]


@dataclass
class FindResult:
    """Result of a task lookup.

    ``task`` is None when nothing matched. ``original_subtask_count`` is only
    set when a status filter trimmed the returned task's subtasks.
    """

    task: Optional[Node] = None
    original_subtask_count: Optional[int] = None


def _find_task(tasks: Sequence[Task], task_id: int) -> Optional[Task]:
    for task in tasks:
        if task.id == task_id:
            return task
    return None


def iter_nodes(tasks: Sequence[Task]) -> Iterator[tuple[Identifier, Node]]:
    """Yield every task and subtask with its canonical identifier.

    Tasks come first, each followed by its subtasks in insertion order.
    """
    for task in tasks:
        yield TaskRef(task.id), task
        for subtask in task.subtasks:
            yield SubtaskRef(task.id, subtask.id), subtask


def find_duplicate_ids(tasks: Sequence[Task]) -> list[Identifier]:
    """Return ids carried by more than one task or subtask, in first-seen order."""
    seen: set[Identifier] = set()
    duplicates: list[Identifier] = []
    for node_id, _ in iter_nodes(tasks):
        if node_id in seen and node_id not in duplicates:
            duplicates.append(node_id)
        seen.add(node_id)
    return duplicates


def get_node(tasks: Sequence[Task], task_id: object) -> Optional[Node]:
    """Resolve an id to the stored task or subtask (no copy, no metadata)."""
    ref = parse_identifier(task_id)
    if isinstance(ref, SubtaskRef):
        parent = _find_task(tasks, ref.parent_id)
        if parent is None:
            return None
        return parent.get_subtask(ref.subtask_id)
    return _find_task(tasks, ref.task_id)


def task_exists(tasks: Sequence[Task], task_id: object) -> bool:
    """Check whether a task or subtask id resolves."""
    return get_node(tasks, task_id) is not None


def _complexity_for(complexity_report: Optional[Mapping], ref: TaskRef) -> Optional[float]:
    if not complexity_report:
        return None
    score = complexity_report.get(format_identifier(ref))
    if score is None:
        score = complexity_report.get(str(ref))
    return score


def find_task_by_id(
    tasks: Sequence[Task],
    task_id: object,
    complexity_report: Optional[Mapping] = None,
    status_filter: Optional[str] = None,
) -> FindResult:
    """Find a task or subtask by id.

    Subtask matches are returned as shallow copies carrying ``is_subtask`` and
    a ``parent_task`` summary. Top-level matches are copied only when they
    need enrichment (complexity score or filtered subtasks); the caller's
    objects are never modified.

    Args:
        tasks: Task collection to search
        task_id: Plain or dotted id in any accepted form
        complexity_report: Optional mapping of task id to complexity score
        status_filter: Optional status to filter a top-level task's subtasks by

    Returns:
        FindResult, with ``task`` None when the id does not resolve

    Raises:
        MalformedIdentifier: If ``task_id`` cannot be parsed
    """
    ref = parse_identifier(task_id)
    if not tasks:
        return FindResult()

    if isinstance(ref, SubtaskRef):
        parent = _find_task(tasks, ref.parent_id)
        if parent is None or not parent.subtasks:
            return FindResult()
        subtask = parent.get_subtask(ref.subtask_id)
        if subtask is None:
            return FindResult()
        found = subtask.model_copy(
            update={
                "is_subtask": True,
                "parent_task": ParentTaskRef(
                    id=parent.id,
                    title=parent.title,
                    status=parent.status,
                ),
            }
        )
        return FindResult(task=found)

    task = _find_task(tasks, ref.task_id)
    if task is None:
        return FindResult()

    update: dict = {}
    original_subtask_count = None

    score = _complexity_for(complexity_report, ref)
    if score is not None:
        update["complexity_score"] = score

    if status_filter and task.subtasks:
        wanted = status_filter.strip().lower()
        original_subtask_count = len(task.subtasks)
        update["subtasks"] = [st for st in task.subtasks if st.status.value == wanted]
        logger.debug(
            f"Filtered subtasks of task {task.id} by '{wanted}': "
            f"{len(update['subtasks'])}/{original_subtask_count}"
        )

    if update:
        task = task.model_copy(update=update)

    return FindResult(task=task, original_subtask_count=original_subtask_count)
