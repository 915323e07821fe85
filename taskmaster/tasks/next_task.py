"""Next actionable task selection."""

import logging
from collections.abc import Sequence
from typing import Optional

from .ids import TaskRef
from .models import PRIORITY_RANK, Task, TaskStatus

logger = logging.getLogger(__name__)

# Statuses that mean "not started or not finished yet"
ACTIONABLE_STATUSES = frozenset({TaskStatus.PENDING, TaskStatus.IN_PROGRESS})


def _priority_rank(task: Task) -> int:
    # Unknown priorities sort below "low"
    return PRIORITY_RANK.get(task.priority, 0)


def find_next_task(tasks: Sequence[Task]) -> Optional[Task]:
    """Pick the next task to work on.

    A task is eligible when it is pending or in progress and every dependency
    is a top-level task marked done. Dependencies that do not resolve make the
    task ineligible. Eligible tasks are ranked by priority (high first), then
    by lowest id.

    Args:
        tasks: Task collection

    Returns:
        The selected task, or None when nothing is eligible
    """
    done_ids = {TaskRef(task.id) for task in tasks if task.is_done}

    eligible = [
        task
        for task in tasks
        if task.status in ACTIONABLE_STATUSES
        and all(dep in done_ids for dep in task.dependencies)
    ]

    if not eligible:
        logger.debug("No eligible tasks: all done or blocked by dependencies")
        return None

    return min(eligible, key=lambda task: (-_priority_rank(task), task.id))
