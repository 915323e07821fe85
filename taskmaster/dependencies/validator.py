"""Read-only dependency validation."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..graph.cycles import build_dependency_graph, find_cycle_edges
from ..tasks.finder import find_duplicate_ids, iter_nodes
from ..tasks.ids import Identifier
from ..tasks.models import Task

logger = logging.getLogger(__name__)


class IssueType(str, Enum):
    """Kinds of dependency problems."""

    MISSING = "missing"
    SELF = "self"
    CIRCULAR = "circular"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class DependencyIssue:
    """A single dependency problem.

    ``task_id`` is the dependent node. ``dependency_id`` is the offending
    target; for circular issues it is the edge that closed the cycle.
    """

    type: IssueType
    task_id: Identifier
    dependency_id: Optional[Identifier] = None


@dataclass
class ValidationResult:
    """Outcome of validating a task collection."""

    issues: list[DependencyIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues

    def by_type(self, issue_type: IssueType) -> list[DependencyIssue]:
        return [issue for issue in self.issues if issue.type == issue_type]


def validate_task_dependencies(tasks: Sequence[Task]) -> ValidationResult:
    """Validate dependencies of every task and subtask.

    Reports one ``duplicate`` issue per repeated target (the first occurrence
    is fine), ``self`` for edges back to the node itself, ``missing`` for
    targets that do not resolve, and one ``circular`` issue for each edge that
    closes a cycle among the remaining edges. Nothing is modified.

    A plain integer in a subtask's dependency list refers to the top-level
    task with that id, not to a sibling subtask.

    Args:
        tasks: Task collection

    Returns:
        ValidationResult; ``valid`` is True when no issues were found
    """
    result = ValidationResult()
    nodes = list(iter_nodes(tasks))
    known = {node_id for node_id, _ in nodes}
    for node_id in find_duplicate_ids(tasks):
        logger.warning(f"Duplicate id {node_id}: dependencies of every copy are checked together")

    for node_id, node in nodes:
        seen: set[Identifier] = set()
        for dep in node.dependencies:
            if dep in seen:
                result.issues.append(DependencyIssue(IssueType.DUPLICATE, node_id, dep))
                continue
            seen.add(dep)

            if dep == node_id:
                result.issues.append(DependencyIssue(IssueType.SELF, node_id, dep))
            elif dep not in known:
                result.issues.append(DependencyIssue(IssueType.MISSING, node_id, dep))

    graph = build_dependency_graph(tasks)
    for source, target in find_cycle_edges(graph):
        result.issues.append(DependencyIssue(IssueType.CIRCULAR, source, target))

    logger.debug(
        f"Validated {len(tasks)} tasks and {len(nodes) - len(tasks)} subtasks: "
        f"{len(result.issues)} issue(s)"
    )
    return result


def count_all_dependencies(tasks: Sequence[Task]) -> int:
    """Count dependency entries across all tasks and subtasks."""
    return sum(len(node.dependencies) for _, node in iter_nodes(tasks))
