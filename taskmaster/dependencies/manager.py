"""Add and remove single dependency edges."""

import logging
from collections.abc import Sequence

from ..graph.cycles import build_dependency_graph, has_cycle
from ..tasks.finder import get_node
from ..tasks.ids import identifier_sort_key, parse_identifier
from ..tasks.models import Task

logger = logging.getLogger(__name__)


class DependencyError(Exception):
    """Dependency operation error."""

    pass


class TaskNotFoundError(DependencyError):
    """Task or subtask does not exist."""

    pass


class SelfDependencyError(DependencyError):
    """Node asked to depend on itself."""

    pass


class CircularDependencyError(DependencyError):
    """Edge would close a dependency cycle."""

    pass


def add_dependency(tasks: Sequence[Task], task_id: object, dependency_id: object) -> bool:
    """Make ``task_id`` depend on ``dependency_id``.

    The new edge is checked against the current graph before it is stored;
    the dependency list is kept sorted with task ids before subtask ids.

    Args:
        tasks: Task collection; modified in place
        task_id: Dependent task or subtask
        dependency_id: Task or subtask to depend on

    Returns:
        True if the edge was added, False if it already existed

    Raises:
        MalformedIdentifier: If either id cannot be parsed
        TaskNotFoundError: If either node does not exist
        SelfDependencyError: If both ids name the same node
        CircularDependencyError: If the edge would create a cycle
    """
    dependent = parse_identifier(task_id)
    target = parse_identifier(dependency_id)

    node = get_node(tasks, dependent)
    if node is None:
        raise TaskNotFoundError(f"Task {dependent} not found")
    if get_node(tasks, target) is None:
        raise TaskNotFoundError(f"Dependency target {target} does not exist")
    if dependent == target:
        raise SelfDependencyError(f"Task {dependent} cannot depend on itself")

    if target in node.dependencies:
        logger.warning(f"Dependency {target} already exists in task {dependent}")
        return False

    graph = build_dependency_graph(tasks)
    if has_cycle(graph, start_node=dependent, extra_edges={dependent: [target]}):
        raise CircularDependencyError(
            f"Cannot add dependency {target} to task {dependent}: "
            "it would create a circular dependency"
        )

    node.dependencies = sorted([*node.dependencies, target], key=identifier_sort_key)
    logger.info(f"Added dependency {target} to task {dependent}")
    return True


def remove_dependency(tasks: Sequence[Task], task_id: object, dependency_id: object) -> bool:
    """Remove ``dependency_id`` from the dependencies of ``task_id``.

    Returns:
        True if an edge was removed, False if there was nothing to remove

    Raises:
        MalformedIdentifier: If either id cannot be parsed
        TaskNotFoundError: If ``task_id`` does not exist
    """
    dependent = parse_identifier(task_id)
    target = parse_identifier(dependency_id)

    node = get_node(tasks, dependent)
    if node is None:
        raise TaskNotFoundError(f"Task {dependent} not found")

    if target not in node.dependencies:
        logger.info(f"Task {dependent} does not depend on {target}, no changes made")
        return False

    node.dependencies = [dep for dep in node.dependencies if dep != target]
    logger.info(f"Removed dependency: task {dependent} no longer depends on {target}")
    return True
