"""Dependency repair.

Repair runs four passes over every task and subtask. Each pass computes a new
dependency list from the old one and assigns it back, so every pass is safe to
re-run:

1. drop repeated targets, keeping the first occurrence
2. drop self references and targets that do not resolve
3. break cycles by removing the edge that closed each cycle found, rescanning
   until the graph is acyclic
4. give every task with subtasks at least one subtask without dependencies

Cycle breaking is greedy. It always terminates with an acyclic graph but does
not look for the smallest set of edges to remove.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Optional

from ..graph.cycles import build_dependency_graph, find_cycle_edges
from ..tasks.finder import Node, find_duplicate_ids, iter_nodes
from ..tasks.ids import Identifier, SubtaskRef
from ..tasks.models import Task

module_logger = logging.getLogger(__name__)

PersistCallback = Callable[[list[Task]], None]


@dataclass
class RepairReport:
    """Counts of the fixes applied by a repair run."""

    duplicates_removed: int = 0
    self_removed: int = 0
    missing_removed: int = 0
    circular_removed: int = 0
    subtasks_made_independent: int = 0
    tasks_fixed: int = 0
    subtasks_fixed: int = 0

    @property
    def total_fixes(self) -> int:
        return (
            self.duplicates_removed
            + self.self_removed
            + self.missing_removed
            + self.circular_removed
            + self.subtasks_made_independent
        )

    @property
    def changed(self) -> bool:
        return self.total_fixes > 0


def _label(node_id: Identifier) -> str:
    kind = "subtask" if isinstance(node_id, SubtaskRef) else "task"
    return f"{kind} {node_id}"


def dedupe_dependencies(dependencies: Sequence[Identifier]) -> list[Identifier]:
    """Remove repeated targets, preserving first-occurrence order."""
    unique: list[Identifier] = []
    for dep in dependencies:
        if dep not in unique:
            unique.append(dep)
    return unique


def drop_invalid_dependencies(
    node_id: Identifier,
    dependencies: Sequence[Identifier],
    known: set[Identifier],
) -> list[Identifier]:
    """Keep only targets that resolve and are not the node itself."""
    return [dep for dep in dependencies if dep != node_id and dep in known]


def drop_dependency(dependencies: Sequence[Identifier], target: Identifier) -> list[Identifier]:
    """Remove every occurrence of ``target``."""
    return [dep for dep in dependencies if dep != target]


def _is_valid_input(tasks: object) -> bool:
    if tasks is None or isinstance(tasks, (str, bytes)):
        return False
    if not isinstance(tasks, Sequence):
        return False
    return all(isinstance(task, Task) for task in tasks)


def repair_dependencies(
    tasks: Sequence[Task],
    logger: Optional[logging.Logger] = None,
) -> RepairReport:
    """Fix dependency problems in place and report what was changed.

    Args:
        tasks: Task collection; modified in place
        logger: Logger for per-fix messages (module logger by default)

    Returns:
        RepairReport; ``changed`` is False when nothing needed fixing or the
        input was not a sequence of tasks
    """
    log = logger or module_logger
    report = RepairReport()

    if not _is_valid_input(tasks):
        log.error("Invalid tasks data: expected a sequence of tasks")
        return report

    nodes: list[tuple[Identifier, Node]] = list(iter_nodes(tasks))
    known = {node_id for node_id, _ in nodes}
    lookup: dict[Identifier, list[Node]] = {}
    for node_id, node in nodes:
        lookup.setdefault(node_id, []).append(node)
    for node_id in find_duplicate_ids(tasks):
        log.warning(f"Duplicate id {node_id}: dependencies of every copy are checked together")
    touched: set[Identifier] = set()

    for node_id, node in nodes:
        unique = dedupe_dependencies(node.dependencies)
        removed = len(node.dependencies) - len(unique)
        if removed:
            log.info(f"Removing {removed} duplicate dependency(ies) from {_label(node_id)}")
            report.duplicates_removed += removed
            node.dependencies = unique
            touched.add(node_id)

    for node_id, node in nodes:
        kept = drop_invalid_dependencies(node_id, node.dependencies, known)
        if len(kept) == len(node.dependencies):
            continue
        for dep in node.dependencies:
            if dep == node_id:
                log.info(f"Removing self-dependency from {_label(node_id)}")
                report.self_removed += 1
            elif dep not in known:
                log.info(f"Removing invalid dependency from {_label(node_id)}: {dep} does not exist")
                report.missing_removed += 1
        node.dependencies = kept
        touched.add(node_id)

    while True:
        cycle_edges = find_cycle_edges(build_dependency_graph(tasks))
        if not cycle_edges:
            break
        source, target = cycle_edges[0]
        log.info(f"Breaking circular dependency: removing {target} from {_label(source)}")
        for node in lookup[source]:
            node.dependencies = drop_dependency(node.dependencies, target)
        report.circular_removed += 1
        touched.add(source)

    for task in tasks:
        if not task.subtasks:
            continue
        if any(not subtask.dependencies for subtask in task.subtasks):
            continue
        first = task.subtasks[0]
        first_id = task.subtask_ref(first)
        log.info(f"Clearing dependencies of {_label(first_id)} so {_label(task.ref)} has an entry point")
        first.dependencies = []
        report.subtasks_made_independent += 1
        touched.add(first_id)

    report.subtasks_fixed = sum(1 for node_id in touched if isinstance(node_id, SubtaskRef))
    report.tasks_fixed = len(touched) - report.subtasks_fixed

    log.debug(
        f"Dependency repair finished: {report.total_fixes} fix(es) across "
        f"{report.tasks_fixed} task(s) and {report.subtasks_fixed} subtask(s)"
    )
    return report


def validate_and_fix_dependencies(
    tasks: Sequence[Task],
    persist: Optional[PersistCallback] = None,
    logger: Optional[logging.Logger] = None,
) -> bool:
    """Repair dependencies in place and hand changed data to ``persist``.

    Safe to call speculatively: input that is not a sequence of tasks is a
    logged no-op. ``persist`` is called once, only when something changed.

    Args:
        tasks: Task collection; modified in place
        persist: Callback that writes the collection back (e.g. to tasks.json)
        logger: Logger for per-fix messages

    Returns:
        True if any dependency list was changed
    """
    log = logger or module_logger
    log.debug("Validating and fixing dependencies...")

    report = repair_dependencies(tasks, logger=log)
    if report.changed and persist is not None:
        persist(tasks)
        log.debug("Saved dependency fixes")

    return report.changed
