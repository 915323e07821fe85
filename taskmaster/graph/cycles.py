"""Dependency graph construction and cycle detection."""

import logging
from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Optional

from ..tasks.finder import iter_nodes
from ..tasks.ids import Identifier, parse_identifier
from ..tasks.models import Task

logger = logging.getLogger(__name__)

EdgeMap = Mapping[Hashable, Sequence[Hashable]]
Edge = tuple[Hashable, Hashable]


def build_dependency_graph(
    tasks: Sequence[Task],
    resolved_only: bool = True,
    include_self: bool = False,
) -> dict[Identifier, list[Identifier]]:
    """Build an adjacency map from every node to the nodes it depends on.

    Args:
        tasks: Task collection
        resolved_only: Drop edges whose target is not a task or subtask
        include_self: Keep edges from a node to itself

    Returns:
        Mapping of node id to de-duplicated dependency ids, in task order
    """
    nodes = list(iter_nodes(tasks))
    known = {node_id for node_id, _ in nodes}
    graph: dict[Identifier, list[Identifier]] = {}

    for node_id, node in nodes:
        # Nodes sharing an id are treated as one node with the union of their edges
        targets: list[Identifier] = graph.get(node_id, [])
        for dep in node.dependencies:
            if dep in targets:
                continue
            if dep == node_id and not include_self:
                continue
            if resolved_only and dep not in known:
                continue
            targets.append(dep)
        graph[node_id] = targets

    return graph


def _merge_edges(edge_map: EdgeMap, extra_edges: Optional[EdgeMap]) -> dict[Hashable, list[Hashable]]:
    graph = {node: list(targets) for node, targets in edge_map.items()}
    for node, targets in (extra_edges or {}).items():
        graph.setdefault(node, []).extend(targets)
    return graph


def _walk(
    graph: Mapping[Hashable, Sequence[Hashable]],
    start: Hashable,
    visited: set,
    recursion_stack: set,
    back_edges: list[Edge],
    stop_at_first: bool,
) -> None:
    """Depth-first walk from ``start`` recording edges that close a cycle.

    Uses an explicit stack so long dependency chains do not hit the
    interpreter recursion limit.
    """
    visited.add(start)
    recursion_stack.add(start)
    stack = [(start, iter(graph.get(start, ())))]

    while stack:
        node, targets = stack[-1]
        descended = False
        for target in targets:
            if target in recursion_stack:
                back_edges.append((node, target))
                if stop_at_first:
                    return
            elif target not in visited:
                visited.add(target)
                recursion_stack.add(target)
                stack.append((target, iter(graph.get(target, ()))))
                descended = True
                break
        if not descended:
            stack.pop()
            recursion_stack.discard(node)


def has_cycle(
    edge_map: EdgeMap,
    start_node: Optional[Hashable] = None,
    extra_edges: Optional[EdgeMap] = None,
) -> bool:
    """Check a directed graph for cycles.

    Args:
        edge_map: Mapping of node to the nodes it points at
        start_node: Only search from this node; scan every node when omitted
        extra_edges: Proposed edges treated as already present

    Returns:
        True if a cycle is reachable (from ``start_node`` when given)
    """
    graph = _merge_edges(edge_map, extra_edges)
    visited: set = set()
    recursion_stack: set = set()
    back_edges: list[Edge] = []

    if start_node is not None:
        _walk(graph, start_node, visited, recursion_stack, back_edges, stop_at_first=True)
        return bool(back_edges)

    for node in graph:
        if node in visited:
            continue
        _walk(graph, node, visited, recursion_stack, back_edges, stop_at_first=True)
        if back_edges:
            return True
    return False


def find_cycle_edges(edge_map: EdgeMap) -> list[Edge]:
    """Return every edge that closes a cycle during one full DFS scan.

    Removing all returned edges leaves the graph acyclic. Edges are listed in
    discovery order, which follows the iteration order of ``edge_map``.
    """
    graph = _merge_edges(edge_map, None)
    visited: set = set()
    recursion_stack: set = set()
    back_edges: list[Edge] = []

    for node in graph:
        if node not in visited:
            _walk(graph, node, visited, recursion_stack, back_edges, stop_at_first=False)

    return back_edges


def is_circular_dependency(
    tasks: Sequence[Task],
    task_id: object,
    chain: Optional[Iterable[object]] = None,
) -> bool:
    """Check whether following dependencies from ``task_id`` loops.

    The walk is circular when it revisits ``task_id``, any id in ``chain``,
    or any other node already on the current path. Passing the dependent as
    ``chain`` answers "would making ``chain[0]`` depend on ``task_id`` close a
    cycle".

    Args:
        tasks: Task collection
        task_id: Node to start from
        chain: Ids already on the dependency path

    Returns:
        True if a circular dependency is found
    """
    start = parse_identifier(task_id)
    on_path = {parse_identifier(item) for item in chain or ()}
    graph = build_dependency_graph(tasks, include_self=True)
    # Each chain member "depends on" the start node, so reaching one closes a loop
    proposed = {member: [start] for member in on_path}
    return has_cycle(graph, start_node=start, extra_edges=proposed)
