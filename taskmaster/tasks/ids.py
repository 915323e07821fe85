"""Task and subtask identifiers.

Identifiers arrive from JSON and from the command line as ints, numeric
strings or dotted ``"parent.sub"`` strings. Everything that compares ids goes
through :func:`parse_identifier` so that ``1`` and ``"1"`` are the same node.
"""

from dataclasses import dataclass
from typing import Union


class MalformedIdentifier(ValueError):
    """Identifier that cannot be parsed."""

    def __init__(self, raw: object, reason: str = "not a task or subtask id"):
        self.raw = raw
        super().__init__(f"Malformed task identifier {raw!r}: {reason}")


@dataclass(frozen=True)
class TaskRef:
    """Reference to a top-level task."""

    task_id: int

    def __str__(self) -> str:
        return str(self.task_id)


@dataclass(frozen=True)
class SubtaskRef:
    """Reference to subtask ``subtask_id`` of task ``parent_id``."""

    parent_id: int
    subtask_id: int

    @property
    def parent(self) -> TaskRef:
        return TaskRef(self.parent_id)

    def __str__(self) -> str:
        return f"{self.parent_id}.{self.subtask_id}"


Identifier = Union[TaskRef, SubtaskRef]


def _parse_number(part: object, raw: object) -> int:
    if isinstance(part, bool):
        raise MalformedIdentifier(raw, "booleans are not ids")
    if isinstance(part, int):
        if part < 0:
            raise MalformedIdentifier(raw, "ids cannot be negative")
        return part
    if isinstance(part, str):
        text = part.strip()
        if not text:
            raise MalformedIdentifier(raw, "empty id")
        if not (text.isascii() and text.isdigit()):
            raise MalformedIdentifier(raw, "ids must be numeric")
        return int(text)
    raise MalformedIdentifier(raw, f"unsupported type {type(part).__name__}")


def parse_identifier(raw: object) -> Identifier:
    """Parse a raw id into a TaskRef or SubtaskRef.

    Args:
        raw: int, numeric string, ``"P.S"`` string, ``(P, S)`` pair, or an
            already-parsed identifier

    Returns:
        Parsed identifier

    Raises:
        MalformedIdentifier: If the input is empty, non-numeric, or has more
            than one dot
    """
    if isinstance(raw, (TaskRef, SubtaskRef)):
        return raw

    if isinstance(raw, tuple):
        if len(raw) != 2:
            raise MalformedIdentifier(raw, "pairs must have exactly two parts")
        return SubtaskRef(_parse_number(raw[0], raw), _parse_number(raw[1], raw))

    if isinstance(raw, str):
        parts = raw.strip().split(".")
        if len(parts) == 1:
            return TaskRef(_parse_number(parts[0], raw))
        if len(parts) == 2:
            return SubtaskRef(_parse_number(parts[0], raw), _parse_number(parts[1], raw))
        raise MalformedIdentifier(raw, "too many dots")

    return TaskRef(_parse_number(raw, raw))


def format_identifier(identifier: Identifier) -> int | str:
    """Render an identifier in the canonical JSON form.

    Plain task ids render as ints, subtask ids as ``"P.S"`` strings.
    """
    if isinstance(identifier, SubtaskRef):
        return str(identifier)
    return identifier.task_id


def identifier_sort_key(identifier: Identifier) -> tuple[int, int, int]:
    """Sort key placing task ids before subtask ids, then numerically."""
    if isinstance(identifier, SubtaskRef):
        return (1, identifier.parent_id, identifier.subtask_id)
    return (0, identifier.task_id, 0)


def subtask_ref(parent_id: object, subtask_id: object) -> SubtaskRef:
    """Build a SubtaskRef from loosely typed parent/subtask ids."""
    return SubtaskRef(_parse_number(parent_id, parent_id), _parse_number(subtask_id, subtask_id))
