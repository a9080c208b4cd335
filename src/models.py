"""Data models for the quicktask application.

Exposes the Task dataclass plus the ParsedTask value produced by the
parser. Dates and timestamps are kept as ISO strings (empty string or
None for "unset") so the stored JSON mirrors the dataclass one to one.
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Tuple

PRIORITIES: Tuple[str, ...] = ("high", "medium", "low")
VIEWS: Tuple[str, ...] = ("all", "today", "week", "overdue", "completed")
DEFAULT_PRIORITY = "medium"


@dataclass
class ParsedTask:
    """Fields extracted from one raw input line."""
    text: str
    priority: str = DEFAULT_PRIORITY
    category: str = ""
    due_date: str = ""
    due_time: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.text


@dataclass
class Task:
    """A single to-do item.

    Fields:
        id: Unique integer id (millisecond timestamp derived).
        text: Display text with all recognized tokens stripped.
        done: Completion flag.
        priority: One of: "high", "medium", "low".
        category: "" means no category.
        due_date: ISO date ("2026-10-20") or "".
        due_time: "HH:MM" 24h or "" (all day).
        recurring / recurrence: reserved, never set by the parser.
        created_at: ISO timestamp set once at creation.
        completed_at: ISO timestamp while done, None otherwise.
        order: Manual display position, dense 0..n-1 across the list.
    """
    id: int
    text: str
    done: bool = False
    priority: str = DEFAULT_PRIORITY
    category: str = ""
    due_date: str = ""
    due_time: str = ""
    recurring: bool = False
    recurrence: str = ""
    created_at: Optional[str] = None
    completed_at: Optional[str] = None
    order: int = 0

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Task(id={self.id}, text={self.text}, order={self.order}, done={self.done})"


_TASK_FIELDS = tuple(f.name for f in fields(Task))


def task_to_dict(task: Task) -> Dict[str, Any]:
    return {name: getattr(task, name) for name in _TASK_FIELDS}


def task_from_dict(raw: Mapping[str, Any]) -> Task:
    """Build a Task from stored data; unknown keys are dropped, missing ones defaulted."""
    kwargs = {name: raw[name] for name in _TASK_FIELDS if name in raw}
    return Task(**kwargs)
