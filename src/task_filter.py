"""Filtering, ordering and manual reordering of the task collection.

`apply` is pure: it reads the collection and returns a new list. The
reorder helpers return new lists too; the caller decides whether to keep
them (TaskList does, in place of its own list).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from models import PRIORITIES, VIEWS, Task

logger = logging.getLogger(__name__)

WEEK = timedelta(days=7)


@dataclass(frozen=True)
class FilterSpec:
    """What to show. Empty strings mean "no constraint"."""
    view: str = "all"
    category: str = ""
    priority: str = ""
    search: str = ""

    def describe(self) -> str:
        parts = [self.view]
        if self.category:
            parts.append(f"#{self.category}")
        if self.priority:
            parts.append(f"!{self.priority}")
        if self.search:
            parts.append(f'"{self.search}"')
        return " ".join(parts)


# -------------------- predicates --------------------
def due_instant(task: Task) -> Optional[datetime]:
    """Local midnight of the due date plus the due time, if any.

    Time parts are added as a duration, so an hour of 30 rolls over to
    06:00 the next day.
    """
    if not task.due_date:
        return None
    try:
        due = datetime.combine(date.fromisoformat(task.due_date), datetime.min.time())
    except (TypeError, ValueError):
        logger.debug("task %s has unreadable due_date %r", task.id, task.due_date)
        return None
    if task.due_time:
        hours, _, minutes = task.due_time.partition(":")
        try:
            due += timedelta(hours=int(hours), minutes=int(minutes or 0))
        except ValueError:
            logger.debug("task %s has unreadable due_time %r", task.id, task.due_time)
    return due


def _due_day(task: Task) -> Optional[datetime]:
    if not task.due_date:
        return None
    try:
        return datetime.combine(date.fromisoformat(task.due_date), datetime.min.time())
    except (TypeError, ValueError):
        return None


def is_today(task: Task, now: datetime) -> bool:
    return bool(task.due_date) and task.due_date == now.date().isoformat()


def is_this_week(task: Task, now: datetime) -> bool:
    """Due date (as midnight, time ignored) within [now, now + 7 days]."""
    due = _due_day(task)
    return due is not None and now <= due <= now + WEEK


def is_overdue(task: Task, now: datetime) -> bool:
    if task.done:
        return False
    due = due_instant(task)
    return due is not None and due < now


# -------------------- pipeline --------------------
def _view_predicate(view: str):
    if view == "today":
        return is_today
    if view == "week":
        return is_this_week
    if view == "overdue":
        return is_overdue
    if view == "completed":
        return lambda t, now: t.done
    # "all" means all incomplete tasks
    return lambda t, now: not t.done


def apply(tasks: Iterable[Task], spec: Optional[FilterSpec] = None,
          now: Optional[datetime] = None) -> List[Task]:
    """Filter by view, category, priority and search text, then sort by order."""
    if spec is None:
        spec = FilterSpec()
    if now is None:
        now = datetime.now()
    if spec.view not in VIEWS:
        logger.debug("unknown view %r, showing all", spec.view)
    keep = _view_predicate(spec.view)

    result = [t for t in tasks if keep(t, now)]
    if spec.category:
        result = [t for t in result if t.category == spec.category]
    if spec.priority:
        if spec.priority not in PRIORITIES:
            logger.debug("priority filter %r matches nothing", spec.priority)
        result = [t for t in result if t.priority == spec.priority]
    if spec.search:
        needle = spec.search.lower()
        result = [t for t in result if needle in t.text.lower()]
    result.sort(key=lambda t: t.order)
    return result


# -------------------- ordering --------------------
def renumber(tasks: Sequence[Task]) -> None:
    """Set each task's order to its list position (0..n-1)."""
    for index, task in enumerate(tasks):
        task.order = index


def reorder(tasks: Sequence[Task], permutation: Iterable[int]) -> List[Task]:
    """Commit a drag-and-drop result.

    The tasks named in `permutation` are laid back into the slots they
    held before, in their new sequence; tasks not named keep their slots.
    Unknown and repeated ids are ignored. The returned list is renumbered
    as a whole, so order is always a permutation of 0..n-1.
    """
    ordered = sorted(tasks, key=lambda t: t.order)
    by_id = {t.id: t for t in ordered}
    moved: List[Task] = []
    seen = set()
    for task_id in permutation:
        if task_id in seen or task_id not in by_id:
            logger.debug("reorder ignores id %r", task_id)
            continue
        seen.add(task_id)
        moved.append(by_id[task_id])

    slots = [i for i, t in enumerate(ordered) if t.id in seen]
    result = list(ordered)
    for slot, task in zip(slots, moved):
        result[slot] = task
    renumber(result)
    return result
