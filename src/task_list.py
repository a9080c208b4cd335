"""Task list state: the single ordered collection, its mutations and rendering.

The list is kept in manual order (head first) and every mutation
renumbers `order` to match list position. Parsing and filtering are
delegated to task_parser / task_filter; this module only owns state.
"""
from __future__ import annotations
import copy
import logging
import shutil
import textwrap
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

import click

import task_filter
import task_parser
from models import DEFAULT_PRIORITY, PRIORITIES, Task
from storage import (ANALYTICS_KEY, LAST_RESET_KEY, TASKS_KEY, default_analytics, is_stale,
                     tasks_from_list, tasks_to_list)
from task_filter import FilterSpec
from theme import (CATEGORY_COLOR, DONE_COLOR, EMPTY_COLOR, HEADER_COLOR, ID_COLOR, OVERDUE_COLOR,
                   PRIORITY_COLOR, color)

logger = logging.getLogger(__name__)

QUICK_CATEGORY_LIMIT = 5


@dataclass
class DeletedTask:
    """Undo buffer entry: a copy of the task and the index it was removed from."""
    task: Task
    index: int


class TaskList:
    def __init__(self, state: Optional[Mapping[str, Any]] = None,
                 default_priority: str = DEFAULT_PRIORITY):
        self.tasks: List[Task] = []
        self.default_priority = default_priority if default_priority in PRIORITIES else DEFAULT_PRIORITY
        self.analytics: Dict[str, int] = default_analytics()
        self.last_reset: Optional[str] = None
        self.deleted: Optional[DeletedTask] = None
        if state:
            self._load_from_dict(state)

    # -------------------- loading --------------------
    def _load_from_dict(self, state: Mapping[str, Any]) -> None:
        tasks = tasks_from_list(state.get(TASKS_KEY) or [])
        tasks.sort(key=lambda t: t.order)
        self.tasks = tasks
        task_filter.renumber(self.tasks)
        self.analytics.update(state.get(ANALYTICS_KEY) or {})
        self.last_reset = state.get(LAST_RESET_KEY)

    # -------------------- queries --------------------
    def get(self, task_id: int) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def _index_of(self, task_id: int) -> int:
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                return index
        return -1

    def visible(self, spec: Optional[FilterSpec] = None, now: Optional[datetime] = None) -> List[Task]:
        return task_filter.apply(self.tasks, spec, now)

    @property
    def all_done(self) -> bool:
        return bool(self.tasks) and all(t.done for t in self.tasks)

    def categories(self) -> List[str]:
        """Distinct non-empty categories in first-seen order."""
        seen: Dict[str, None] = {}
        for task in self.tasks:
            if task.category:
                seen.setdefault(task.category, None)
        return list(seen)

    def quick_categories(self) -> List[str]:
        return self.categories()[:QUICK_CATEGORY_LIMIT]

    def stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        now = now or datetime.now()
        done = sum(1 for t in self.tasks if t.done)
        return {
            'total': len(self.tasks),
            'done': done,
            'pending': len(self.tasks) - done,
            'overdue': sum(1 for t in self.tasks if task_filter.is_overdue(t, now)),
        }

    def analytics_report(self) -> Dict[str, int]:
        completed = sum(1 for t in self.tasks if t.done)
        pending = len(self.tasks) - completed
        report = {
            'completed': completed,
            'pending': pending,
            'rate': round(completed / len(self.tasks) * 100) if self.tasks else 0,
            'completed_today': self.analytics.get('completed_today', 0),
            'sessions': self.analytics.get('sessions', 0),
        }
        for priority in PRIORITIES:
            report[priority] = sum(1 for t in self.tasks if t.priority == priority and not t.done)
        return report

    # -------------------- task operations --------------------
    def add(self, raw_text: str, now: Optional[datetime] = None) -> Optional[Task]:
        """Parse and insert at the head. Blank input is rejected with None."""
        if not raw_text or not raw_text.strip():
            logger.debug("rejected empty task input")
            return None
        now = now or datetime.now()
        parsed = task_parser.parse(raw_text, now, self.default_priority)
        if parsed.is_empty:
            logger.info("every word of %r was a keyword, task text is empty", raw_text)
        highest = max((t.id for t in self.tasks), default=0)
        task = task_parser.create_task(parsed, now, task_parser.next_task_id(now, above=highest))
        self.insert(task)
        logger.info("task %s added (priority=%s, due=%s %s)", task.id, task.priority,
                    task.due_date or '-', task.due_time or '')
        return task

    def insert(self, task: Task, index: int = 0) -> None:
        index = max(0, min(index, len(self.tasks)))
        self.tasks.insert(index, task)
        task_filter.renumber(self.tasks)

    def toggle(self, task_id: int, now: Optional[datetime] = None) -> str:
        task = self.get(task_id)
        if task is None:
            return f'Task id {task_id} not found.'
        task.done = not task.done
        if task.done:
            task.completed_at = (now or datetime.now()).isoformat()
            self.analytics['completed_today'] = self.analytics.get('completed_today', 0) + 1
            logger.info("task %s completed", task_id)
            if self.all_done:
                return f'Task "{task.text}" done. All clear!'
            return f'Task "{task.text}" done.'
        task.completed_at = None
        logger.info("task %s reopened", task_id)
        return f'Task "{task.text}" reopened.'

    def edit(self, task_id: int, new_text: str) -> str:
        """Replace the display text verbatim; blank or unchanged text is a no-op."""
        task = self.get(task_id)
        if task is None:
            return f'Task id {task_id} not found.'
        text = new_text.strip()
        if not text or text == task.text:
            return 'Nothing changed.'
        task.text = text
        logger.info("task %s edited", task_id)
        return 'Task updated.'

    def delete(self, task_id: int) -> str:
        """Remove a task; it replaces whatever the undo buffer held."""
        index = self._index_of(task_id)
        if index < 0:
            return f'Task id {task_id} not found.'
        task = self.tasks.pop(index)
        self.deleted = DeletedTask(task=copy.copy(task), index=index)
        task_filter.renumber(self.tasks)
        logger.info("task %s deleted from index %d", task_id, index)
        return f'Task "{task.text}" deleted. Type "undo" to restore.'

    def undo_delete(self) -> str:
        if self.deleted is None:
            return 'Nothing to undo.'
        entry, self.deleted = self.deleted, None
        self.insert(entry.task, entry.index)
        logger.info("task %s restored at index %d", entry.task.id, entry.index)
        return f'Task "{entry.task.text}" restored.'

    def reverse(self) -> None:
        self.tasks.reverse()
        task_filter.renumber(self.tasks)

    def reorder(self, permutation: Iterable[int]) -> None:
        self.tasks = task_filter.reorder(self.tasks, permutation)

    def move(self, task_id: int, position: int, spec: Optional[FilterSpec] = None,
             now: Optional[datetime] = None) -> str:
        """Drag-and-drop equivalent: move within the visible list, then commit the order."""
        shown = self.visible(spec, now)
        ids = [t.id for t in shown]
        if task_id not in ids:
            return f'Task id {task_id} not visible.'
        ids.remove(task_id)
        position = max(0, min(position, len(ids)))
        ids.insert(position, task_id)
        self.reorder(ids)
        return 'Order saved.'

    def archive_completed(self, days: int, now: Optional[datetime] = None) -> int:
        """Drop done tasks completed more than `days` ago; returns how many went."""
        now = now or datetime.now()
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if not is_stale(t, now, days)]
        task_filter.renumber(self.tasks)
        removed = before - len(self.tasks)
        if removed:
            logger.info("archived %d completed tasks", removed)
        return removed

    def daily_reset(self, today: Optional[date] = None) -> bool:
        """Zero the per-day counters once per calendar day."""
        stamp = (today or date.today()).isoformat()
        if self.last_reset == stamp:
            return False
        self.analytics['completed_today'] = 0
        self.analytics['sessions'] = 0
        self.last_reset = stamp
        return True

    # -------------------- serialization --------------------
    def get_state(self) -> Dict[str, Any]:
        return {
            TASKS_KEY: tasks_to_list(self.tasks),
            ANALYTICS_KEY: dict(self.analytics),
            LAST_RESET_KEY: self.last_reset,
        }

    # -------------------- display --------------------
    def render_lines(self, shown: List[Task], now: Optional[datetime] = None,
                     width: Optional[int] = None) -> List[str]:
        """One numbered entry per shown task; numbers are what the CLI refers to."""
        now = now or datetime.now()
        if width is None:
            width = shutil.get_terminal_size((100, 30)).columns
        lines: List[str] = []
        for number, task in enumerate(shown, start=1):
            lines.extend(self._render_task(number, task, now, width))
        return lines

    def _render_task(self, number: int, task: Task, now: datetime, width: int) -> List[str]:
        prefix = f"{number:>3}. [{'x' if task.done else ' '}] "
        body = task.text or '<untitled>'
        meta: List[str] = []
        if task.category:
            meta.append(color(f"#{task.category}", CATEGORY_COLOR))
        if task.due_date:
            label = format_due(task.due_date, now)
            if task.due_time:
                label += f" {task.due_time}"
            if task_filter.is_overdue(task, now):
                meta.append(color(label, OVERDUE_COLOR))
            else:
                meta.append(label)
        if task.recurring and task.recurrence:
            meta.append(task.recurrence)

        style = DONE_COLOR if task.done else PRIORITY_COLOR.get(task.priority, '')
        wrapped = textwrap.wrap(body, max(10, width - len(prefix))) or [body]
        out = [color(prefix, ID_COLOR) + color(wrapped[0], style)]
        indent = ' ' * len(prefix)
        out.extend(indent + color(line, style) for line in wrapped[1:])
        if meta:
            out.append(indent + '  '.join(meta))
        return out

    def render_stats(self, now: Optional[datetime] = None) -> str:
        s = self.stats(now)
        parts = [f"Total {s['total']}", f"Done {s['done']}", f"Pending {s['pending']}"]
        if s['overdue']:
            parts.append(color(f"Overdue {s['overdue']}", OVERDUE_COLOR))
        return color(' | ', HEADER_COLOR).join(parts)

    def display(self, spec: Optional[FilterSpec] = None, now: Optional[datetime] = None) -> List[Task]:
        """Print the filtered list and return what was shown."""
        spec = spec or FilterSpec()
        now = now or datetime.now()
        shown = self.visible(spec, now)
        click.echo(color(f"Tasks ({spec.describe()})", HEADER_COLOR))
        click.echo(self.render_stats(now))
        click.echo(color('-' * 40, HEADER_COLOR))
        if not shown:
            for line in empty_state_lines(spec, bool(self.tasks), now):
                click.echo(color(line, EMPTY_COLOR))
        else:
            for line in self.render_lines(shown, now):
                click.echo(line)
        quick = self.quick_categories()
        if quick:
            click.echo(color(' '.join(f"#{c}" for c in quick), CATEGORY_COLOR))
        return shown


def format_due(due_date: str, now: datetime) -> str:
    """"Today", "Tomorrow" or a short month/day label."""
    today = now.date()
    if due_date == today.isoformat():
        return 'Today'
    if due_date == (today + timedelta(days=1)).isoformat():
        return 'Tomorrow'
    try:
        d = date.fromisoformat(due_date)
    except ValueError:
        return due_date
    return f"{d:%b} {d.day}"


def suggestions_for_hour(hour: int) -> List[str]:
    if 5 <= hour < 12:
        return ['Morning coffee', 'Check emails', 'Morning exercise']
    if 12 <= hour < 17:
        return ['Lunch break', 'Important calls', 'Meeting prep']
    if 17 <= hour < 21:
        return ['Dinner plans', 'Reading time', 'Evening routine']
    return ['Bedtime routine', 'Tomorrow planning', 'Wind down']


def empty_state_lines(spec: FilterSpec, has_tasks: bool, now: datetime) -> List[str]:
    if spec.search or spec.category or spec.priority or has_tasks:
        return ['No tasks found']
    lines = ['No tasks yet. Start by adding one!', 'Quick suggestions:']
    lines.extend(f"  {s}" for s in suggestions_for_hour(now.hour))
    return lines
