"""Persistence helpers (load/save/archive) for the task list.

Everything lives in one JSON document with fixed keys:
"tasks" (list of task dicts), "analytics" and "last_reset". A failed
save is logged and reported, never raised: the in-memory list stays the
source of truth.
"""
import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Mapping

from models import Task, task_from_dict, task_to_dict

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
ANALYTICS_KEY = "analytics"
LAST_RESET_KEY = "last_reset"

StateDict = Dict[str, Any]


def default_analytics() -> Dict[str, int]:
    return {"sessions": 0, "completed_today": 0}


def empty_state() -> StateDict:
    return {TASKS_KEY: [], ANALYTICS_KEY: default_analytics(), LAST_RESET_KEY: None}


class Storage:
    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> StateDict:
        """Load the state document from disk.

        Missing file -> empty state. An unreadable or corrupt file is
        logged and also yields an empty state.
        """
        if not self.path.exists():
            return empty_state()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("could not read %s, starting empty", self.path)
            return empty_state()
        if not isinstance(data, dict):
            logger.error("unexpected document in %s, starting empty", self.path)
            return empty_state()
        state = empty_state()
        raw_tasks = data.get(TASKS_KEY)
        if isinstance(raw_tasks, list):
            state[TASKS_KEY] = [t for t in raw_tasks if isinstance(t, dict)]
        elif raw_tasks is not None:
            logger.error("%r in %s is not a list, ignoring it", TASKS_KEY, self.path)
        analytics = data.get(ANALYTICS_KEY)
        if isinstance(analytics, dict):
            state[ANALYTICS_KEY].update((k, v) for k, v in analytics.items() if isinstance(v, int))
        state[LAST_RESET_KEY] = data.get(LAST_RESET_KEY)
        return state

    def save(self, state: Mapping[str, Any]) -> bool:
        """Persist state (pretty-printed). Returns False on failure."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(dict(state), indent=4)
            with open(self.path, 'w', encoding='utf-8') as f:
                f.write(payload)
        except (OSError, TypeError, ValueError):
            logger.exception("could not save tasks to %s", self.path)
            return False
        logger.debug("saved %d tasks to %s", len(state.get(TASKS_KEY, [])), self.path)
        return True


def tasks_to_list(tasks: List[Task]) -> List[Dict[str, Any]]:
    return [task_to_dict(t) for t in tasks]


_STR_FIELDS = ('text', 'category', 'due_date', 'due_time', 'priority')


def tasks_from_list(raw_tasks: List[Mapping[str, Any]]) -> List[Task]:
    """Rebuild tasks; entries with a missing or mistyped field are skipped."""
    tasks: List[Task] = []
    seen_ids = set()
    for raw in raw_tasks:
        if (not isinstance(raw, Mapping) or not isinstance(raw.get('id'), int)
                or not isinstance(raw.get('text'), str)):
            logger.warning("skipping malformed task entry %r", raw)
            continue
        if any(k in raw and not isinstance(raw[k], str) for k in _STR_FIELDS):
            logger.warning("skipping task entry with non-text field %r", raw)
            continue
        if 'order' in raw and not isinstance(raw['order'], int):
            logger.warning("skipping task entry with bad order %r", raw)
            continue
        if raw['id'] in seen_ids:
            logger.warning("skipping task entry with duplicate id %r", raw['id'])
            continue
        seen_ids.add(raw['id'])
        tasks.append(task_from_dict(raw))
    return tasks


def is_stale(task: Task, now: datetime, days: int) -> bool:
    """True if a done task's completed_at is more than `days` before `now`."""
    if not task.done or not task.completed_at:
        return False
    try:
        completed = datetime.fromisoformat(task.completed_at)
    except (TypeError, ValueError):
        return False
    return (now - completed) > timedelta(days=days)
