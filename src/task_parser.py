"""Free-text task parser.

Each extractor takes the text left over by the previous one and returns
(extracted value or None, residual text). `parse` runs them in a fixed
order: priority, category, relative day, time of day, weekday. The order
matters because later rules see only what earlier rules left behind.
"""
from __future__ import annotations
import logging
import re
import time
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from models import DEFAULT_PRIORITY, PRIORITIES, ParsedTask, Task

logger = logging.getLogger(__name__)

PRIORITY_RE = re.compile(r"!(high|medium|low)\b", re.IGNORECASE)
CATEGORY_RE = re.compile(r"#(\w+)")
TODAY_RE = re.compile(r"\btoday\b", re.IGNORECASE)
TOMORROW_RE = re.compile(r"\btomorrow\b", re.IGNORECASE)
# a standalone "at" right before the time is part of the time phrase
TIME_RE = re.compile(r"(?:\bat\s+)?(\d{1,2})(?::(\d{2}))?\s*(am|pm)?", re.IGNORECASE)
WEEKDAY_RE = re.compile(
    r"\b(sunday|monday|tuesday|wednesday|thursday|friday|saturday)\b", re.IGNORECASE
)
# Sunday first, as the day-offset formula expects.
WEEKDAYS: Tuple[str, ...] = (
    "sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday",
)

Extracted = Tuple[Optional[str], str]


def _cut(text: str, match: "re.Match[str]") -> str:
    return text[:match.start()] + " " + text[match.end():]


def _clean(text: str) -> str:
    return " ".join(text.split())


# -------------------- extractors --------------------
def extract_priority(text: str) -> Extracted:
    m = PRIORITY_RE.search(text)
    if not m:
        return None, text
    return m.group(1).lower(), _cut(text, m)


def extract_category(text: str) -> Extracted:
    """First #word wins; case is kept as typed."""
    m = CATEGORY_RE.search(text)
    if not m:
        return None, text
    return m.group(1), _cut(text, m)


def extract_relative_day(text: str, today: date) -> Extracted:
    """`today` is checked before `tomorrow`; only one is consumed."""
    m = TODAY_RE.search(text)
    if m:
        return today.isoformat(), _cut(text, m)
    m = TOMORROW_RE.search(text)
    if m:
        return (today + timedelta(days=1)).isoformat(), _cut(text, m)
    return None, text


def extract_time(text: str) -> Extracted:
    """First H, H:MM, Ham/pm or H:MMam/pm in the text, as "HH:MM".

    Any bare number qualifies, so "Buy 2 apples" yields "02:00". Hours and
    minutes are not range checked.
    """
    m = TIME_RE.search(text)
    if not m:
        return None, text
    hours = int(m.group(1))
    minutes = m.group(2) or "00"
    meridiem = m.group(3)
    if meridiem:
        is_pm = meridiem.lower() == "pm"
        if is_pm and hours < 12:
            hours += 12
        if not is_pm and hours == 12:
            hours = 0
    return f"{hours:02d}:{minutes}", _cut(text, m)


def weekday_offset(target_day: int, current_day: int) -> int:
    """Days until the next `target_day` (0=Sunday); never 0, today maps to a week ahead."""
    return (target_day - current_day + 7) % 7 or 7


def extract_weekday(text: str, today: date) -> Extracted:
    m = WEEKDAY_RE.search(text)
    if not m:
        return None, text
    target = WEEKDAYS.index(m.group(1).lower())
    current = (today.weekday() + 1) % 7  # date.weekday() is Monday=0
    due = today + timedelta(days=weekday_offset(target, current))
    return due.isoformat(), _cut(text, m)


# -------------------- pipeline --------------------
def parse(raw_text: str, now: Optional[datetime] = None,
          default_priority: str = DEFAULT_PRIORITY) -> ParsedTask:
    """Split raw input into display text and structured fields. Never raises."""
    if now is None:
        now = datetime.now()
    if default_priority not in PRIORITIES:
        default_priority = DEFAULT_PRIORITY
    today = now.date()
    text = raw_text.strip()

    priority, text = extract_priority(text)
    category, text = extract_category(text)
    due_date, text = extract_relative_day(text, today)
    due_time, text = extract_time(text)
    weekday_date, text = extract_weekday(text, today)
    if weekday_date:
        # applied last, so it overwrites a today/tomorrow date
        due_date = weekday_date

    parsed = ParsedTask(
        text=_clean(text),
        priority=priority or default_priority,
        category=category or "",
        due_date=due_date or "",
        due_time=due_time or "",
    )
    logger.debug("parsed %r -> %s", raw_text, parsed)
    return parsed


# -------------------- task creation --------------------
_last_id = 0


def next_task_id(now: Optional[datetime] = None, above: int = 0) -> int:
    """Millisecond timestamp id, bumped so ids stay strictly increasing in-process.

    `above` is the largest id already in use (e.g. loaded from disk); the
    result is always greater than it.
    """
    global _last_id
    stamp = int((now.timestamp() if now else time.time()) * 1000)
    _last_id = max(stamp, _last_id + 1, above + 1)
    return _last_id


def create_task(parsed: ParsedTask, now: Optional[datetime] = None,
                task_id: Optional[int] = None) -> Task:
    """Stamp a parsed value into a fresh, not yet inserted Task (order=0)."""
    if now is None:
        now = datetime.now()
    return Task(
        id=task_id if task_id is not None else next_task_id(now),
        text=parsed.text,
        done=False,
        priority=parsed.priority,
        category=parsed.category,
        due_date=parsed.due_date,
        due_time=parsed.due_time,
        recurring=False,
        recurrence="",
        created_at=now.isoformat(),
        completed_at=None,
        order=0,
    )
