# tests/test_task_parser.py

from __future__ import annotations

from datetime import datetime

import pytest

from models import Task
from task_parser import (
    create_task,
    extract_category,
    extract_priority,
    extract_time,
    next_task_id,
    parse,
    weekday_offset,
)


def test_full_example(now) -> None:
    p = parse("Buy milk tomorrow #shopping !high", now)
    assert p.text == "Buy milk"
    assert p.priority == "high"
    assert p.category == "shopping"
    assert p.due_date == "2026-10-22"
    assert p.due_time == ""


@pytest.mark.parametrize("token,expected", [("!high", "high"), ("!Medium", "medium"), ("!LOW", "low")])
def test_priority_token_is_extracted_and_removed(now, token, expected) -> None:
    p = parse(f"Write report {token} soon", now)
    assert p.priority == expected
    assert token not in p.text
    assert p.text == "Write report soon"


def test_default_priority_when_no_token(now) -> None:
    assert parse("Water plants", now).priority == "medium"
    assert parse("Water plants", now, default_priority="low").priority == "low"


def test_unknown_default_priority_falls_back_to_medium(now) -> None:
    assert parse("Water plants", now, default_priority="urgent").priority == "medium"


def test_category_keeps_case_and_only_first_is_taken(now) -> None:
    p = parse("Plan trip #Travel #later", now)
    assert p.category == "Travel"
    assert p.text == "Plan trip #later"


def test_call_mom_at_3pm(now) -> None:
    p = parse("Call mom at 3pm", now)
    assert p.due_time == "15:00"
    assert "3pm" not in p.text and "3 pm" not in p.text
    assert p.text == "Call mom"


def test_weekday_from_wednesday(now) -> None:
    assert now.strftime("%A") == "Wednesday"
    p = parse("Team sync monday 9am", now)
    assert p.due_date == "2026-10-26"
    assert p.due_time == "09:00"
    assert p.text == "Team sync"


def test_same_weekday_means_next_week(now) -> None:
    assert parse("Review Wednesday", now).due_date == "2026-10-28"


@pytest.mark.parametrize("target", range(7))
@pytest.mark.parametrize("current", range(7))
def test_weekday_offset_law(target, current) -> None:
    offset = weekday_offset(target, current)
    assert 1 <= offset <= 7
    assert (current + offset) % 7 == target
    if target == current:
        assert offset == 7


def test_today_keyword(now) -> None:
    p = parse("Pay rent TODAY", now)
    assert p.due_date == "2026-10-21"
    assert p.text == "Pay rent"


def test_only_keywords_leaves_empty_text(now) -> None:
    p = parse("tomorrow", now)
    assert p.text == ""
    assert p.is_empty
    assert p.due_date == "2026-10-22"


@pytest.mark.parametrize("raw,expected", [
    ("Standup 9:15", "09:15"),
    ("Gym 7:30pm", "19:30"),
    ("Lunch 12pm", "12:00"),
    ("Backup 12am", "00:00"),
    ("Dentist 11 AM", "11:00"),
    ("Train 14:05", "14:05"),
])
def test_time_formats(now, raw, expected) -> None:
    assert parse(raw, now).due_time == expected


def test_whitespace_is_collapsed(now) -> None:
    p = parse("  Fix   the   sink  !low   #home  ", now)
    assert p.text == "Fix the sink"


# Documented current behaviour, not guaranteed-correct behaviour.

def test_weekday_overwrites_relative_day(now) -> None:
    p = parse("Send invoice tomorrow friday", now)
    assert p.due_date == "2026-10-23"


def test_bare_number_is_read_as_time(now) -> None:
    p = parse("Buy 2 apples", now)
    assert p.due_time == "02:00"
    assert p.text == "Buy apples"


def test_out_of_range_number_is_not_validated(now) -> None:
    assert parse("Order 30 chairs", now).due_time == "30:00"


# -------------------- individual extractors --------------------

def test_extractors_return_residual_untouched_on_miss() -> None:
    assert extract_priority("no marker") == (None, "no marker")
    assert extract_category("no tag") == (None, "no tag")
    assert extract_time("no digits") == (None, "no digits")


def test_priority_runs_before_category() -> None:
    value, rest = extract_priority("#x!high")
    assert value == "high"
    assert extract_category(rest)[0] == "x"


# -------------------- task creation --------------------

def test_create_task_stamps_defaults(now) -> None:
    task = create_task(parse("Call mom at 3pm #family", now), now)
    assert isinstance(task, Task)
    assert task.text == "Call mom"
    assert task.category == "family"
    assert task.due_time == "15:00"
    assert task.done is False
    assert task.completed_at is None
    assert task.order == 0
    assert task.recurring is False
    assert task.recurrence == ""
    assert task.created_at == now.isoformat()


def test_create_task_ids_are_unique_for_same_instant(now) -> None:
    parsed = parse("x", now)
    a = create_task(parsed, now)
    b = create_task(parsed, now)
    assert b.id > a.id


def test_next_task_id_is_timestamp_derived() -> None:
    stamp = datetime(2030, 1, 1, 0, 0)
    assert next_task_id(stamp) >= int(stamp.timestamp() * 1000)


def test_explicit_task_id(now) -> None:
    assert create_task(parse("x", now), now, task_id=42).id == 42
