# tests/test_task_list.py

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

import pytest

from models import task_to_dict
from task_filter import FilterSpec
from task_list import TaskList, empty_state_lines, format_due, suggestions_for_hour


@pytest.fixture()
def task_list(now) -> TaskList:
    tl = TaskList()
    for text in ("Read book !low", "Call mom today at 3pm #family", "Buy milk tomorrow #shopping !high"):
        tl.add(text, now)
    return tl


def _orders_are_dense(tl: TaskList) -> bool:
    return [t.order for t in tl.tasks] == list(range(len(tl.tasks)))


def test_add_inserts_at_head_and_renumbers(task_list) -> None:
    assert [t.text for t in task_list.tasks] == ["Buy milk", "Call mom", "Read book"]
    assert _orders_are_dense(task_list)
    assert len({t.id for t in task_list.tasks}) == 3


def test_add_rejects_blank_input(task_list, now) -> None:
    assert task_list.add("   ", now) is None
    assert len(task_list.tasks) == 3


def test_add_accepts_keyword_only_input(now) -> None:
    tl = TaskList()
    task = tl.add("tomorrow", now)
    assert task is not None and task.text == ""


def test_add_logs_keyword_only_input(now, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="task_list"):
        TaskList().add("tomorrow !high", now)
    assert "task text is empty" in caplog.text


def test_add_allocates_ids_above_loaded_ones(make_task, now) -> None:
    far_future = make_task("From another clock", id=10 ** 15, order=0)
    tl = TaskList({"tasks": [task_to_dict(far_future)]})
    added = tl.add("New one", now)
    assert added.id > far_future.id
    assert len({t.id for t in tl.tasks}) == 2


def test_display_writes_through_click(task_list, now, capsys) -> None:
    shown = task_list.display(FilterSpec(), now)
    out = capsys.readouterr().out
    assert [t.text for t in shown] == ["Buy milk", "Call mom", "Read book"]
    assert "Tasks (all)" in out
    assert "Call mom" in out


def test_add_uses_configured_default_priority(now) -> None:
    tl = TaskList(default_priority="high")
    assert tl.add("Plain task", now).priority == "high"


def test_toggle_sets_and_clears_completed_at(task_list, now) -> None:
    task = task_list.tasks[0]
    snapshot = (task.priority, task.category, task.due_date, task.due_time)

    task_list.toggle(task.id, now)
    assert task.done is True
    assert task.completed_at == now.isoformat()
    assert task_list.analytics["completed_today"] == 1

    task_list.toggle(task.id, now)
    assert task.done is False
    assert task.completed_at is None
    assert (task.priority, task.category, task.due_date, task.due_time) == snapshot


def test_toggle_last_open_task_reports_all_clear(task_list, now) -> None:
    messages = [task_list.toggle(t.id, now) for t in list(task_list.tasks)]
    assert "All clear" in messages[-1]
    assert all("All clear" not in m for m in messages[:-1])


def test_toggle_unknown_id(task_list) -> None:
    assert "not found" in task_list.toggle(12345)


def test_edit(task_list) -> None:
    task = task_list.tasks[1]
    assert task_list.edit(task.id, "  Call dad  ") == "Task updated."
    assert task.text == "Call dad"
    assert task_list.edit(task.id, "   ") == "Nothing changed."
    assert task_list.edit(task.id, "Call dad") == "Nothing changed."
    assert task.text == "Call dad"


def test_delete_and_undo_restores_position(task_list) -> None:
    middle = task_list.tasks[1]
    task_list.delete(middle.id)
    assert middle.id not in [t.id for t in task_list.tasks]
    assert _orders_are_dense(task_list)

    task_list.undo_delete()
    assert task_list.tasks[1].id == middle.id
    assert task_list.tasks[1].text == middle.text
    assert _orders_are_dense(task_list)
    assert task_list.undo_delete() == "Nothing to undo."


def test_second_delete_discards_first_undo(task_list) -> None:
    first, second = task_list.tasks[0], task_list.tasks[1]
    task_list.delete(first.id)
    task_list.delete(second.id)
    task_list.undo_delete()
    ids = [t.id for t in task_list.tasks]
    assert second.id in ids
    assert first.id not in ids
    assert task_list.undo_delete() == "Nothing to undo."


def test_reverse(task_list) -> None:
    before = [t.id for t in task_list.tasks]
    task_list.reverse()
    assert [t.id for t in task_list.tasks] == before[::-1]
    assert _orders_are_dense(task_list)


def test_move_within_filtered_view(task_list, now) -> None:
    task_list.add("Pack bags #travel", now)
    spec = FilterSpec(priority="medium")
    last = task_list.visible(spec, now)[-1]
    task_list.move(last.id, 0, spec, now)
    assert task_list.tasks[0].id == last.id
    assert _orders_are_dense(task_list)
    assert task_list.visible(spec, now)[0].id == last.id


def test_move_hidden_task_is_refused(task_list, now) -> None:
    hidden = task_list.tasks[0]
    spec = FilterSpec(category="family")
    assert "not visible" in task_list.move(hidden.id, 0, spec, now)


def test_reorder_keeps_orders_a_permutation(task_list) -> None:
    ids = [t.id for t in task_list.tasks]
    task_list.reorder([ids[2], ids[0]])
    assert sorted(t.order for t in task_list.tasks) == [0, 1, 2]
    assert [t.id for t in task_list.tasks] == [ids[2], ids[1], ids[0]]


def test_archive_completed(task_list, now) -> None:
    old, recent = task_list.tasks[0], task_list.tasks[1]
    task_list.toggle(old.id, now - timedelta(days=3))
    task_list.toggle(recent.id, now - timedelta(days=1))
    assert task_list.archive_completed(2, now) == 1
    ids = [t.id for t in task_list.tasks]
    assert old.id not in ids and recent.id in ids
    assert _orders_are_dense(task_list)


def test_daily_reset_runs_once_per_day(task_list) -> None:
    task_list.analytics.update(completed_today=4, sessions=2)
    assert task_list.daily_reset(date(2026, 10, 21)) is True
    assert task_list.analytics == {"completed_today": 0, "sessions": 0}
    task_list.analytics["sessions"] = 1
    assert task_list.daily_reset(date(2026, 10, 21)) is False
    assert task_list.analytics["sessions"] == 1


def test_categories_and_stats(task_list, now) -> None:
    task_list.add("Buy bread #shopping", now)
    assert task_list.categories() == ["shopping", "family"]
    task_list.toggle(task_list.tasks[-1].id, now)
    stats = task_list.stats(now)
    assert stats == {"total": 4, "done": 1, "pending": 3, "overdue": 0}


def test_analytics_report(task_list, now) -> None:
    task_list.toggle(task_list.tasks[0].id, now)
    report = task_list.analytics_report()
    assert report["completed"] == 1
    assert report["pending"] == 2
    assert report["rate"] == 33
    assert report["high"] == 0
    assert report["medium"] == 1
    assert report["low"] == 1


def test_loading_state_sorts_by_order(make_task) -> None:
    a = make_task("a", order=2)
    b = make_task("b", order=0)
    tl = TaskList({"tasks": [vars(a), vars(b)]})
    assert [t.text for t in tl.tasks] == ["b", "a"]
    assert _orders_are_dense(tl)


def test_render_lines(task_list, now) -> None:
    lines = task_list.render_lines(task_list.visible(FilterSpec(), now), now, width=80)
    joined = "\n".join(lines)
    assert "1. [ ] Buy milk" in joined
    assert "#shopping" in joined
    assert "Tomorrow" in joined
    assert "Today 15:00" in joined


def test_format_due(now) -> None:
    assert format_due("2026-10-21", now) == "Today"
    assert format_due("2026-10-22", now) == "Tomorrow"
    assert format_due("2026-11-03", now) == "Nov 3"


def test_empty_state_lines(now) -> None:
    assert empty_state_lines(FilterSpec(search="x"), False, now) == ["No tasks found"]
    lines = empty_state_lines(FilterSpec(), False, datetime(2026, 10, 21, 8, 0))
    assert lines[0].startswith("No tasks yet")
    assert "  Morning coffee" in lines
    assert suggestions_for_hour(23) == suggestions_for_hour(3)
