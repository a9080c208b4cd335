# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from config import Settings
from models import Task
from storage import Storage


@pytest.fixture()
def now() -> datetime:
    """Fixed clock: Wednesday 2026-10-21, 10:00 local."""
    return datetime(2026, 10, 21, 10, 0)


@pytest.fixture()
def make_task():
    """Factory for tasks with sequential ids; order defaults to the id."""
    counter = {"id": 0}

    def _make(text: str = "task", **fields) -> Task:
        counter["id"] += 1
        fields.setdefault("id", counter["id"])
        fields.setdefault("order", fields["id"])
        fields.setdefault("created_at", "2026-10-20T09:00:00")
        return Task(text=text, **fields)

    return _make


@pytest.fixture()
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "tasks.json"


@pytest.fixture()
def storage(data_file: Path) -> Storage:
    return Storage(data_file)


@pytest.fixture()
def settings(tmp_path: Path, data_file: Path) -> Settings:
    return Settings(data_file=data_file, log_dir=tmp_path / "logs", alt_screen=False)
