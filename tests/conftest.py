"""
Shared test configuration.

Adds src/ to sys.path so the flat modules (api, store, interpreter, ...)
import as plain `import module_name`, and provides an in-memory stand-in for
the persistence gateway plus a TestClient wired to it.  No real Postgres or
LLM is needed.
"""

import copy
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_src_dir = os.path.join(_project_root, "src")

if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)


class FakeStore:
    """Dict-of-lists gateway with the same table operations as PersistenceGateway."""

    def __init__(self):
        self.tables = {"exercises": [], "workouts": [], "workout_splits": []}
        self._ids = {name: 0 for name in self.tables}
        self._clock = datetime(2026, 1, 1, 8, 0, 0)
        self.fail_insert_on = None
        self.before_insert = None
        self.calls = []

    # helpers
    def _matches(self, row, filters):
        for col, value in (filters or {}).items():
            if isinstance(value, (list, tuple)):
                if row.get(col) not in value:
                    return False
            elif row.get(col) != value:
                return False
        return True

    def seed(self, table, **values):
        return self.insert(table, values)[0]

    # gateway API
    def select(self, table, columns=None, filters=None, order_by=None,
               descending=False, limit=None, offset=0):
        self.calls.append(("select", table))
        rows = [r for r in self.tables[table] if self._matches(r, filters)]
        if order_by:
            rows.sort(key=lambda r: str(r.get(order_by)), reverse=descending)
        rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]
        out = copy.deepcopy(rows)
        if columns:
            out = [{c: r.get(c) for c in columns} for r in out]
        return out

    def select_one(self, table, **kwargs):
        rows = self.select(table, limit=1, **kwargs)
        return rows[0] if rows else None

    def insert(self, table, rows, on_conflict=None):
        self.calls.append(("insert", table))
        if self.before_insert:
            self.before_insert(self, table)
        if self.fail_insert_on == table:
            raise RuntimeError(f"insert into {table} failed")
        batch = [rows] if isinstance(rows, dict) else list(rows)
        stored = []
        for row in batch:
            if on_conflict and any(
                all(r.get(c) == row.get(c) for c in on_conflict) for r in self.tables[table]
            ):
                continue
            self._ids[table] += 1
            self._clock += timedelta(minutes=1)
            new = {"id": self._ids[table], "created_at": self._clock.isoformat()}
            new.update(copy.deepcopy(row))
            self.tables[table].append(new)
            stored.append(copy.deepcopy(new))
        return stored

    def update(self, table, values, filters):
        self.calls.append(("update", table))
        out = []
        for row in self.tables[table]:
            if self._matches(row, filters):
                row.update(copy.deepcopy(values))
                out.append(copy.deepcopy(row))
        return out

    def delete(self, table, filters):
        self.calls.append(("delete", table))
        before = len(self.tables[table])
        self.tables[table] = [r for r in self.tables[table] if not self._matches(r, filters)]
        return before - len(self.tables[table])

    @contextmanager
    def transaction(self):
        snapshot = copy.deepcopy(self.tables)
        try:
            yield self
        except Exception:
            self.tables = snapshot
            raise


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def interpreter():
    fake = MagicMock()
    fake.interpret.return_value = {
        "exercise": "Bench Press",
        "weight_kg": 40,
        "sets": [
            {"set_number": 1, "reps": 8},
            {"set_number": 2, "reps": 6},
            {"set_number": 3, "reps": 6},
        ],
        "muscle_group": "Chest",
        "notes": "",
    }
    return fake


@pytest.fixture
def api_client(store, interpreter):
    from fastapi.testclient import TestClient

    import api as api_mod
    from routes.helpers import get_interpreter, get_store, limiter

    limiter.reset()
    api_mod.app.dependency_overrides[get_store] = lambda: store
    api_mod.app.dependency_overrides[get_interpreter] = lambda: interpreter
    try:
        yield TestClient(api_mod.app)
    finally:
        api_mod.app.dependency_overrides.clear()
