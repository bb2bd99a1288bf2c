import os
from types import SimpleNamespace

import pytest

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-service-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")


class FakeQuery:
    """Records query-builder calls and returns canned rows on execute()."""

    def __init__(self, table, rows, calls, error=None):
        self.table = table
        self.rows = rows
        self.calls = calls
        self.error = error

    def _record(self, *call):
        self.calls.append(call)
        return self

    def select(self, columns):
        return self._record("select", columns)

    def eq(self, field, value):
        return self._record("eq", field, value)

    def in_(self, field, values):
        return self._record("in", field, list(values))

    def gte(self, field, value):
        return self._record("gte", field, value)

    def lte(self, field, value):
        return self._record("lte", field, value)

    def like(self, field, value):
        return self._record("like", field, value)

    def order(self, field, desc=False, foreign_table=None):
        if foreign_table:
            field = f"{foreign_table}.{field}"
        return self._record("order", field, desc)

    def limit(self, count):
        return self._record("limit", count)

    def execute(self):
        self.calls.append(("execute",))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=list(self.rows))


class FakeSupabase:
    """Minimal stand-in for the supabase-py client used by the repositories."""

    def __init__(self, tables=None, errors=None, auth_user=None):
        self.tables = tables or {}
        self.errors = errors or {}
        self.calls = {}
        self.auth = SimpleNamespace(get_user=self._get_user)
        self._auth_user = auth_user

    def table(self, name):
        calls = self.calls.setdefault(name, [])
        return FakeQuery(name, self.tables.get(name, []), calls, self.errors.get(name))

    def _get_user(self, access_token):
        return SimpleNamespace(user=self._auth_user)


@pytest.fixture
def fake_supabase_factory():
    return FakeSupabase
