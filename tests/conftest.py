"""Shared fixtures: a temporary local store and an in-memory Supabase double."""

import os
from datetime import datetime
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-key")

from grocery_tracker.services.gateway import RemoteGateway  # noqa: E402
from grocery_tracker.services.record_store import LocalRecordStore  # noqa: E402

USER_ID = "user-1"
TOKEN = "token-1"

# Tables whose names are unique per user, case-insensitively
UNIQUE_NAME_TABLES = {"categories", "items", "markets"}

# Writable columns of the remote schema; anything else is rejected like PostgREST does
TABLE_COLUMNS = {
    "categories": {"user_id", "name"},
    "items": {"user_id", "name", "category_id"},
    "markets": {"user_id", "name", "location"},
    "purchases": {"user_id", "market_id", "date", "total_amount"},
    "purchase_items": {"purchase_id", "item_id", "quantity", "unit_price"},
    "user_roles": {"user_id", "role"},
}


class FakeQuery:
    """Subset of the PostgREST request builder used by the gateway."""

    def __init__(self, client: "FakeSupabase", table: str):
        self.client = client
        self.table = table
        self.operation = "select"
        self.payload = None
        self.filters = []
        self.order_key = None
        self.order_desc = False
        self.count_mode = None

    def select(self, *columns, count=None):
        self.operation = "select"
        self.count_mode = count
        return self

    def insert(self, row):
        self.operation = "insert"
        self.payload = dict(row)
        return self

    def update(self, updates):
        self.operation = "update"
        self.payload = dict(updates)
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: str(row.get(column)) == str(value))
        return self

    def in_(self, column, values):
        allowed = {str(value) for value in values}
        self.filters.append(lambda row: str(row.get(column)) in allowed)
        return self

    def order(self, column, desc=False):
        self.order_key = column
        self.order_desc = desc
        return self

    def limit(self, count):
        return self

    def _matches(self):
        rows = self.client.tables.setdefault(self.table, [])
        return [row for row in rows if all(check(row) for check in self.filters)]

    def _check_columns(self):
        unknown = sorted(set(self.payload) - self.client.columns[self.table])
        if unknown:
            raise APIError(
                {
                    "message": f"Could not find the '{unknown[0]}' column of '{self.table}' in the schema cache",
                    "code": "PGRST204",
                    "hint": None,
                    "details": None,
                }
            )

    def _check_unique(self, candidate, exclude_id=None):
        if self.table not in UNIQUE_NAME_TABLES or "name" not in candidate:
            return
        for row in self.client.tables.setdefault(self.table, []):
            if row["id"] == exclude_id or row.get("user_id") != candidate.get("user_id"):
                continue
            if row["name"].lower() == candidate["name"].lower():
                raise APIError(
                    {
                        "message": f"duplicate key value violates unique constraint {self.table}_name_key",
                        "code": "23505",
                        "hint": None,
                        "details": None,
                    }
                )

    def execute(self):
        failure = self.client.failures.get((self.table, self.operation))
        if failure is not None:
            predicate, error = failure
            if predicate(self.payload):
                raise error
        if self.operation in ("insert", "update"):
            self._check_columns()

        if self.operation == "insert":
            self._check_unique(self.payload)
            row = {"id": self.client.next_id(), "created_at": datetime(2024, 1, 1).isoformat()}
            row.update(self.payload)
            self.client.tables.setdefault(self.table, []).append(row)
            return SimpleNamespace(data=[dict(row)], count=None)

        matches = self._matches()
        if self.operation == "update":
            for row in matches:
                self._check_unique({**row, **self.payload}, exclude_id=row["id"])
                row.update(self.payload)
            return SimpleNamespace(data=[dict(row) for row in matches], count=None)
        if self.operation == "delete":
            rows = self.client.tables[self.table]
            self.client.tables[self.table] = [row for row in rows if row not in matches]
            return SimpleNamespace(data=[dict(row) for row in matches], count=None)

        if self.order_key:
            matches = sorted(
                matches, key=lambda row: str(row.get(self.order_key)), reverse=self.order_desc
            )
        count = len(matches) if self.count_mode else None
        return SimpleNamespace(data=[dict(row) for row in matches], count=count)


class FakeAuth:
    def __init__(self, user_id=USER_ID, token=TOKEN):
        self.user_id = user_id
        self.token = token
        self.signed_in = False

    def get_user(self, jwt=None):
        if jwt == self.token or (jwt is None and self.signed_in):
            return SimpleNamespace(user=SimpleNamespace(id=self.user_id))
        return None

    def sign_in_with_password(self, credentials):
        self.signed_in = True
        return SimpleNamespace(session=SimpleNamespace(access_token=self.token))


class FakeSupabase:
    """In-memory stand-in for a supabase Client in tests."""

    def __init__(self):
        self.tables = {}
        self.failures = {}
        self.columns = {table: set(columns) for table, columns in TABLE_COLUMNS.items()}
        self.auth = FakeAuth()
        self._id = 100

    def next_id(self):
        self._id += 1
        return self._id

    def table(self, name):
        return FakeQuery(self, name)

    def fail(self, table, operation, predicate=lambda payload: True, error=None):
        """Make matching requests raise ``error``, by default a non-duplicate APIError."""
        if error is None:
            error = APIError({"message": "simulated failure", "code": "XX000", "hint": None, "details": None})
        self.failures[(table, operation)] = (predicate, error)

    def rows(self, table):
        return self.tables.get(table, [])


@pytest.fixture
def store(tmp_path):
    """Create a LocalRecordStore on a temporary sqlite file."""
    return LocalRecordStore.open(str(tmp_path / "grocery.db"))


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def gateway(fake_supabase):
    return RemoteGateway(fake_supabase, access_token=TOKEN)


@pytest.fixture
def anonymous_gateway(fake_supabase):
    return RemoteGateway(fake_supabase)
