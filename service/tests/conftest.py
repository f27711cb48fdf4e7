"""
Shared fixtures: an in-memory stand-in for the supabase query builder, a
mocked OpenAI client and a TestClient wired to both.
"""

import copy
import itertools
import json
import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from network_brain.api.limits import limiter
from network_brain.clients import ServiceClients, get_clients
from network_brain.config import Settings
from network_brain.main import app
from network_brain.middleware.auth import verify_supabase_token
from network_brain.services.google_calendar import GoogleCalendarClient
from network_brain.services.proxycurl import ProxycurlClient

_clock = itertools.count(1)


def _timestamp() -> str:
    n = next(_clock)
    return f"2024-01-01T{n // 3600:02d}:{n // 60 % 60:02d}:{n % 60:02d}+00:00"


def _value(row: dict, column: str):
    return row.get(column)


class FakeQuery:
    """Chainable query over one table of a FakeSupabase."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.nested = []
        self.order_by = None
        self.bounds = None
        self.max_rows = None

    # Operations

    def select(self, columns: str = "*"):
        self.op = "select"
        return self

    def insert(self, row):
        self.op = "insert"
        self.payload = row
        return self

    def update(self, fields: dict):
        self.op = "update"
        self.payload = fields
        return self

    def upsert(self, row, on_conflict: str = None):
        self.op = "upsert"
        self.payload = row
        self.on_conflict = on_conflict
        return self

    # Filters

    def eq(self, column: str, value):
        if "." in column:
            relation, sub = column.split(".", 1)
            self.nested.append((relation, sub, value))
            self.filters.append(
                lambda r: any(i.get(sub) == value for i in r.get(relation) or [])
            )
        else:
            self.filters.append(lambda r: _value(r, column) == value)
        return self

    def neq(self, column: str, value):
        self.filters.append(lambda r: _value(r, column) != value)
        return self

    def is_(self, column: str, value):
        if value == "null":
            self.filters.append(lambda r: _value(r, column) is None)
        else:
            self.filters.append(lambda r: _value(r, column) == value)
        return self

    def in_(self, column: str, values):
        self.filters.append(lambda r: _value(r, column) in values)
        return self

    def or_(self, expression: str):
        clauses = []
        for clause in expression.split(","):
            column, op, value = clause.split(".", 2)
            assert op == "eq"
            clauses.append((column, value))
        self.filters.append(lambda r: any(str(r.get(c)) == v for c, v in clauses))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def range(self, start: int, end: int):
        self.bounds = (start, end)
        return self

    def limit(self, count: int):
        self.max_rows = count
        return self

    # Execution

    def _matching(self) -> list[dict]:
        return [r for r in self.db.tables.setdefault(self.table, []) if all(f(r) for f in self.filters)]

    def _store(self, row: dict) -> dict:
        for check in self.db.insert_failures.get(self.table, []):
            if check(row):
                raise RuntimeError(f"insert into {self.table} failed")
        row = copy.deepcopy(row)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", _timestamp())
        self.db.tables.setdefault(self.table, []).append(row)
        return row

    def execute(self):
        self.db.executed.append((self.table, self.op))

        if self.op == "insert":
            rows = self.payload if isinstance(self.payload, list) else [self.payload]
            return SimpleNamespace(data=[copy.deepcopy(self._store(r)) for r in rows])

        if self.op == "update":
            rows = self._matching()
            for row in rows:
                row.update(copy.deepcopy(self.payload))
            return SimpleNamespace(data=copy.deepcopy(rows))

        if self.op == "upsert":
            keys = self.on_conflict.split(",") if self.on_conflict else ["id"]
            existing = [
                r for r in self.db.tables.setdefault(self.table, [])
                if all(r.get(k) == self.payload.get(k) for k in keys)
            ]
            if existing:
                existing[0].update(copy.deepcopy(self.payload))
                return SimpleNamespace(data=[copy.deepcopy(existing[0])])
            return SimpleNamespace(data=[copy.deepcopy(self._store(self.payload))])

        rows = copy.deepcopy(self._matching())
        for relation, sub, value in self.nested:
            for row in rows:
                row[relation] = [i for i in row.get(relation) or [] if i.get(sub) == value]
        if self.order_by:
            column, desc = self.order_by
            rows.sort(key=lambda r: r.get(column) or "", reverse=desc)
        if self.bounds:
            start, end = self.bounds
            rows = rows[start:end + 1]
        if self.max_rows is not None:
            rows = rows[:self.max_rows]
        return SimpleNamespace(data=rows)


class FakeSupabase:
    """Enough of supabase.Client for the services under test."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.rpc_results: dict[str, list[dict]] = {}
        self.rpc_calls: list[tuple[str, dict]] = []
        self.insert_failures: dict[str, list] = {}
        self.executed: list[tuple[str, str]] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict):
        self.rpc_calls.append((name, params))
        return SimpleNamespace(execute=lambda: SimpleNamespace(data=copy.deepcopy(self.rpc_results.get(name, []))))

    def seed(self, table: str, *rows: dict):
        for row in rows:
            row = dict(row)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", _timestamp())
            self.tables.setdefault(table, []).append(row)

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])

    def row(self, table: str, row_id: str) -> dict:
        return next(r for r in self.rows(table) if r["id"] == row_id)

    def writes(self, table: str) -> list[str]:
        return [op for t, op in self.executed if t == table and op != "select"]


def chat_response(payload) -> SimpleNamespace:
    """Shape of an openai ChatCompletion with a single message."""
    content = payload if isinstance(payload, str) else json.dumps(payload)
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def embedding_response(vector: list[float]) -> SimpleNamespace:
    return SimpleNamespace(data=[SimpleNamespace(embedding=vector)])


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        supabase_url="https://project.supabase.co",
        supabase_service_role_key="service-key",
        supabase_jwt_secret="test-jwt-secret",
        openai_api_key="sk-test",
        openai_chat_model="gpt-4o",
        openai_embedding_model="text-embedding-3-small",
        proxycurl_api_key="",
        google_client_id="google-client",
        google_client_secret="google-secret",
        google_redirect_uri="http://localhost:8000/api/auth/google/callback",
        public_base_url="http://localhost:3000",
        applications_community_id="community-apps",
    )


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.embeddings.create.return_value = embedding_response([0.1] * 1536)
    return client


@pytest.fixture
def http_handler():
    """Replace `.handler` in a test to answer outgoing HTTP calls."""
    state = SimpleNamespace(requests=[])

    def default(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={})

    state.handler = default

    def dispatch(request: httpx.Request) -> httpx.Response:
        state.requests.append(request)
        return state.handler(request)

    state.transport = httpx.MockTransport(dispatch)
    return state


@pytest.fixture
def clients(settings, supabase, openai_client, http_handler):
    http = httpx.AsyncClient(transport=http_handler.transport)
    return ServiceClients(
        settings=settings,
        supabase=supabase,
        openai=openai_client,
        proxycurl=ProxycurlClient(settings.proxycurl_api_key, settings.proxycurl_base_url, http),
        calendar=GoogleCalendarClient(
            settings.google_client_id,
            settings.google_client_secret,
            settings.google_redirect_uri,
            http
        ),
        http=http,
    )


@pytest.fixture
def api(clients):
    limiter.enabled = False
    app.dependency_overrides[get_clients] = lambda: clients
    app.dependency_overrides[verify_supabase_token] = lambda: {"sub": "user-1"}
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True
