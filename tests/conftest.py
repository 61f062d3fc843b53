# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - An in-memory stand-in for the Supabase table API
# - Fixtures for the R2 client, Stripe and authenticated API calls
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")
os.environ.setdefault("R2_ENDPOINT_URL", "https://account.r2.cloudflarestorage.com")
os.environ.setdefault("R2_ACCESS_KEY_ID", "test-access-key")
os.environ.setdefault("R2_SECRET_ACCESS_KEY", "test-secret-key")
os.environ.setdefault("R2_PUBLIC_BASE_URL", "https://images.example.com")
os.environ.setdefault("APP_BASE_URL", "https://app.example.com")
os.environ.setdefault("ADMIN_API_TOKEN", "admin-api-token")
os.environ.setdefault("ADMIN_TOKEN", "admin-wipe-token")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest


# =============================================================================
# In-memory Supabase
# =============================================================================

_BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _same(a: Any, b: Any) -> bool:
    if isinstance(a, uuid.UUID) or isinstance(b, uuid.UUID):
        return str(a) == str(b)
    return a == b


class FakeQuery:
    """
    Chainable query over one in-memory table.

    Supports the subset of the PostgREST builder the services use.
    """

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.columns = "*"
        self.count_mode = None
        self.head = False
        self.payload: Any = None
        self.on_conflict = "id"
        self.filters: list = []
        self.orders: list[tuple[str, bool]] = []
        self.limit_count: int | None = None
        self.offset = 0

    # -- operations -----------------------------------------------------------

    def select(self, columns: str = "*", count: str | None = None, head: bool = False):
        if self.operation == "select":
            self.columns = columns
        self.count_mode = count
        self.head = head
        return self

    def insert(self, data):
        self.operation = "insert"
        self.payload = data
        return self

    def upsert(self, data, on_conflict: str = "id"):
        self.operation = "upsert"
        self.payload = data
        self.on_conflict = on_conflict
        return self

    def update(self, data):
        self.operation = "update"
        self.payload = data
        return self

    def delete(self):
        self.operation = "delete"
        return self

    # -- filters --------------------------------------------------------------

    def eq(self, column, value):
        self.filters.append(lambda row: _same(row.get(column), value))
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: not _same(row.get(column), value))
        return self

    def is_(self, column, value):
        if value == "null":
            self.filters.append(lambda row: row.get(column) is None)
        else:
            self.filters.append(lambda row: row.get(column) is not None)
        return self

    def in_(self, column, values):
        wanted = {str(v) for v in values}
        self.filters.append(lambda row: str(row.get(column)) in wanted)
        return self

    def _compare(self, column, value, op):
        self.filters.append(
            lambda row: row.get(column) is not None and op(str(row.get(column)), str(value))
        )
        return self

    def lt(self, column, value):
        return self._compare(column, value, lambda a, b: a < b)

    def lte(self, column, value):
        return self._compare(column, value, lambda a, b: a <= b)

    def gt(self, column, value):
        return self._compare(column, value, lambda a, b: a > b)

    def gte(self, column, value):
        return self._compare(column, value, lambda a, b: a >= b)

    def or_(self, expression: str):
        clauses = []
        for part in expression.split(","):
            column, op, pattern = part.split(".", 2)
            clauses.append((column, op, pattern))

        def matches(row):
            for column, op, pattern in clauses:
                value = str(row.get(column) or "")
                if op == "ilike" and pattern.strip("%").lower() in value.lower():
                    return True
                if op == "eq" and value == pattern:
                    return True
            return False

        self.filters.append(matches)
        return self

    # -- modifiers ------------------------------------------------------------

    def order(self, column, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def limit(self, count: int):
        self.limit_count = count
        return self

    def range(self, start: int, end: int):
        self.offset = start
        self.limit_count = end - start + 1
        return self

    # -- execution ------------------------------------------------------------

    def _matching(self) -> list[dict]:
        rows = self.db.tables.setdefault(self.table_name, [])
        return [row for row in rows if all(f(row) for f in self.filters)]

    def _project(self, row: dict) -> dict:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        names = [c.strip() for c in self.columns.split(",")]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    def execute(self):
        if self.db.fail_tables.get(self.table_name) == self.operation:
            raise RuntimeError(f"{self.operation} on {self.table_name} failed")

        handler = getattr(self, f"_execute_{self.operation}")
        data = handler()
        count = len(data) if self.count_mode else None
        return SimpleNamespace(data=[] if self.head else data, count=count)

    def _execute_select(self) -> list[dict]:
        rows = self._matching()
        for column, desc in reversed(self.orders):
            rows.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        rows = rows[self.offset:]
        if self.limit_count is not None:
            rows = rows[:self.limit_count]
        return [self._project(row) for row in rows]

    def _execute_insert(self) -> list[dict]:
        items = self.payload if isinstance(self.payload, list) else [self.payload]
        return [copy.deepcopy(self.db.add(self.table_name, item)) for item in items]

    def _execute_upsert(self) -> list[dict]:
        items = self.payload if isinstance(self.payload, list) else [self.payload]
        keys = [k.strip() for k in self.on_conflict.split(",")]
        stored = []
        for item in items:
            existing = next(
                (
                    row for row in self.db.tables.setdefault(self.table_name, [])
                    if all(_same(row.get(k), item.get(k)) for k in keys)
                ),
                None,
            )
            if existing is not None:
                existing.update(copy.deepcopy(item))
                stored.append(copy.deepcopy(existing))
            else:
                stored.append(copy.deepcopy(self.db.add(self.table_name, item)))
        return stored

    def _execute_update(self) -> list[dict]:
        rows = self._matching()
        for row in rows:
            row.update(copy.deepcopy(self.payload))
        return [copy.deepcopy(row) for row in rows]

    def _execute_delete(self) -> list[dict]:
        doomed = self._matching()
        ids = {id(row) for row in doomed}
        self.db.tables[self.table_name] = [
            row for row in self.db.tables[self.table_name] if id(row) not in ids
        ]
        return [copy.deepcopy(row) for row in doomed]


class FakeSupabase:
    """In-memory replacement for the supabase-py Client."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.fail_tables: dict[str, str] = {}
        self.auth = MagicMock()
        self._tick = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def _next_timestamp(self) -> str:
        self._tick += 1
        return (_BASE_TIME + timedelta(seconds=self._tick)).isoformat()

    def add(self, table: str, item: dict) -> dict:
        row = copy.deepcopy(item)
        if "id" not in row:
            row["id"] = str(uuid.uuid4())
        row.setdefault("created_at", self._next_timestamp())
        self.tables.setdefault(table, []).append(row)
        return row

    def seed(self, table: str, **fields) -> dict:
        """Insert a row directly and return it."""
        return copy.deepcopy(self.add(table, fields))

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db():
    """Route every SupabaseClient.get_client() call to an in-memory database."""
    from lib.supabase_client import SupabaseClient

    db = FakeSupabase()
    previous = SupabaseClient._instance
    SupabaseClient._instance = db
    yield db
    SupabaseClient._instance = previous


@pytest.fixture
def r2():
    """Replace the boto3 S3 client with a MagicMock."""
    from lib.r2_client import R2Client

    client = MagicMock()
    previous = R2Client._instance
    R2Client._instance = client
    yield client
    R2Client._instance = previous


@pytest.fixture
def user_id() -> str:
    return "550e8400-e29b-41d4-a716-446655440000"


@pytest.fixture
def other_user_id() -> str:
    return "6ba7b810-9dad-11d1-80b4-00c04fd430c8"


@pytest.fixture
def starter_plan(fake_db, user_id):
    """Give the test user an active Starter subscription."""
    return fake_db.seed(
        "user_plans",
        user_id=user_id,
        plan_id="starter",
        status="active",
        stripe_customer_id="cus_123",
        stripe_subscription_id="sub_123",
    )


@pytest.fixture
def make_product(fake_db, user_id):
    """Factory for product rows."""

    def _make(owner: str | None = None, **fields) -> dict:
        owner = owner or user_id
        image = f"https://images.example.com/{owner}/products/shirt.png"
        defaults = {
            "user_id": owner,
            "name": "Linen Shirt",
            "code": "LS-01",
            "category": "Shirts",
            "supplier": "Acme",
            "image_url": image,
            "original_image_url": image,
            "isactive": True,
            "archived_at": None,
            "delete_at": None,
            "archived_reason": None,
        }
        return fake_db.seed("products", **{**defaults, **fields})

    return _make


@pytest.fixture
def make_catalog(fake_db, user_id):
    """Factory for catalog rows linked to the given products."""

    def _make(product_ids=(), owner: str | None = None, **fields) -> dict:
        defaults = {
            "user_id": owner or user_id,
            "name": "Summer",
            "brand_name": "Acme",
            "logo_url": None,
            "shareable_link": f"catalog-{uuid.uuid4().hex[:12]}",
            "archived_at": None,
            "delete_at": None,
            "archived_reason": None,
        }
        catalog = fake_db.seed("catalogs", **{**defaults, **fields})
        for product_id in product_ids:
            fake_db.seed("catalog_products", catalog_id=catalog["id"], product_id=product_id)
        return catalog

    return _make


@pytest.fixture
def client(fake_db, user_id):
    """TestClient authenticated as the test user."""
    from uuid import UUID

    from fastapi.testclient import TestClient

    from app.auth import get_current_user, AuthUser
    from app.main import app

    app.dependency_overrides[get_current_user] = lambda: AuthUser(
        id=UUID(user_id), email="owner@example.com"
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client(fake_db):
    """TestClient without authentication."""
    from fastapi.testclient import TestClient

    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
