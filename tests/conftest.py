"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are loaded at import time; give them something to load
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from datetime import datetime, timezone
from typing import Callable, Generator, Optional
from uuid import uuid4


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data=None, count: int = None):
        self.data = data if data is not None else []
        if count is not None:
            self.count = count
        elif isinstance(self.data, list):
            self.count = len(self.data)
        else:
            self.count = 1 if self.data else 0


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Filters are applied against the table's rows on execute(), so updates
    only touch matching rows and report them like PostgREST does.
    """

    def __init__(self, table: "MockSupabaseTable", operation: str = "select", payload=None):
        self._table = table
        self._operation = operation
        self._payload = payload
        self._filters: list[Callable[[dict], bool]] = []
        self._is_single = False
        self._limit: Optional[int] = None

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self._filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, **kwargs):
        return self

    def range(self, start, end):
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        self._table.calls.append((self._operation, self._payload))

        if self._table.error is not None:
            raise self._table.error

        if self._operation == "insert":
            return MockSupabaseResponse(data=self._table.insert_rows(self._payload))

        rows = [row for row in self._table.rows if all(f(row) for f in self._filters)]

        if self._operation == "update":
            for row in rows:
                row.update(self._payload)
            return MockSupabaseResponse(data=[dict(row) for row in rows])

        if self._operation == "delete":
            self._table.rows = [row for row in self._table.rows if row not in rows]
            return MockSupabaseResponse(data=[dict(row) for row in rows])

        if self._limit is not None:
            rows = rows[:self._limit]

        if self._is_single:
            return MockSupabaseResponse(data=dict(rows[0]) if rows else None)

        return MockSupabaseResponse(
            data=[dict(row) for row in rows],
            count=self._table.count
        )


class MockSupabaseTable:
    """Mock Supabase table holding rows across queries."""

    def __init__(self, data: list = None, count: int = None):
        self.rows = [dict(row) for row in (data or [])]
        self.count = count
        self.calls: list[tuple] = []
        self.error: Optional[Exception] = None
        self.fail_on_insert: Optional[int] = None
        self._insert_calls = 0

    def insert_rows(self, data) -> list:
        # Simulate insert - add id and timestamps
        self._insert_calls += 1
        if self.fail_on_insert == self._insert_calls:
            raise RuntimeError("simulated insert failure")

        items = [data] if isinstance(data, dict) else data
        stored = []
        for item in items:
            row = {"id": str(uuid4()), **item}
            self.rows.append(row)
            stored.append(dict(row))
        return stored

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self, "select")

    def insert(self, data):
        return MockSupabaseQuery(self, "insert", data)

    def update(self, data):
        return MockSupabaseQuery(self, "update", data)

    def delete(self):
        return MockSupabaseQuery(self, "delete")


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = MockSupabaseTable(data, count)

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table (created empty on first use)."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("orders", [
                {"id": "o1", "userId": "u1", "status": "Pending", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Services are singletons, so cached instances are dropped as well.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            # Now any service created in the test uses the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.bulk_upload_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.order_service.get_supabase_client", return_value=mock_supabase):
                with patch("services.bulk_upload_service._bulk_upload_service", None):
                    with patch("services.order_service._order_service", None):
                        yield mock_supabase


@pytest.fixture
def sample_order_data() -> dict:
    """Sample stored order."""
    return {
        "id": "order-123",
        "userId": "user-1",
        "status": "Pending",
        "amount": 444,
        "items": [
            {"name": "T Shirt", "quantity": 1, "price": 444, "sellerId": "seller-1"}
        ],
        "customerInfo": {
            "name": "Naveen",
            "email": "naveen@example.com",
            "phone": "966773355",
            "address": "Shimoga, PIN: 588525"
        },
        "createdAt": "2025-11-15T10:00:00+00:00",
        "updatedAt": "2025-11-15T10:00:00+00:00"
    }


@pytest.fixture
def sample_rows() -> list[dict]:
    """Rows for two SKUs, the first with two variants."""
    return [
        {"SKU": "A", "Name": "Cotton Shirt", "Brand": "Acme", "Variant_Color": "Red", "Variant_Price": "100"},
        {"SKU": "A", "Variant_Color": "Blue", "Variant_Price": "120"},
        {"SKU": "B", "Name": "Shoe"},
    ]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 12, 1, 12, 0, tzinfo=timezone.utc)


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("orders", [...])
            response = test_client_with_mock_db.get("/api/orders/status/Pending")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
