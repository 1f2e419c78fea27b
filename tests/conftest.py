"""Shared fixtures: an in-memory Baserow table behind a requests.Session stand-in."""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import pytest
import requests

from baserow_service import BaserowService
from field_map import load_field_map

REPO_ROOT = Path(__file__).resolve().parents[1]
BASE_URL = "https://baserow.test"
PRODUCT_TABLE = "518"
CATEGORY_TABLE = "517"

ROW_URL = re.compile(r"/api/database/rows/table/(?P<table>\d+)/(?:(?P<row>\d+)/)?$")


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        if text is None:
            text = "" if payload is None else json.dumps(payload)
        self.text = text
        self.content = text.encode()

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeBaserow:
    """
    Minimal Baserow rows API: paginated list, row get/create/patch/delete.

    Every call is recorded in `calls` as (method, url, params, json).
    """

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {PRODUCT_TABLE: [], CATEGORY_TABLE: []}
        self.calls: List[tuple] = []
        self.failing_ids: set = set()
        self.fail_all = False
        self.non_json_body: Optional[str] = None
        self._next_id = 1000

    # ---------- setup helpers ----------
    def add_rows(self, table: str, rows: List[Dict[str, Any]]):
        for row in rows:
            if "id" not in row:
                self._next_id += 1
                row = {**row, "id": self._next_id}
            self.tables.setdefault(table, []).append(row)

    def calls_for(self, method: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == method]

    @property
    def last_params(self) -> Dict[str, Any]:
        return self.calls_for("GET")[-1][2]

    # ---------- requests.Session interface ----------
    def request(self, method, url, headers=None, params=None, json=None, timeout=None):
        self.calls.append((method, url, dict(params or {}), json))
        if self.fail_all:
            raise requests.exceptions.ConnectionError("connection refused")
        if self.non_json_body is not None:
            return FakeResponse(200, text=self.non_json_body)

        match = ROW_URL.search(urlparse(url).path)
        if not match:
            return FakeResponse(404, {"error": "ERROR_URL_NOT_FOUND"})
        rows = self.tables.setdefault(match.group("table"), [])
        row_id = int(match.group("row")) if match.group("row") else None

        if row_id is not None and row_id in self.failing_ids:
            return FakeResponse(500, {"error": "ERROR_SERVER"})

        if method == "GET" and row_id is None:
            return self._list(rows, params or {}, url)
        if method == "POST" and row_id is None:
            self._next_id += 1
            created = {**(json or {}), "id": self._next_id}
            rows.append(created)
            return FakeResponse(200, created)

        row = next((r for r in rows if r["id"] == row_id), None)
        if row is None:
            return FakeResponse(404, {"error": "ERROR_ROW_DOES_NOT_EXIST"})
        if method == "GET":
            return FakeResponse(200, row)
        if method == "PATCH":
            row.update(json or {})
            return FakeResponse(200, row)
        if method == "DELETE":
            rows.remove(row)
            return FakeResponse(204)
        return FakeResponse(405, {"error": "ERROR_METHOD_NOT_ALLOWED"})

    def _list(self, rows, params, url):
        page = int(params.get("page", 1))
        size = int(params.get("size", 100))
        start = (page - 1) * size
        chunk = rows[start:start + size]
        has_next = start + size < len(rows)
        next_url = f"{url}?page={page + 1}&size={size}" if has_next else None
        previous_url = f"{url}?page={page - 1}&size={size}" if page > 1 else None
        return FakeResponse(200, {"count": len(rows), "next": next_url, "previous": previous_url, "results": chunk})


def make_product_row(n: int, **overrides) -> Dict[str, Any]:
    row = {
        "id": n,
        "field_5372": f"SKU-{n:03d}",
        "field_5305": f"Product {n}",
        "field_5248": str(10 * n),
        "field_5181": "5",
        "field_5088": {"id": 1, "value": "Simple", "color": "blue"},
        "field_5325": {"id": 2, "value": "Enabled", "color": "green"},
        "field_10480": [{"id": 7, "value": "Bags"}],
        "field_5001": [{"id": 3, "value": "BuildBox"}],
    }
    row.update(overrides)
    return row


@pytest.fixture
def field_map():
    return load_field_map(REPO_ROOT / "field_map.json")


@pytest.fixture
def fake_baserow():
    return FakeBaserow()


@pytest.fixture
def service(field_map, fake_baserow):
    return BaserowService(
        base_url=BASE_URL,
        token="test-token",
        table_id=PRODUCT_TABLE,
        category_table_id=CATEGORY_TABLE,
        field_map=field_map,
        session=fake_baserow,
    )


@pytest.fixture
def product_rows():
    return [make_product_row(n) for n in range(1, 26)]


@pytest.fixture
def client(service):
    """FastAPI test client wired to the fake Baserow service."""
    from fastapi.testclient import TestClient

    from deps import get_baserow_service
    from main import app
    from services.view_router import sessions

    sessions.clear()
    app.dependency_overrides[get_baserow_service] = lambda: service
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()
    sessions.clear()
