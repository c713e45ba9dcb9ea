from __future__ import annotations

import asyncio
import contextlib
import math
import os
from typing import Any

import pytest

from guard_console.api.client import ApiResult
from guard_console.domain.kinds import EntityKind, get_kind_spec
from guard_console.domain.models import Entity, PageEnvelope, Query
from guard_console.errors import ConsoleError, TransportFailure


def pytest_sessionstart(session: pytest.Session) -> None:
    # Keep a developer's .env from pointing tests at a live API.
    os.environ.setdefault("CONSOLE_API_URL", "http://console.test/api")


@pytest.fixture(autouse=True)
def _close_default_event_loop() -> None:
    yield
    policy = asyncio.get_event_loop_policy()
    local = getattr(policy, "_local", None)
    loop = getattr(local, "_loop", None) if local is not None else None
    if loop is not None and not loop.is_running() and not loop.is_closed():
        with contextlib.suppress(Exception):
            loop.close()
    if loop is not None:
        with contextlib.suppress(Exception):
            policy.set_event_loop(None)


@pytest.fixture
def clean_settings():
    from guard_console import config
    from guard_console.app import get_app_context

    config._load_settings_cached.cache_clear()
    get_app_context.cache_clear()
    yield config
    config._load_settings_cached.cache_clear()
    get_app_context.cache_clear()


class FakeConsoleApi:
    """In-memory stand-in for ConsoleApiClient that paginates like the server."""

    def __init__(self, kind: EntityKind | str, rows: list[dict[str, Any]]) -> None:
        self.kind = get_kind_spec(kind).kind
        self.rows = [dict(row) for row in rows]
        self.fetch_calls: list[Query] = []
        self.delete_calls: list[int] = []
        self.status_calls: list[tuple[int, str]] = []
        self.flag_calls: list[tuple[int, str, bool]] = []
        self.failures: dict[int, ConsoleError] = {}
        self.fetch_error: ConsoleError | None = None

    async def fetch(self, kind, query: Query) -> ApiResult[PageEnvelope]:
        self.fetch_calls.append(query)
        if self.fetch_error is not None:
            return ApiResult.failed(self.fetch_error)
        total = len(self.rows)
        start = (query.page - 1) * query.per_page
        body = {
            "items": self.rows[start:start + query.per_page],
            "data": {
                "current_page": query.page,
                "last_page": max(1, math.ceil(total / query.per_page)),
                "total": total,
                "per_page": query.per_page,
            },
        }
        return ApiResult.ok(PageEnvelope.from_body(kind, body, query))

    async def show(self, kind, entity_id: int) -> ApiResult[Entity]:
        for row in self.rows:
            if row["id"] == entity_id:
                return ApiResult.ok(Entity.from_payload(kind, row))
        return ApiResult.failed(TransportFailure("Not found", status_code=404))

    def _outcome(self, entity_id: int) -> ApiResult[Any]:
        error = self.failures.get(entity_id)
        if error is not None:
            return ApiResult.failed(error)
        return ApiResult.ok(None)

    async def change_status(self, kind, entity_id: int, status: str) -> ApiResult[Any]:
        self.status_calls.append((entity_id, status))
        return self._outcome(entity_id)

    async def set_visibility(self, kind, entity_id: int, flag: str, visible: bool):
        self.flag_calls.append((entity_id, flag, visible))
        return self._outcome(entity_id)

    async def set_active(self, kind, entity_id: int, active: bool):
        self.flag_calls.append((entity_id, "is_active", active))
        return self._outcome(entity_id)

    async def delete(self, kind, entity_id: int) -> ApiResult[None]:
        self.delete_calls.append(entity_id)
        outcome = self._outcome(entity_id)
        if outcome.fulfilled:
            self.rows = [row for row in self.rows if row["id"] != entity_id]
        return outcome


@pytest.fixture
def make_api():
    def _make(kind: EntityKind | str, rows: list[dict[str, Any]]) -> FakeConsoleApi:
        return FakeConsoleApi(kind, rows)

    return _make


@pytest.fixture
def client_rows() -> list[dict[str, Any]]:
    return [{"id": i, "full_name": f"Client {i}", "is_active": True} for i in range(1, 13)]


@pytest.fixture
def assignment_rows() -> list[dict[str, Any]]:
    return [
        {"id": 1, "status": "assigned"},
        {"id": 2, "status": "active"},
        {"id": 3, "status": "completed"},
        {"id": 4, "status": "cancelled"},
    ]
