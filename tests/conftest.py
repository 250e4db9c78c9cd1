"""Pytest fixtures for badge data tests."""

from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient

from badgedata.config import Settings
from badgedata.main import create_app


class FakeClock:
    """Settable stand-in for ``datetime.now(tz=UTC)``."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FakeGrafana:
    """In-memory Grafana.com dashboard API served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.downloads: dict[str, int] = {}
        self.responses: dict[str, httpx.Response] = {}
        self.calls: list[str] = []
        self.transport = httpx.MockTransport(self._handle)

    def add(self, dashboard_id: int, downloads: int) -> None:
        self.downloads[str(dashboard_id)] = downloads

    def respond(self, dashboard_id: str, response: httpx.Response) -> None:
        """Serve a canned response for one id instead of the dashboard record."""
        self.responses[dashboard_id] = response

    def _handle(self, request: httpx.Request) -> httpx.Response:
        dashboard_id = request.url.path.rsplit("/", 1)[-1]
        self.calls.append(dashboard_id)
        if dashboard_id in self.responses:
            return self.responses[dashboard_id]
        if dashboard_id not in self.downloads:
            return httpx.Response(404, json={"message": "Dashboard not found"})
        return httpx.Response(
            200,
            json={
                "id": int(dashboard_id),
                "name": f"Dashboard {dashboard_id}",
                "downloads": self.downloads[dashboard_id],
                "revision": 3,
            },
        )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def grafana_api() -> FakeGrafana:
    return FakeGrafana()


@pytest.fixture()
def settings() -> Settings:
    """Settings with the documented defaults, independent of the environment."""

    return Settings(
        route_prefix="badgedata",
        grafana_dashboard_api="https://grafana.test/api/dashboards/",
        cache_refresh_seconds=3600,
        max_ids=50,
        fetch_timeout_seconds=10.0,
        dedupe_ids=False,
    )


@pytest.fixture()
def app(settings: Settings, grafana_api: FakeGrafana) -> FastAPI:
    """Return a fresh application wired to the fake Grafana API."""
    return create_app(settings, transport=grafana_api.transport)


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Provide an `httpx.AsyncClient` configured for the FastAPI app."""
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
