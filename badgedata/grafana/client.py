"""Grafana.com dashboard API client."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

import httpx
import pydantic

from badgedata.errors import InvalidIDError, UpstreamError
from badgedata.grafana.schemas import Dashboard
from badgedata.lib.logger import get_logger

# DASHBOARD_API is the URL to the JSON API at Grafana.com.
DASHBOARD_API = "https://grafana.com/api/dashboards/"

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def validate_dashboard_id(dashboard_id: str) -> None:
    """Accept only base-10 integer literals that fit in 64 bits."""

    if not _ID_PATTERN.fullmatch(dashboard_id):
        raise InvalidIDError(dashboard_id)
    if not _INT64_MIN <= int(dashboard_id) <= _INT64_MAX:
        raise InvalidIDError(dashboard_id, "value out of range")


class DashboardClient:
    """Thin wrapper for reading dashboard metadata from Grafana.com."""

    def __init__(
        self,
        base_url: str = DASHBOARD_API,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self._transport = transport
        self._clock = clock

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def fetch_dashboards(self, ids: Sequence[str]) -> list[Dashboard]:
        """Fetch several dashboards in order, stopping at the first failure.

        Every id is validated before the first request goes out, and nothing
        fetched earlier in a failed batch is returned.
        """

        for dashboard_id in ids:
            validate_dashboard_id(dashboard_id)

        async with self._client() as client:
            return [await self._fetch(client, dashboard_id) for dashboard_id in ids]

    async def fetch_dashboard(self, dashboard_id: str) -> Dashboard:
        validate_dashboard_id(dashboard_id)
        async with self._client() as client:
            return await self._fetch(client, dashboard_id)

    async def _fetch(self, client: httpx.AsyncClient, dashboard_id: str) -> Dashboard:
        """GET a single dashboard and decode it into a ``Dashboard``."""

        fetched_at = self._clock()
        url = self.base_url + dashboard_id

        try:
            logger.info("grafana.dashboard.fetch", extra={"url": url, "dashboard_id": dashboard_id})
            # httpx timeouts apply per phase; this bounds the whole exchange including the body.
            async with asyncio.timeout(self.timeout):
                response = await client.get(url)
            response.raise_for_status()
        except TimeoutError as exc:
            logger.warning("grafana.dashboard.fetch.timeout", extra={"url": url, "timeout": self.timeout})
            raise UpstreamError(f"making request: {url} timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            detail = exc.response.text[:200]
            logger.warning(
                "grafana.dashboard.fetch.http_error",
                extra={"url": url, "status": status, "detail": detail},
            )
            raise UpstreamError(f"making request: {url} returned {status}") from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "grafana.dashboard.fetch.network_error",
                extra={"url": url, "error": str(exc) or type(exc).__name__},
            )
            raise UpstreamError(f"making request: {str(exc) or type(exc).__name__}") from exc

        try:
            data: Any = response.json()
        except ValueError as exc:
            raise UpstreamError(f"parsing response: {exc}") from exc

        if not isinstance(data, dict):
            raise UpstreamError("parsing response: expected a JSON object")

        try:
            board = Dashboard.model_validate({**data, "fetched_at": fetched_at})
        except pydantic.ValidationError as exc:
            fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
            raise UpstreamError(f"parsing response: invalid fields: {fields}") from exc

        logger.info(
            "grafana.dashboard.fetch.summary",
            extra={"dashboard_id": board.dashboard_id, "downloads": board.downloads},
        )
        return board
