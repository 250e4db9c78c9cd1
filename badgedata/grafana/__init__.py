"""Grafana.com data source: dashboard download counts."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from badgedata.config import Settings
from badgedata.grafana.cache import DashboardCache
from badgedata.grafana.client import DashboardClient
from badgedata.grafana.routes import make_handler
from badgedata.grafana.service import DownloadCountService
from badgedata.registry import Registry

ROUTE_NAME = "grafana"


@dataclass
class GrafanaSource:
    cache: DashboardCache
    client: DashboardClient
    service: DownloadCountService


def setup(
    registry: Registry,
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GrafanaSource:
    """Construct the grafana data source and register its handler."""

    cache = DashboardCache(settings.cache_refresh)
    client = DashboardClient(
        settings.grafana_dashboard_api,
        timeout=settings.fetch_timeout_seconds,
        transport=transport,
    )
    service = DownloadCountService(
        cache,
        client,
        max_ids=settings.max_ids,
        dedupe=settings.dedupe_ids,
    )
    registry.register(ROUTE_NAME, make_handler(service))
    return GrafanaSource(cache=cache, client=client, service=service)


__all__ = ["GrafanaSource", "ROUTE_NAME", "setup"]
