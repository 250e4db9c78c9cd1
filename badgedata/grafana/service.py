"""Download count business logic: serve fresh counts from cache, fetch the rest."""

from __future__ import annotations

from collections.abc import Sequence

from badgedata.errors import TooManyIDsError
from badgedata.grafana.cache import DashboardCache
from badgedata.grafana.client import DashboardClient
from badgedata.lib.logger import get_logger

logger = get_logger(__name__)


class DownloadCountService:
    """Totals dashboard downloads for a batch of ids."""

    def __init__(
        self,
        cache: DashboardCache,
        client: DashboardClient,
        *,
        max_ids: int = 50,
        dedupe: bool = False,
    ) -> None:
        self.cache = cache
        self.client = client
        self.max_ids = max_ids
        self.dedupe = dedupe

    async def download_count(self, ids: Sequence[str]) -> int:
        """Return the summed downloads of ``ids``.

        Stale or missing ids are fetched outside any lock and merged only after
        the whole batch succeeded; any failure propagates and merges nothing.
        """

        if len(ids) > self.max_ids:
            raise TooManyIDsError(len(ids), self.max_ids)

        if self.dedupe:
            ids = list(dict.fromkeys(ids))

        counter, fetch = self.cache.check_existing(ids)
        if not fetch:
            return counter

        logger.info(
            "grafana.download_count.refresh",
            extra={"requested": len(ids), "stale": len(fetch)},
        )
        boards = await self.client.fetch_dashboards(fetch)
        return counter + self.cache.merge(boards)
