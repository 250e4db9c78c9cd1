"""Read-through cache of dashboard download counts."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime, timedelta

from badgedata.grafana.schemas import Dashboard
from badgedata.lib.rwlock import ReadWriteLock


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class DashboardCache:
    """Dashboards keyed by id; entries are superseded in place, never evicted."""

    def __init__(
        self,
        refresh: timedelta = timedelta(hours=1),
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.refresh = refresh
        self._clock = clock
        self._lock = ReadWriteLock()
        self._dashboards: dict[str, Dashboard] = {}

    def check_existing(self, ids: Sequence[str]) -> tuple[int, list[str]]:
        """Return the download total of fresh entries and the ids that need fetching.

        ``ids`` is walked in order and repeated ids are counted once per
        occurrence; the stale list keeps the input order.
        """

        counter = 0
        fetch: list[str] = []
        now = self._clock()

        with self._lock.read():
            for dashboard_id in ids:
                dashboard = self._dashboards.get(dashboard_id)
                if dashboard is None or now - dashboard.fetched_at > self.refresh:
                    fetch.append(dashboard_id)
                else:
                    counter += dashboard.downloads

        return counter, fetch

    def merge(self, boards: Iterable[Dashboard]) -> int:
        """Insert new or refreshed dashboards and return the sum of their downloads."""

        counter = 0
        with self._lock.write():
            for board in boards:
                self._dashboards[board.dashboard_id] = board
                counter += board.downloads
        return counter

    def get(self, dashboard_id: str) -> Dashboard | None:
        with self._lock.read():
            return self._dashboards.get(dashboard_id)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._dashboards)
