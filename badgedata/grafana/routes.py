"""HTTP handler for ``/<prefix>/grafana/<operation>/<ids>``."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable

from starlette.requests import Request
from starlette.responses import Response

from badgedata.errors import (
    DisconnectedError,
    GoneError,
    InvalidIDError,
    RoutingError,
    TooManyIDsError,
    UpstreamError,
    error_response,
)
from badgedata.grafana.service import DownloadCountService
from badgedata.lib.logger import get_logger
from badgedata.registry import Handler

COUNT_OPERATIONS = frozenset(
    {
        "dashboard-count",
        "dashboard-counts",
        "dashboard-download",
        "dashboard-downloads",
    }
)

logger = get_logger(__name__)


def badge_reply(requested: int, total: int) -> Response:
    # This format works with badgen.net.
    body = f'{{"subject": "{requested} dashboards", "status": {total}}}'
    return Response(body, media_type="application/json")


async def _wait_for_disconnect(request: Request) -> None:
    while True:
        message = await request.receive()
        if message.get("type") == "http.disconnect":
            return


async def unless_disconnected(request: Request, work: Awaitable[int]) -> int:
    """Await ``work``, cancelling it if the client disconnects first.

    Raises ``DisconnectedError`` once the cancelled work has unwound.
    """

    work_task = asyncio.ensure_future(work)
    monitor_task = asyncio.create_task(_wait_for_disconnect(request))

    try:
        done, _pending = await asyncio.wait(
            {work_task, monitor_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        for task in (work_task, monitor_task):
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    if work_task not in done:
        raise DisconnectedError()
    return work_task.result()


async def write_download_count(service: DownloadCountService, request: Request) -> Response:
    """Make sure data is fresh and reply with the download count for the requested dashboards."""

    segments = request.url.path.split("/")
    if len(segments) != 5:
        return error_response("missing path segments", RoutingError.status_code)

    ids = segments[4].split(",")
    try:
        total = await unless_disconnected(request, service.download_count(ids))
    except TooManyIDsError as exc:
        return error_response(exc.message, exc.status_code)
    except DisconnectedError as exc:
        logger.info("grafana.download_count.cancelled", extra={"ids": len(ids)})
        return error_response(f"unable to get data {exc.message}", exc.status_code)
    except (InvalidIDError, UpstreamError) as exc:
        return error_response(f"unable to get data {exc.message}", exc.status_code)

    return badge_reply(len(ids), total)


def make_handler(service: DownloadCountService) -> Handler:
    """Build the request handler registered for the grafana route."""

    async def serve(request: Request) -> Response:
        segments = request.url.path.split("/")
        if len(segments) < 4:
            return error_response("missing path segments", RoutingError.status_code)

        if segments[3] in COUNT_OPERATIONS:
            return await write_download_count(service, request)
        return error_response("not found", GoneError.status_code)

    return serve
