"""Error taxonomy shared by the dispatcher and the data sources."""

from __future__ import annotations

from starlette.responses import PlainTextResponse


class BadgeDataError(Exception):
    """Base class; ``status_code`` is the HTTP status the error maps to."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RoutingError(BadgeDataError):
    """Missing path segments or an unknown route name."""

    status_code = 404


class GoneError(RoutingError):
    """The route exists but the requested operation does not."""

    status_code = 410


class ValidationError(BadgeDataError):
    """The request was rejected before any network call."""


class InvalidIDError(ValidationError):
    def __init__(self, external_id: str, reason: str = "not a base-10 integer") -> None:
        super().__init__(f"invalid dashboard ID: {external_id}: {reason}")
        self.external_id = external_id


class TooManyIDsError(ValidationError):
    # Badge consumers expect a 500 here, not a 4xx.
    status_code = 500

    def __init__(self, count: int, limit: int) -> None:
        super().__init__("too many IDs")
        self.count = count
        self.limit = limit


class UpstreamError(BadgeDataError):
    """Network failure, non-2xx status or an unreadable body from the remote API."""


class DisconnectedError(BadgeDataError):
    """The client went away while its request was still being served."""

    def __init__(self) -> None:
        super().__init__("client disconnected")


def error_response(message: str, status_code: int) -> PlainTextResponse:
    """Plain-text error reply in the shape badge consumers display verbatim."""

    return PlainTextResponse(
        message,
        status_code=status_code,
        headers={"X-Content-Type-Options": "nosniff"},
    )
