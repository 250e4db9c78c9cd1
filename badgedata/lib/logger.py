"""One-line JSON logs for the badge data service.

Every line carries ``time``, ``level``, ``service``, ``logger`` and ``event``
(the dotted message, e.g. ``grafana.dashboard.fetch``). Anything passed via
``extra=`` is copied in alongside; values JSON cannot encode are ``repr``'d.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

SERVICE_NAME = "badgedata"

# Attributes every LogRecord has; whatever else is on a record came from ``extra=``.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)
    return value


class JsonFormatter(logging.Formatter):
    def __init__(self, service: str = SERVICE_NAME) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "service": self.service,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(
            (key, _jsonable(value)) for key, value in record.__dict__.items() if key not in _RECORD_ATTRS
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: int | str = logging.INFO, *, service: str = SERVICE_NAME) -> None:
    """Route the root logger through a single JSON handler.

    Safe to call once per app instance: the handler is installed the first
    time and later calls only change the level.
    """

    root = logging.getLogger()
    root.setLevel(level)
    if any(isinstance(handler.formatter, JsonFormatter) for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(service))
    root.handlers.clear()
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
