"""Logging configuration for certsmith.

certsmith is a library and attaches no handlers on import.  An
application that wants certsmith's records formatted calls
:func:`configure_logging` with the ``logging`` section of its settings.

Issuance records carry structured fields (``serial``, ``subject``,
``issuer``, ``algorithm``) through ``extra=``.  The JSON formatter emits
them as top-level keys, the text formatter appends them as
``key=value`` pairs.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TextIO

if TYPE_CHECKING:
    from certsmith.config.settings import LoggingSettings

LOGGER_NAME = "certsmith"

# Everything a bare LogRecord carries; other attributes came from ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class StructuredFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp`` (ISO 8601, UTC), ``level``, ``logger``,
    ``message``, then any extra fields, then ``exception`` /
    ``stack_info`` when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in _extra_fields(record).items():
            data.setdefault(key, value)

        if record.exc_info and record.exc_info[0] is not None:
            data["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            data["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(data, default=str)


class TextFormatter(logging.Formatter):
    """Single-line console format with extra fields appended."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extra_fields(record)
        if extras:
            line += " [" + " ".join(f"{k}={v}" for k, v in extras.items()) + "]"
        return line


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def configure_logging(settings: LoggingSettings, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single formatted stream handler to the ``certsmith`` logger.

    Parameters
    ----------
    settings:
        ``level`` is a standard level name (any case); ``format`` is
        ``"json"`` or ``"text"``.
    stream:
        Destination of the handler; ``sys.stderr`` by default.

    Returns
    -------
    logging.Logger
        The ``certsmith`` logger.  Handlers from a previous call are
        replaced, and records no longer propagate to the root logger.

    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.getLevelName(settings.level.upper()))
    logger.handlers.clear()
    logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter() if settings.format == "json" else TextFormatter())
    logger.addHandler(handler)
    return logger
