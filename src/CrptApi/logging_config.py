"""Logging setup shared by the CLI and embedding applications."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Dict, Optional, TextIO, Union

from CrptApi.settings import LogFormat, LogLevel

__all__ = ["JSONFormatter", "mask_sensitive_data", "setup_logging"]

_SENSITIVE_KEYS = {"signature", "authorization", "token", "secret", "password"}
_MASK = "***masked***"


def mask_sensitive_data(payload: Dict[str, object]) -> Dict[str, object]:
    """Return a copy of ``payload`` with signatures and secrets masked."""

    masked: Dict[str, object] = {}
    for key, value in payload.items():
        if key.lower() in _SENSITIVE_KEYS:
            masked[key] = _MASK
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value)
        else:
            masked[key] = value
    return masked


class JSONFormatter(logging.Formatter):
    """Formatter emitting masked JSON log lines."""

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            payload.update(extra_fields)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(payload), default=str, ensure_ascii=False)


def setup_logging(
    *,
    level: Union[str, LogLevel] = LogLevel.INFO,
    fmt: Union[str, LogFormat] = LogFormat.CONSOLE,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the ``CrptApi`` logger with a single managed stream handler."""

    level_name = level.value if isinstance(level, LogLevel) else str(level)
    log_format = LogFormat(fmt)

    logger = logging.getLogger("CrptApi")
    logger.setLevel(getattr(logging, level_name.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_crpt_managed", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if log_format is LogFormat.JSON:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    handler._crpt_managed = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False
    return logger
