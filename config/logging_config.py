"""
Logging setup shared by alembic/env.py and one-off data scripts.

- JSON lines when LOG_JSON=1 or RAILWAY_ENVIRONMENT is set, plain text otherwise.
- LOG_LEVEL from env (default INFO).
- Migration logs carry table names, step names and row counts only,
  never identifiers or amounts from the rows themselves.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _json_serial(obj: Any):
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, timestamps in UTC."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            payload["exception"] = self.formatException(record.exc_info)
        # logger.info("...", extra={"extra": {"step": "build_mapping"}})
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update({k: v for k, v in extra.items() if k not in payload and v is not None})
        return json.dumps(payload, default=_json_serial)


def _json_requested() -> bool:
    return (
        os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes")
        or bool(os.getenv("RAILWAY_ENVIRONMENT"))
    )


def configure_logging(
    level: Optional[str] = None,
    *,
    json_logs: Optional[bool] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Replace the root logger's handlers with a single stream handler.

    Arguments override LOG_LEVEL / LOG_JSON; env.py calls this with none so
    `alembic upgrade` follows the environment. Safe to call repeatedly.
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    if json_logs is None:
        json_logs = _json_requested()

    root = logging.getLogger()
    root.setLevel(numeric_level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JsonFormatter() if json_logs else logging.Formatter(PLAIN_FORMAT))
    root.addHandler(handler)

    # Statement echo would leak row values; alembic's "Running upgrade" lines stay.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.INFO)
