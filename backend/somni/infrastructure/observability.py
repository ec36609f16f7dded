"""Structured Logging — one JSON line per record, keyed by subject and session.

Invariants:
    - Every line carries timestamp (UTC, from the record), level, logger, message
    - subject_id / session_id / error_code / path appear only when passed via
      `extra=`; session transitions and domain errors always pass them
    - setup_logging owns a single root handler: calling it again replaces
      that handler instead of stacking a second one

Design Decisions:
    - setup_logging called from the FastAPI lifespan; "text" format for local runs
"""

import logging
import json
from datetime import datetime, timezone

EXTRA_FIELDS = ("subject_id", "session_id", "error_code", "path")

_HANDLER_NAME = "somni"


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update(
            (key, record.__dict__[key]) for key in EXTRA_FIELDS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
