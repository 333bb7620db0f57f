"""Logging setup for the bfstep front ends.

The library modules only create loggers; handlers are installed here,
once, by whichever front end is running.
"""

import json
import logging
from datetime import datetime, timezone

# Extra record fields surfaced by JSONFormatter when present
EXTRA_FIELDS = ("ip", "dp", "command", "error_kind")


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "WARNING", fmt: str = "text") -> logging.Handler:
    """Install a stderr handler on the root logger.

    Args:
        level: Level name, e.g. "DEBUG"; unknown names fall back to WARNING
        fmt: "json" for JSONFormatter, anything else for plain text

    Returns:
        The installed handler
    """
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    return handler
