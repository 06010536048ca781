"""
Logging setup for the finance tracker.

Mutations are logged through `log_action`, which attaches `action`,
`resource` and `extra` attributes to the record. `JSONFormatter` renders those
attributes as one JSON object per line; the text format drops them.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


STRUCTURED_FIELDS = ("action", "resource", "extra")

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record; unset structured fields are omitted"""

    def format(self, record):
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in STRUCTURED_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Decimals and dates in `extra` are written as strings
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json",
                  logger_name: str = "finance_tracker") -> logging.Logger:
    """
    Attach a single stderr handler to the application logger.

    Calling it again replaces the handler rather than adding a second one.
    `fmt` is "json" or "text".
    """
    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger


def get_logger(name: str = "finance_tracker") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               extra: Optional[dict] = None):
    """
    Emit `message` at `level` with structured context.

    `resource` names the record acted on as "<entity>:<id>", e.g.
    "account:3f2a...". Nothing is built when the level is disabled.
    """
    levelno = logging.getLevelName(level.upper())
    if not logger.isEnabledFor(levelno):
        return

    context = {"action": action, "resource": resource, "extra": extra or None}
    logger.log(levelno, message, extra={k: v for k, v in context.items() if v is not None})
