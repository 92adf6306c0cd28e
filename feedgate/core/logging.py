"""feedgate.core.logging

stdlib logging, configured once at process start.

Messages are event names (``egress_blocked``); context travels in ``extra``.
The JSON formatter lifts those extra fields onto the emitted object.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from feedgate.core.config import LoggingConfig

_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime"}

_PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, sort_keys=True)


def configure_logging(cfg: LoggingConfig | None = None) -> None:
    cfg = cfg or LoggingConfig()

    handler = logging.StreamHandler(sys.stderr)
    if cfg.json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))

    root = logging.getLogger("feedgate")
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(cfg.level)
    root.propagate = False
