"""Log output for partcopy.

Copy log records carry their context as ``extra`` attributes (request id,
upload id, part number, destination, state). Both formatters surface that
context: the JSON formatter as fields, the text formatter as a trailing
``key=value`` suffix, so a single copy can be followed through either.
"""

import json
import logging
import sys
from datetime import datetime, timezone

_CONTEXT_FIELDS = ("request_id", "upload_id", "part_number", "bucket", "key", "state")

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _copy_context(record: logging.LogRecord) -> dict[str, object]:
    return {
        name: getattr(record, name)
        for name in _CONTEXT_FIELDS
        if getattr(record, name, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects.

    Fields: timestamp, level, logger, message, exception when present, and
    whichever copy context fields the record carries.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(_copy_context(record))
        return json.dumps(entry, default=str)


class CopyContextFormatter(logging.Formatter):
    """Text formatter that appends the record's copy context."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _copy_context(record)
        if not context:
            return line
        suffix = " ".join(f"{name}={value}" for name, value in context.items())
        return f"{line} [{suffix}]"


def configure_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        fmt: 'json' for one JSON object per line, anything else for text.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(numeric_level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if fmt == "json" else CopyContextFormatter(_TEXT_FORMAT))
    root.addHandler(handler)
