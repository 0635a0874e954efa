"""
Logging setup for SIGREQ.

Production writes one JSON object per line; development and tests get a
short coloured line. Every record emitted inside a request is tagged with
the request id and the signed-in user's e-mail, so a failed Graph call can
be traced back to who triggered it. LOG_LEVEL overrides the default level.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

from flask import g, has_request_context, session

# Record attributes promoted into the JSON line when set
_CONTEXT_KEYS = ("request_id", "user", "list_name", "graph_status",
                 "method", "path", "status", "duration_ms", "remote_addr")

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"


class RequestContextFilter(logging.Filter):
    """Stamp request_id/user on records logged while a request is active."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            if getattr(record, "request_id", None) is None:
                record.request_id = getattr(g, "request_id", None)
            if getattr(record, "user", None) is None:
                record.user = (session.get("user") or {}).get("email")
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelname, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}{ts} {record.levelname:<8}{_RESET} {record.name}: {record.getMessage()}"
        user = getattr(record, "user", None)
        if user:
            line += f" <{user}>"
        list_name = getattr(record, "list_name", None)
        if list_name:
            line += f" [lista={list_name}]"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app):
    """Install a single stderr handler on the root logger for ``app``."""
    testing = app.config.get("TESTING", False)
    json_output = not app.config.get("DEBUG", False) and not testing

    level_name = os.getenv("LOG_LEVEL", "INFO" if json_output else "DEBUG").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else ReadableFormatter())
    handler.addFilter(RequestContextFilter())
    handler.setLevel(level)

    root = logging.getLogger()
    # create_app may run several times in one process (tests)
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Graph and IdP transports log every connection at DEBUG
    for name in ("urllib3", "httpx", "httpcore", "werkzeug"):
        logging.getLogger(name).setLevel(logging.WARNING)

    app.logger.setLevel(level)
    if not testing:
        app.logger.info("Logging configured: level=%s format=%s",
                        level_name, "json" if json_output else "readable")
