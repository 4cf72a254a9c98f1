"""Structured logging configuration for BuildSheet."""
import json
import logging
import sys
from datetime import datetime, timezone

# Extra attributes the engine attaches to records (middleware, @timed, store)
CONTEXT_FIELDS = (
    "project_id",
    "request_id",
    "http_method",
    "http_path",
    "http_status",
    "qualname",
    "duration_ms",
)

NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx", "LiteLLM", "LiteLLM Router", "LiteLLM Proxy")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with any context fields present on the record."""
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable format for local runs; appends the project id when known."""
    def __init__(self):
        super().__init__("%(asctime)s [%(name)s] %(levelname)s: %(message)s")

    def format(self, record):
        line = super().format(record)
        project_id = getattr(record, "project_id", None)
        return f"{line} (project={project_id})" if project_id else line


def setup_logging(level: str = "INFO", json_output: bool = True):
    """Configure application logging."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_output else ConsoleFormatter())
    root.handlers = [handler]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
