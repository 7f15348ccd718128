import contextvars
import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler


DEFAULT_LOG_FILE = "tryon.log"

# Set by the request middleware in api.app; "-" outside of a request.
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Stamps the current request id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


_STD_KEYS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
    "relativeCreated", "thread", "threadName", "processName", "process", "stacklevel",
    "taskName",
}


class JsonFormatter(logging.Formatter):
    """Structured JSON log formatter.

    - Merges dict messages into the top-level payload.
    - Includes timestamp, level, logger, module, func, line and request_id.
    - Appends exc_info when present.
    - Carries along extra attributes passed via ``extra=``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
        }

        if isinstance(record.msg, dict):
            payload.update(record.msg)
        else:
            payload["message"] = record.getMessage()

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _STD_KEYS or key.startswith("_") or key in payload:
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except (TypeError, ValueError):
                payload[key] = str(value)

        return json.dumps(payload, ensure_ascii=False)


def _configure_handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
        handler.addFilter(RequestIdFilter())


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once with the JSON format.

    - Honors LOG_LEVEL env (DEBUG, INFO, WARNING, ERROR) if ``level`` is not given.
    - If handlers already exist, only re-applies level, formatter and filter.
    - Optional rotating file output via LOG_TO_FILE=true and LOG_FILE_PATH.
    - Aligns the uvicorn loggers with the same level and format.
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    root = logging.getLogger()
    formatter = JsonFormatter()

    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    for handler in root.handlers:
        _configure_handler(handler, numeric_level, formatter)
    root.setLevel(numeric_level)

    if os.getenv("LOG_TO_FILE", "false").lower() in {"1", "true", "yes"}:
        log_file = os.path.abspath(os.getenv("LOG_FILE_PATH", DEFAULT_LOG_FILE))
        already_attached = any(
            isinstance(h, RotatingFileHandler) and h.baseFilename == log_file
            for h in root.handlers
        )
        if not already_attached:
            try:
                file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
            except OSError as e:
                root.warning(f"File logging disabled, cannot open {log_file}: {e}")
            else:
                _configure_handler(file_handler, numeric_level, formatter)
                root.addHandler(file_handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.setLevel(numeric_level)
        for handler in lg.handlers:
            _configure_handler(handler, numeric_level, formatter)
