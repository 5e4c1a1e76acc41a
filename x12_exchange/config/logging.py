"""Process-wide logging setup with execution-id injection."""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone

_EXECUTION_ID: ContextVar[str] = ContextVar("execution_id", default="-")

_logging_configured = False


def config_bind_execution_id(execution_id: str) -> Token[str]:
    """Bind an execution id to the current context for log enrichment.

    Args:
        execution_id: Execution identifier of the running workflow.

    Returns:
        Token[str]: Token restoring the previous value on reset.
    """

    return _EXECUTION_ID.set(execution_id or "-")


def config_reset_execution_id(token: Token[str]) -> None:
    """Restore the execution id that was bound before `token` was issued."""

    _EXECUTION_ID.reset(token)


class _ExecutionIdFilter(logging.Filter):
    """Inject the bound execution id into every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "execution_id", None) is None:
            record.execution_id = _EXECUTION_ID.get()
        return True


class _JsonFormatter(logging.Formatter):
    """Render records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "execution_id": getattr(record, "execution_id", "-"),
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False, default=str)


def config_configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Install the root stream handler once per process.

    Args:
        level: Log level name.
        json_format: Render JSON lines instead of plain text.

    Returns:
        None: Logging is configured as a side effect.
    """

    global _logging_configured

    if _logging_configured:
        return

    if json_format:
        formatter: logging.Formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - [%(execution_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(_ExecutionIdFilter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for noisy_logger_name in ("httpx", "httpcore", "botocore", "paramiko"):
        logging.getLogger(noisy_logger_name).setLevel(logging.WARNING)

    _logging_configured = True
