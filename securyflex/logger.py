"""
Structured JSON Logging Module.

Provides a StructuredLogger factory that produces logging.Logger instances
configured with JSON-formatted output for the security audit trail.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO, Union


class JSONFormatter(logging.Formatter):
    """Formats log records as structured JSON objects.

    Each log entry contains:
        - timestamp  (ISO-8601, UTC)
        - level      (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        - logger_name
        - message
        - extra      (optional structured fields passed via the `extra` kwarg)
    """

    # Standard LogRecord attribute names, computed once per process.
    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Union[str, dict[str, str]]] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, str] = {
            key: str(value)
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if extra_fields:
            entry["extra"] = extra_fields

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False)


class StructuredLogger:
    """Injectable logger factory.

    One instance is built in the composition root and handed to every
    service, adapter and repository.  Audit events pass their action via
    ``extra={"event": ...}``, which the formatter emits under ``extra``.

    Passing ``log_file=""`` (or configuring ``LOG_FILE=""``) disables the
    rotating file handler and keeps console output only.
    """

    def __init__(
        self,
        name: str = "securyflex",
        level: Optional[int] = None,
        stream: Union[TextIO, None] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Lazy import to avoid circular dependency at module level
        from securyflex.config import get_config
        _cfg = get_config()

        resolved_level: int = (
            level if level is not None
            else logging.getLevelName(_cfg.LOG_LEVEL.upper())
        )
        if not isinstance(resolved_level, int):
            resolved_level = logging.INFO

        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(resolved_level)

        resolved_max_bytes: int = max_bytes if max_bytes is not None else _cfg.LOG_MAX_BYTES
        resolved_backup_count: int = backup_count if backup_count is not None else _cfg.LOG_BACKUP_COUNT

        # Prevent duplicate handlers when the same name is reused.
        if not self._logger.handlers:
            formatter = JSONFormatter()

            stream_handler = logging.StreamHandler(stream or sys.stdout)
            stream_handler.setLevel(resolved_level)
            stream_handler.setFormatter(formatter)
            self._logger.addHandler(stream_handler)

            resolved_log_file: str = log_file if log_file is not None else _cfg.LOG_FILE
            if resolved_log_file:
                try:
                    log_path = Path(resolved_log_file)
                    log_path.parent.mkdir(parents=True, exist_ok=True)
                    file_handler = RotatingFileHandler(
                        filename=str(log_path),
                        maxBytes=resolved_max_bytes,
                        backupCount=resolved_backup_count,
                        encoding="utf-8",
                    )
                    file_handler.setLevel(resolved_level)
                    file_handler.setFormatter(formatter)
                    self._logger.addHandler(file_handler)
                except (PermissionError, OSError) as exc:
                    self._logger.warning(
                        "Could not create log file '%s': %s. "
                        "Continuing with console logging only.",
                        resolved_log_file,
                        exc,
                    )

    # -- Public attribute -----------------------------------------------------

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying ``logging.Logger`` directly."""
        return self._logger

    # -- Convenience delegates ------------------------------------------------

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(component: str = "") -> StructuredLogger:
    """Logger for *component* under the ``securyflex`` hierarchy.

    ``get_logger("services")`` logs as ``securyflex.services``; an empty
    *component* returns the root ``securyflex`` logger.
    """
    name = f"securyflex.{component}" if component else "securyflex"
    return StructuredLogger(name=name)
