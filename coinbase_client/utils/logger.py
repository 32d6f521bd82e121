from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s | %(context)s"
ROOT_LOGGER_NAME = "coinbase_client"


def _render_context(context: Dict[str, Any]) -> str:
    return " ".join(f"{key}={value!r}" for key, value in context.items())


class _ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if not hasattr(record, "context"):
            record.context = ""
        return True


def _has_output(logger: logging.Logger) -> bool:
    return any(not isinstance(h, logging.NullHandler) for h in logger.handlers)


def _attach_output(logger: logging.Logger, log_file: Path | None) -> None:
    handler: logging.Handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=5)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_ContextFilter())
    for existing in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(existing)
    logger.addHandler(handler)


class ClientLogger:
    """Structured logger; keyword arguments are rendered as ``key=value`` context.

    A logger built without ``log_file`` or ``console`` only gets a
    ``NullHandler``, so the host application's logging configuration decides
    where client records go.  Output handlers are attached once per logger
    name, so building several clients from the same settings does not
    duplicate lines.
    """

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: int = logging.INFO,
        log_file: Path | None = None,
        console: bool = False,
    ):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        if log_file is not None or console:
            if not _has_output(self._logger):
                _attach_output(self._logger, log_file)
        elif not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, msg: str, **context: Any) -> None:
        self._logger.log(level, msg, extra={"context": _render_context(context)})

    def debug(self, msg: str, **context: Any) -> None:
        self._log(logging.DEBUG, msg, **context)

    def info(self, msg: str, **context: Any) -> None:
        self._log(logging.INFO, msg, **context)

    def warn(self, msg: str, **context: Any) -> None:
        self._log(logging.WARNING, msg, **context)

    def error(self, msg: str, **context: Any) -> None:
        self._log(logging.ERROR, msg, **context)

    def set_level(self, level: int) -> None:
        self._logger.setLevel(level)
