from __future__ import annotations

import copy
import logging
import os
import sys
import time
import uuid
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

APP_LOGGER = "curriculum"
CONSOLE_HANDLER = "console"
LOG_FORMAT = (
    "%(asctime)s %(levelname)-8s %(name)s "
    "pid=%(process)d request_id=%(request_id)s src=%(filename)s:%(lineno)d "
    "%(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

REQUEST_ID: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 (shadow built-in name)
        record.request_id = REQUEST_ID.get("-")
        return True


class ColorFormatter(logging.Formatter):
    """
    Console-only ANSI formatter: blue timestamp, per-level colored level name.
    Disabled when NO_COLOR is set or the stream is not a TTY.
    """

    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _BLUE = "\x1b[34m"

    _LEVEL_COLORS: dict[int, str] = {
        logging.DEBUG: "\x1b[36m",
        logging.INFO: "\x1b[32m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[35m",
    }

    def __init__(self, *args, enable_color: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.enable_color = enable_color

    def format(self, record: logging.LogRecord) -> str:
        if not self.enable_color:
            return super().format(record)

        r = copy.copy(record)
        level_color = self._LEVEL_COLORS.get(r.levelno, "\x1b[37m")
        r.levelname = f"{level_color}{r.levelname}{self._RESET}"
        r.name = f"{self._DIM}{r.name}{self._RESET}"
        r.request_id = f"{self._DIM}{getattr(r, 'request_id', '-')}{self._RESET}"
        line = super().format(r)
        # asctime is only known after formatting
        if r.asctime and line.startswith(r.asctime):
            line = f"{self._BLUE}{r.asctime}{self._RESET}{line[len(r.asctime):]}"
        return line


def _should_enable_color(stream) -> bool:
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _parse_level(level: str) -> int:
    value = logging.getLevelName((level or "INFO").upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    *,
    log_dir: str | Path | None = None,
    log_file: str = "backend.log",
    level: str | None = None,
    console: bool | None = None,
) -> logging.Logger:
    """
    Configure the application logger: rotating file under `log_dir`, optional console.
    Idempotent; api modules call it at import time. Core loggers (`curriculum.*`) propagate into it.
    A later call with console=True still attaches the console handler.
    """

    logger = logging.getLogger(APP_LOGGER)
    if getattr(logger, "_configured", False):
        if console:
            _add_console_handler(logger)
        return logger

    from api.config import get_settings

    settings = get_settings()
    log_dir = log_dir or settings.log_dir
    level = os.getenv("LOG_LEVEL", level or settings.log_level)
    console = settings.log_to_console if console is None else console
    numeric_level = _parse_level(level)

    logger.setLevel(numeric_level)
    logger.propagate = False

    request_filter = RequestIdFilter()

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    fh = RotatingFileHandler(
        filename=str(Path(log_dir) / log_file),
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10,
        encoding="utf-8",
    )
    fh.setLevel(numeric_level)
    fh.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    fh.addFilter(request_filter)
    logger.addHandler(fh)

    if console:
        _add_console_handler(logger)

    logger._configured = True  # type: ignore[attr-defined]
    return logger


def _add_console_handler(logger: logging.Logger) -> None:
    if any(h.get_name() == CONSOLE_HANDLER for h in logger.handlers):
        return
    ch = logging.StreamHandler(sys.stdout)
    ch.set_name(CONSOLE_HANDLER)
    ch.setLevel(logger.level)
    ch.setFormatter(ColorFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT, enable_color=_should_enable_color(sys.stdout)))
    ch.addFilter(RequestIdFilter())
    logger.addHandler(ch)


def set_request_id(request_id: Optional[str] = None) -> str:
    rid = request_id or str(uuid.uuid4())
    REQUEST_ID.set(rid)
    return rid


def clear_request_id() -> None:
    REQUEST_ID.set("-")


class log_request:
    """
    Times a block and logs its outcome:
      with log_request(logger, "overdue sweep"):
          ...
    """

    def __init__(self, logger: logging.Logger, name: str):
        self.logger = logger
        self.name = name
        self.start = 0.0

    def __enter__(self):
        self.start = time.time()
        self.logger.debug("start %s", self.name)
        return self

    def __exit__(self, exc_type, exc, tb):
        dur_ms = int((time.time() - self.start) * 1000)
        if exc is None:
            self.logger.info("%s ok duration_ms=%s", self.name, dur_ms)
        else:
            self.logger.error("%s failed duration_ms=%s", self.name, dur_ms, exc_info=(exc_type, exc, tb))
        return False
