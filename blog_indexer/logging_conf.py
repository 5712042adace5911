"""structlog events rendered as JSON lines by the stdlib logging handlers."""

from __future__ import annotations

import logging
import logging.config
import os
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

import structlog

ROOT_LOGGER = "blog_indexer"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False


@dataclass(frozen=True)
class LogLayout:
    """Where each log stream is written below the home directory."""

    root: Path

    @classmethod
    def current(cls) -> "LogLayout":
        home = os.environ.get("BLOG_INDEXER_HOME")
        base = Path(home).expanduser().resolve() if home else Path(__file__).resolve().parents[1]
        return cls(base / "logs")

    @property
    def main(self) -> Path:
        return self.root / "indexer.log"

    @property
    def errors(self) -> Path:
        return self.root / "error.log"

    @property
    def sources(self) -> Path:
        return self.root / "sources"

    def source(self, name: str) -> Path:
        return self.sources / f"{name}.log"

    def prepare(self) -> None:
        self.sources.mkdir(parents=True, exist_ok=True)
        for path in (self.main, self.errors):
            path.touch(exist_ok=True)


def _file_handler(path: Path, level: str) -> dict[str, Any]:
    return {
        "class": "logging.FileHandler",
        "level": level,
        "filename": str(path),
        "encoding": "utf-8",
        "formatter": "json",
    }


def _dict_config(layout: LogLayout, level: str) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "pythonjsonlogger.jsonlogger.JsonFormatter", "fmt": JSON_FORMAT}
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "level": level, "formatter": "json"},
            "main_file": _file_handler(layout.main, "INFO"),
            "error_file": _file_handler(layout.errors, "ERROR"),
        },
        "loggers": {
            ROOT_LOGGER: {
                "handlers": ["console", "main_file", "error_file"],
                "level": level,
                "propagate": False,
            }
        },
    }


def configure_logging(verbose: bool = False) -> structlog.BoundLogger:
    """Install handlers and structlog processors once; later calls reuse them."""

    global _configured
    layout = LogLayout.current()
    layout.prepare()
    if not _configured:
        logging.config.dictConfig(_dict_config(layout, "DEBUG" if verbose else "INFO"))
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _configured = True
    return structlog.get_logger(ROOT_LOGGER)


def source_logger(source_name: str, verbose: bool = False) -> structlog.BoundLogger:
    """Logger for one discovery source, also written to ``logs/sources/<name>.log``."""

    configure_logging(verbose)
    path = LogLayout.current().source(source_name)
    name = f"{ROOT_LOGGER}.source.{source_name}"
    stdlib_logger = logging.getLogger(name)
    attached = {getattr(handler, "baseFilename", None) for handler in stdlib_logger.handlers}
    if str(path) not in attached:
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(logging.INFO)
        parent_handlers = logging.getLogger(ROOT_LOGGER).handlers
        if parent_handlers:
            handler.setFormatter(parent_handlers[0].formatter)
        stdlib_logger.addHandler(handler)
    return structlog.get_logger(name).bind(source=source_name)


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        return list(deque(stream, maxlen=line_count))


def available_source_logs() -> Iterable[Path]:
    sources = LogLayout.current().sources
    if not sources.is_dir():
        return []
    return sorted(sources.glob("*.log"))


def log_dir() -> Path:
    return LogLayout.current().root


__all__ = [
    "LogLayout",
    "available_source_logs",
    "configure_logging",
    "log_dir",
    "source_logger",
    "tail_log",
]
