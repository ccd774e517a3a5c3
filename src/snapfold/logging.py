"""Logging utilities."""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


_pass_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("snapfold_pass_id", default="-")
_stage_var: contextvars.ContextVar[str] = contextvars.ContextVar("snapfold_stage", default="-")


class _ContextFilter(logging.Filter):
    """Inject compression pass context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.pass_id = _pass_id_var.get()  # type: ignore[attr-defined]
        record.stage = _stage_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def compression_context(*, pass_id: str, stage: str | None = None) -> Any:
    """Temporarily bind compression pass context for structured logging.

    Args:
        pass_id: Identifier of one compression pass.
        stage: Optional pipeline stage name.
    """

    token_pass = _pass_id_var.set(pass_id)
    token_stage = _stage_var.set(stage or _stage_var.get())
    try:
        yield
    finally:
        _pass_id_var.reset(token_pass)
        _stage_var.reset(token_stage)


def set_stage(stage: str) -> None:
    """Update current pipeline stage in context."""

    _stage_var.set(stage)


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Logging level name.
    """

    # stdout carries the outline itself
    handler = RichHandler(
        console=Console(stderr=True), rich_tracebacks=True, show_time=True, show_level=True
    )
    handler.addFilter(_ContextFilter())

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s pass=%(pass_id)s stage=%(stage)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level.upper())
    # configure_logging may be called once per CLI invocation
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(handler)
    else:
        for h in root.handlers:
            if isinstance(h, RichHandler):
                h.addFilter(_ContextFilter())
                h.setFormatter(formatter)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""

    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """Log an exception with optional structured context."""

    if context:
        logger.exception("%s | context=%s", msg, context)
    else:
        logger.exception("%s", msg)
