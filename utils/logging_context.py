"""Contextual log fields for the upload wizard.

Each record carries the Streamlit session, the wizard step the user is on and
the draft storage key, so persistence warnings can be traced to one draft.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import Final, Iterator

LOG_FORMAT: Final[str] = (
    "%(asctime)s %(levelname)s [session=%(session_id)s step=%(wizard_step)s "
    "draft=%(draft_key)s] %(name)s: %(message)s"
)
_UNSET: Final[str] = "-"

_CONTEXT: Final[dict[str, contextvars.ContextVar[str]]] = {
    name: contextvars.ContextVar(name, default=_UNSET) for name in ("session_id", "wizard_step", "draft_key")
}
_base_factory = logging.getLogRecordFactory()
_factory_installed = False


def _normalise(value: object) -> str:
    text = "" if value is None else str(value).strip()
    return text or _UNSET


def _stamp(record: logging.LogRecord) -> logging.LogRecord:
    for name, var in _CONTEXT.items():
        setattr(record, name, var.get())
    return record


class WizardContextFilter(logging.Filter):
    """Attach the wizard context to records passing through a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        _stamp(record)
        return True


def _context_record_factory(*args: object, **kwargs: object) -> logging.LogRecord:
    return _stamp(_base_factory(*args, **kwargs))


def configure_logging(*, level: int = logging.INFO) -> None:
    """Install the wizard log format once; safe to call on every rerun."""

    global _factory_installed
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    for handler in root.handlers:
        if handler.formatter is None:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
    if not any(isinstance(existing, WizardContextFilter) for existing in root.filters):
        root.addFilter(WizardContextFilter())
    if not _factory_installed:
        logging.setLogRecordFactory(_context_record_factory)
        _factory_installed = True


def set_session_id(session_id: str | None) -> None:
    configure_logging()
    _CONTEXT["session_id"].set(_normalise(session_id))


def set_wizard_step(step: object) -> None:
    _CONTEXT["wizard_step"].set(_normalise(step))


def set_draft_key(key: str | None) -> None:
    _CONTEXT["draft_key"].set(_normalise(key))


@contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Temporarily bind ``session_id``, ``wizard_step`` and/or ``draft_key``.

    Raises:
        KeyError: For names other than the three wizard context fields.
    """

    tokens = [(_CONTEXT[name], _CONTEXT[name].set(_normalise(value))) for name, value in values.items()]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


__all__ = [
    "LOG_FORMAT",
    "WizardContextFilter",
    "configure_logging",
    "log_context",
    "set_draft_key",
    "set_session_id",
    "set_wizard_step",
]
