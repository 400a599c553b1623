"""Diagnostic logger — level-named messages on a stdlib logging sink.

The binder reports skipped elements through ``log(message, "warn")``.
When nothing can receive a diagnostic, ``log`` raises ``NoDiagnosticSink``
instead of dropping the message.
"""

from __future__ import annotations

import logging

from perch.errors import NoDiagnosticSink

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "log": logging.INFO,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _has_sink(logger: logging.Logger) -> bool:
    return logger.hasHandlers() or logging.lastResort is not None


class DiagnosticLogger:
    """Writes binder diagnostics to a ``logging.Logger``.

    Pass ``sink=None`` to model an environment without any diagnostic
    output; every ``log`` call then raises ``NoDiagnosticSink``.
    """

    __slots__ = ("_sink",)

    def __init__(self, sink: logging.Logger | None) -> None:
        self._sink = sink

    @classmethod
    def named(cls, name: str = "perch") -> DiagnosticLogger:
        return cls(logging.getLogger(name))

    @property
    def sink(self) -> logging.Logger | None:
        return self._sink

    def log(self, message: str, level: str = "log") -> None:
        """Write *message* at *level* (``log``, ``info``, ``warn``, ``error``, ``debug``)."""
        try:
            numeric = _LEVELS[level]
        except KeyError:
            msg = f"Unknown log level {level!r}; expected one of {sorted(_LEVELS)}"
            raise ValueError(msg) from None

        sink = self._sink
        if sink is None or not _has_sink(sink):
            raise NoDiagnosticSink(message, level)
        sink.log(numeric, message)

    def exception(self, message: str) -> None:
        """Log *message* at ERROR with the active exception's traceback."""
        sink = self._sink
        if sink is None or not _has_sink(sink):
            raise NoDiagnosticSink(message, "error")
        sink.exception(message)
