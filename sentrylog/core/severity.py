"""
Severity mapping from log levels to Sentry's level scale.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any


class SentrySeverity(str, Enum):
    """Sentry event levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


DEFAULT_SEVERITY = SentrySeverity.INFO

_ALIASES: dict[str, SentrySeverity] = {
    "debug": SentrySeverity.DEBUG,
    "trace": SentrySeverity.DEBUG,
    "info": SentrySeverity.INFO,
    "notice": SentrySeverity.INFO,
    "warn": SentrySeverity.WARNING,
    "warning": SentrySeverity.WARNING,
    "err": SentrySeverity.ERROR,
    "error": SentrySeverity.ERROR,
    "exception": SentrySeverity.ERROR,
    "critical": SentrySeverity.FATAL,
    "alert": SentrySeverity.FATAL,
    "emergency": SentrySeverity.FATAL,
    "fatal": SentrySeverity.FATAL,
}

# Ordered highest first; ints round down to the nearest stdlib level
_NUMERIC: list[tuple[int, SentrySeverity]] = [
    (logging.CRITICAL, SentrySeverity.FATAL),
    (logging.ERROR, SentrySeverity.ERROR),
    (logging.WARNING, SentrySeverity.WARNING),
    (logging.INFO, SentrySeverity.INFO),
]


def process_severity(value: Any) -> str:
    """
    Map a level token onto Sentry's severity scale.

    Args:
        value: A stdlib logging level (int), a level name in any case, one of
            the common aliases (``warn``, ``critical``...) or a SentrySeverity.

    Returns:
        One of ``debug``, ``info``, ``warning``, ``error``, ``fatal``.
        Unrecognised input maps to ``info``.
    """
    if isinstance(value, SentrySeverity):
        return value.value

    if isinstance(value, bool):
        return DEFAULT_SEVERITY.value

    if isinstance(value, int):
        for threshold, severity in _NUMERIC:
            if value >= threshold:
                return severity.value
        return SentrySeverity.DEBUG.value

    if isinstance(value, str):
        token = value.strip().lower()
        if token.isdigit():
            return process_severity(int(token))
        return _ALIASES.get(token, DEFAULT_SEVERITY).value

    return DEFAULT_SEVERITY.value
