"""Logging for ``finance_tracker``.

Everything logs under the ``finance_tracker`` logger tree with short
``event:key=value`` messages, for example::

    normalize_rows:row_invalid row=3 errors=1
    import_csv:done created=9 errors=1

Only entrypoints call :func:`configure_logging`; library modules call
:func:`get_logger` and stay silent until an application opts in. The level
comes from the ``level`` argument, then ``FINANCE_TRACKER_LOG_LEVEL``, then
``WARNING`` so CLI output is not interleaved with routine events.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

ROOT_LOGGER = "finance_tracker"
LEVEL_ENV_VAR = "FINANCE_TRACKER_LOG_LEVEL"
DEFAULT_LEVEL = logging.WARNING
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s %(message)s"

# The one handler owned by this module; replaced on reconfiguration.
_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` (or the env var when ``None``) into a numeric level.

    Accepts ints, digit strings and level names in any case. Anything else
    falls back to :data:`DEFAULT_LEVEL`.
    """

    if level is None:
        level = os.getenv(LEVEL_ENV_VAR) or DEFAULT_LEVEL
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelNamesMapping().get(name)
    return value if value is not None else DEFAULT_LEVEL


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Route the package logger tree to ``stream`` (``sys.stderr`` by default).

    Safe to call more than once: the previous handler installed here is
    swapped out, so there is always exactly one. Records do not propagate to
    the root logger.
    """

    global _handler
    pkg = logging.getLogger(ROOT_LOGGER)
    for h in list(pkg.handlers):
        if h is _handler or isinstance(h, logging.NullHandler):
            pkg.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    pkg.addHandler(handler)
    pkg.setLevel(resolved)
    pkg.propagate = False
    _handler = handler
    return pkg


def get_logger(name: str) -> logging.Logger:
    # A NullHandler keeps unconfigured library use quiet.
    pkg = logging.getLogger(ROOT_LOGGER)
    if _handler is None and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "DEFAULT_LEVEL",
    "LEVEL_ENV_VAR",
    "ROOT_LOGGER",
    "configure_logging",
    "get_logger",
    "resolve_level",
]
