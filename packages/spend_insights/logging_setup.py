"""Process-wide logging for ``spend_insights``.

Everything logs under the ``"spend_insights"`` logger tree. Modules obtain
their logger with :func:`get_logger` (``"spend_insights.builder"``,
``"spend_insights.storage"``, ...) and emit only; output is set up by the CLI
callback through :func:`configure_logging`. Embedding applications that never
call it get silence from a ``NullHandler`` and can attach their own handlers.

The level is taken from the ``level`` argument, else ``SPEND_INSIGHTS_LOG_LEVEL``,
else ``INFO``. Unknown level names resolve to ``INFO`` rather than failing
startup.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

LOG_LEVEL_ENV = "SPEND_INSIGHTS_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_ROOT_NAME = "spend_insights"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    """Resolve ``level`` (int, name such as ``"debug"``, or digits) to a number."""

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV)
    if isinstance(level, int):
        return level
    if level:
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelNamesMapping().get(name)
        if numeric is not None:
            return numeric
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Send ``spend_insights`` records to ``stream``; later calls are no-ops.

    Parameters
    ----------
    level:
        Threshold for both the logger and its handler.
    fmt:
        Record format, :data:`DEFAULT_FORMAT` when omitted.
    stream:
        Destination of the single ``StreamHandler``.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    root = logging.getLogger(_ROOT_NAME)
    for h in [h for h in root.handlers if isinstance(h, logging.NullHandler)]:
        root.removeHandler(h)

    threshold = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(threshold)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    root.setLevel(threshold)
    root.addHandler(handler)
    # Records stop here; the host's root logger never sees them twice.
    root.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(_ROOT_NAME)
    if not _CONFIGURED and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["DEFAULT_FORMAT", "LOG_LEVEL_ENV", "configure_logging", "get_logger"]
