"""Where ``loyalty_receipts`` log records go.

The pipeline modules log ``event:name key=value`` lines through child loggers
of ``"loyalty_receipts"`` and produce no output on their own. The command line
calls :func:`configure_logging` at startup to send those lines to stderr, at
the level named by ``LOYALTY_RECEIPTS_LOG_LEVEL`` (INFO when unset or unknown).
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

LEVEL_ENV = "LOYALTY_RECEIPTS_LOG_LEVEL"

_ROOT = logging.getLogger("loyalty_receipts")
_ROOT.addHandler(logging.NullHandler())
_CONFIGURED = False


def _level_from(value: int | str | None) -> int:
    if value is None:
        value = os.getenv(LEVEL_ENV, "")
    if isinstance(value, int):
        return value
    return logging.getLevelNamesMapping().get(value.strip().upper(), logging.INFO)


def configure_logging(level: int | str | None = None, *, stream: IO[str] | None = None) -> None:
    """Attach a stderr handler to the package logger; repeat calls do nothing.

    ``stream`` replaces stderr, which keeps stdout free for command output.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return
    handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    _ROOT.addHandler(handler)
    _ROOT.setLevel(_level_from(level))
    _ROOT.propagate = False
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["LEVEL_ENV", "configure_logging", "get_logger"]
