"""Logging setup: standard ``logging`` routed through a Rich console handler."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from nodeforge.utils import console

_ROOT_LOGGER = "nodeforge"


def setup_logging(verbose: bool = False, level: str | None = None) -> logging.Logger:
    """Attach a single ``RichHandler`` to the ``nodeforge`` logger.

    Safe to call more than once; the handler is only added the first time.

    Args:
        verbose: Shortcut for DEBUG level.
        level: Explicit level name (``"INFO"``, ``"WARNING"``...).  Ignored
            when *verbose* is set.
    """
    root = logging.getLogger(_ROOT_LOGGER)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        root.propagate = False

    if verbose:
        root.setLevel(logging.DEBUG)
    else:
        root.setLevel(getattr(logging, (level or "WARNING").upper(), logging.WARNING))
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``nodeforge`` logger (typically ``__name__``)."""
    if name == _ROOT_LOGGER or name.startswith(f"{_ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}")
