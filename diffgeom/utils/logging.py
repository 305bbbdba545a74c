"""Logger setup shared by the library and the CLI.

Library modules call get_logger(__name__) and only emit records; handler
installation is idempotent, so repeated calls never duplicate output.
"""
from __future__ import annotations

import logging

ROOT_LOGGER = "diffgeom"


def get_logger(name: str = ROOT_LOGGER, level: int | None = None) -> logging.Logger:
    """
    Return a logger under the ``diffgeom`` hierarchy.

    Only the root ``diffgeom`` logger gets a StreamHandler (installed once,
    marked by ``_diffgeom_handler``); child loggers propagate to it.
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(int(level))

    root = logging.getLogger(ROOT_LOGGER)
    has_handler = any(getattr(h, "_diffgeom_handler", False) for h in root.handlers)
    if not has_handler:
        handler = logging.StreamHandler()
        handler._diffgeom_handler = True  # type: ignore[attr-defined]
        formatter = logging.Formatter(
            fmt="%(asctime)s %(name)s %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
        if root.level == logging.NOTSET:
            root.setLevel(logging.WARNING)
    return logger


def set_level(level: int) -> None:
    """Set the level of the root ``diffgeom`` logger."""
    get_logger(ROOT_LOGGER).setLevel(int(level))


__all__ = ["get_logger", "set_level", "ROOT_LOGGER"]
