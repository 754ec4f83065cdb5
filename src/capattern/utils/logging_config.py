"""Logging setup for the capattern package.

All modules obtain their logger through :func:`get_module_logger`, which
places it under the ``capattern`` namespace so the whole package can be
tuned from one place::

    from capattern.utils.logging_config import get_module_logger, set_log_level

    logger = get_module_logger("template")
    set_log_level("DEBUG")

The initial level is read from the ``CAPATTERN_LOG_LEVEL`` environment
variable and defaults to WARNING.
"""

import logging
import os
from typing import Union

PACKAGE_LOGGER = "capattern"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ENV_LOG_LEVEL = "CAPATTERN_LOG_LEVEL"

_configured = False


def _configure_package_logger() -> logging.Logger:
    global _configured
    root = logging.getLogger(PACKAGE_LOGGER)
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(os.environ.get(ENV_LOG_LEVEL, "WARNING").upper())
        _configured = True
    return root


def get_module_logger(name: str) -> logging.Logger:
    """Get a logger for a capattern module.

    Parameters
    ----------
    name : str
        Short module name, e.g. ``"pipeline"``.

    Returns
    -------
    logging.Logger
        Logger named ``capattern.<name>``.
    """
    _configure_package_logger()
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def set_log_level(level: Union[int, str]) -> None:
    """Set the level of the package logger and all module loggers."""
    if isinstance(level, str):
        level = level.upper()
    _configure_package_logger().setLevel(level)
