"""Logging configuration from the ``logging`` config section."""

from __future__ import annotations

import logging
from typing import Mapping

from rich.console import Console
from rich.logging import RichHandler

from codetag.config.models import LoggingConfig

PACKAGE_LOGGER = "codetag"

_installed_handler: logging.Handler | None = None


def configure_logging(
    config: LoggingConfig,
    *,
    console: Console | None = None,
    extra_levels: Mapping[str, str] | None = None,
) -> logging.Logger:
    """(Re)install the package log handler and apply per-logger levels.

    Safe to call twice: a bootstrap call with defaults before the config file
    is read, then again with the loaded section.
    """
    global _installed_handler

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _installed_handler is not None:
        package_logger.removeHandler(_installed_handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=config.rich_tracebacks,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(config.level)
    _installed_handler = handler

    levels = dict(config.loggers)
    for name, level in (extra_levels or {}).items():
        levels.setdefault(name, level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
    return package_logger
