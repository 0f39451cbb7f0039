"""Route library logging through click so it matches the CLI output."""

from __future__ import annotations

import logging
from typing import Dict

import click

LOGGER_NAME = "generate_directory_thumbnail"


class ClickHandler(logging.Handler):
    """Write log records to stderr with ``click.secho``, coloured by level."""

    LEVEL_COLORS: Dict[int, str] = {
        logging.DEBUG: "bright_black",
        logging.INFO: "cyan",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
        logging.CRITICAL: "red",
    }

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            click.secho(message, fg=self.LEVEL_COLORS.get(record.levelno), err=True)
        except Exception:
            self.handleError(record)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure the package logger; DEBUG when ``verbose``, else WARNING."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in list(logger.handlers):
        if isinstance(handler, ClickHandler):
            logger.removeHandler(handler)

    handler = ClickHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)
    return logger
