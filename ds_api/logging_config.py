"""
Opt-in console logging for the ds_api logger hierarchy
"""

import logging
from typing import Union

PACKAGE_LOGGER = "ds_api"


class ColoredFormatter(logging.Formatter):
    """Formatter coloring the level name by severity"""

    COLORS = {
        "DEBUG": "\033[36m",      # cyan
        "INFO": "\033[32m",       # green
        "WARNING": "\033[33m",    # yellow
        "ERROR": "\033[31m",      # red
        "CRITICAL": "\033[35m",   # magenta
    }
    RESET = "\033[0m"

    def format(self, record):
        # Color a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Attach a colored stream handler to the ``ds_api`` logger.

    The library never calls this itself; applications opt in. Calling it
    again only updates the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    if not any(isinstance(h.formatter, ColoredFormatter) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(ColoredFormatter("%(levelname)s:     %(name)s: %(message)s"))
        logger.addHandler(handler)
    return logger
