"""Logging setup for shelfpack command-line use.

The library modules only create module-level loggers; handlers are
configured here, on request, by applications such as the CLI.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(log_level: int = logging.INFO) -> None:
    """Setup basic logging configuration."""
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
    logging.getLogger("shelfpack").setLevel(log_level)


__all__ = ["setup_logging", "LOG_FORMAT", "DATE_FORMAT"]
