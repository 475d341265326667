"""
Acer Challenge - Logging Configuration

Applies the configured log level to the root logger. Modules log through
`logging.getLogger(__name__)` and never configure handlers themselves.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO", *, debug: bool = False) -> None:
    """
    Configure root logging once for the process.

    Args:
        level: Level name ("INFO", "DEBUG", ...) or numeric level
        debug: Force DEBUG regardless of level
    """
    if debug:
        resolved = logging.DEBUG
    elif isinstance(level, int):
        resolved = level
    else:
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level {level!r}.")

    logging.basicConfig(level=resolved, format=LOG_FORMAT, force=True)
    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(resolved))


def configure_from_settings(settings) -> None:
    """Apply `log_level` and `debug` from Settings."""
    configure_logging(settings.log_level, debug=settings.debug)
