"""
Logging setup shared by the CLI and the web server.
"""

import logging

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(name: str = "mediscout", level: int | str = logging.INFO) -> logging.Logger:
    """Create and return a consistently configured logger.

    Args:
        name: Logger name. Configuring "mediscout" covers every module logger.
        level: Logging level, as a number or a name such as "DEBUG".

    Returns:
        A configured ``logging.Logger`` instance.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
