import sys

from loguru import logger

from credproc.enums.log_level import LogLevel


def configure_logging(level: LogLevel) -> None:
    """
    Route all log output to stderr at the given level.
    stdout is reserved for the credential document.
    Args:
        level (LogLevel): The minimum level to emit.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.value)
