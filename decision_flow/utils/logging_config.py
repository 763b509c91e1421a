from loguru import logger
import sys

from ..core.exceptions import ConfigurationError

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> <level>{level: <7}</level> <cyan>{name}</cyan> | {message}"
DEBUG_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <7}</level> "
    "<cyan>{name}:{function}:{line}</cyan> | {message}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {name}:{line} | {message}"


def configure_logging(level="INFO", file_path=None, rotation="10 MB", retention="7 days"):
    """
    Route editor logs to stderr and, optionally, a rotating file.

    The console shows call sites only at DEBUG. The file sink always records
    DEBUG so load and save traces are available after the fact.

    Raises:
        ConfigurationError: If ``level`` is not a loguru level name
    """
    level = str(level).upper()
    try:
        logger.level(level)
    except ValueError as e:
        raise ConfigurationError(f"Unknown log level '{level}'") from e

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=DEBUG_CONSOLE_FORMAT if level in ("TRACE", "DEBUG") else CONSOLE_FORMAT,
    )

    if file_path:
        logger.add(
            file_path,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            enqueue=True,
            encoding="utf-8",
        )

    logger.debug(f"Logging at {level}" + (f", file {file_path}" if file_path else ""))


def configure_from_config(logging_config) -> None:
    """Configure logging from a ``LoggingConfig`` section."""
    configure_logging(
        level=logging_config.level,
        file_path=logging_config.file_path,
        rotation=logging_config.rotation,
        retention=logging_config.retention,
    )
