"""Debug log file setup shared by the server and the CLI."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import ServerConfig

DEFAULT_LOGGER_NAMES = ["pumagpt"]

CONSOLE_HANDLER_NAME = "pumagpt.console"
FILE_HANDLER_NAME = "pumagpt.debug_file"


def configure_logging(config: ServerConfig, logger_names: list[str] | None = None, verbose: bool = False) -> None:
    """Route pumagpt logs to the console and, with DEBUG_LOG, to a rotating file.

    Safe to call more than once: handlers installed by an earlier call are
    replaced, so every record is still written once.

    Args:
        config: ServerConfig with debug log settings
        logger_names: Loggers to configure (defaults to the package logger)
        verbose: Log at DEBUG instead of INFO on the console
    """
    logger_names = logger_names or DEFAULT_LOGGER_NAMES
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(formatter)

    file_handler = None
    if config.DEBUG_LOG:
        log_file = Path(config.DEBUG_LOG_FILE)
        # Use RotatingFileHandler for automatic log rotation
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config.DEBUG_LOG_MAX_BYTES,
            backupCount=config.DEBUG_LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.set_name(FILE_HANDLER_NAME)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)

        max_mb = config.DEBUG_LOG_MAX_BYTES / (1024 * 1024)
        print(f"Debug logging enabled: {log_file.absolute()}")
        print(f"  Logging: {', '.join(logger_names)}")
        print(f"  Rotation: {max_mb:.1f}MB max, {config.DEBUG_LOG_BACKUP_COUNT} backups")

    for logger_name in logger_names:
        logger_obj = logging.getLogger(logger_name)
        for handler in list(logger_obj.handlers):
            if handler.get_name() in (CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME):
                logger_obj.removeHandler(handler)
                handler.close()

        logger_obj.setLevel(logging.DEBUG if (verbose or file_handler) else logging.INFO)
        logger_obj.addHandler(console_handler)
        if file_handler:
            logger_obj.addHandler(file_handler)
