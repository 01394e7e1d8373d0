"""
Logging setup for CLI commands.
"""
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from blogmigrate.core.config import get_settings
from blogmigrate.core.logging_config import LOGGER_NAME


def setup_cli_logging(command: str, verbose: bool = False) -> logging.Logger:
    """
    Configure the package logger for a CLI command.

    Console output goes through rich (warnings only unless verbose); every
    record at the configured level is also written to ``<log_dir>/<command>.log``.
    """
    settings = get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(logging.DEBUG if verbose else level)
    package_logger.propagate = False
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.addHandler(console_handler)

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_dir / f"{command}.log", encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    package_logger.addHandler(file_handler)

    # SQLAlchemy is noisy below WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger(f"{LOGGER_NAME}.cli.{command}")
