# ===================================== IMPORTS ====================================== #

# Standard Library
from datetime import datetime
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional, Union

# 3rd‑party (Rich)
from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Local
from workflow_mags import constants

# ===================================== THEME ======================================== #

LOG_THEME = Theme({
    "logging.time": "bold white",
    "logging.level.info": "bold white",
    "logging.level.debug": "dim cyan",
    "logging.level.warning": "bold yellow",
    "logging.level.error": "bold red",
    "logging.level.critical": "reverse bold bright_white on red",
})

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(filename)s:%(funcName)s(): %(message)s"

# ==================================== FUNCTIONS ===================================== #

def _level(level: Union[int, str]) -> int:
    """'info' / 'INFO' / 20 -> 20"""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: '{level}'")
    return value


def setup_logging(
    log_dir_path: Union[str, Path],
    log_filename: Optional[str] = None,
    console_level: Union[int, str] = logging.INFO,
    file_level: Union[int, str] = logging.DEBUG,
    max_file_size: int = 5 * 1024 * 1024,  # 5 MB
    backup_count: int = 3
) -> logging.Logger:
    """
    Configure the package logger with:
      • a Rich console handler (INFO+ by default, rich tracebacks)
      • a rotating file handler in `log_dir_path` keeping DEBUG+

    Calling it again replaces the handlers of a previous call.
    """
    console_level, file_level = _level(console_level), _level(file_level)
    log_dir_path = Path(log_dir_path)
    log_dir_path.mkdir(parents=True, exist_ok=True)
    log_file_path = log_dir_path / (
        log_filename or datetime.now().strftime("%Y-%m-%d_%H%M%S.log")
    )

    logger = logging.getLogger(constants.LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    file_handler = RotatingFileHandler(
        filename=log_file_path,
        maxBytes=max_file_size,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(file_handler)

    rich_handler = RichHandler(
        console=Console(theme=LOG_THEME),
        rich_tracebacks=True,
        level=console_level,
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
        log_time_format="[%X]",
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(rich_handler)

    logger.info("Logging initialised → %s", log_file_path)
    return logger


def setup_logging_from_config(
    log_dir_path: Union[str, Path],
    config: Optional[Dict] = None
) -> logging.Logger:
    """Read handler levels and rotation from the `logging` config section."""
    config = config or {}
    return setup_logging(
        log_dir_path,
        log_filename=config.get("filename"),
        console_level=config.get("console_level", logging.INFO),
        file_level=config.get("file_level", logging.DEBUG),
        max_file_size=config.get("max_file_size", 5 * 1024 * 1024),
        backup_count=config.get("backup_count", 3),
    )
