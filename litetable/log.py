"""Logging setup for litetable and applications embedding it.

litetable only emits records through ``get_logger(__name__)``; handlers are
installed by the application, either directly with :func:`setup_logging` or
from :class:`~litetable.config.Settings` with :func:`configure_logging`.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import colorlog

if TYPE_CHECKING:
    from .config import Settings

PLAIN_FORMAT = (
    "%(asctime)s %(levelname)8s %(message)s (%(name)s@%(filename)s:%(lineno)d)"
)
COLOR_FORMAT = (
    "%(asctime)s %(log_color)s%(levelname)8s%(reset)s %(message)s "
    "\033[90m(%(name)s@%(filename)s:%(lineno)d)\033[0m"
)
DATE_FORMAT = "%m-%d %H:%M:%S"

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

LOG_FILE_NAME = "litetable.log"
TEST_LOG_FILE_NAME = "test.log"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 4


def resolve_level(level: int | str) -> int:
    """Turn a level name such as ``"debug"`` into its numeric value.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    if isinstance(level, int):
        return level
    levels = logging.getLevelNamesMapping()
    name = level.strip().upper()
    if name not in levels:
        raise ValueError(f"Unknown log level: {level}")
    return levels[name]


def setup_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    use_colors: bool = True,
    enable_file_logging: bool = False,
    log_dir: Path | None = None,
    is_test_env: bool = False,
) -> None:
    """Install console (and optionally file) handlers on the root logger.

    Any handlers installed earlier are replaced.

    Args:
        level: Numeric level or level name
        format_string: Console format; defaults to a colored or plain layout
        use_colors: Color the console level names with colorlog
        enable_file_logging: Also write to a file under ``log_dir``
        log_dir: Defaults to ``logs`` (``logs/test`` in test runs)
        is_test_env: Overwrite a single test log instead of rotating
    """
    handlers = [_console_handler(format_string, use_colors)]

    if enable_file_logging:
        if log_dir is None:
            log_dir = Path("logs", "test") if is_test_env else Path("logs")
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_file_handler(log_dir, is_test_env))

    logging.basicConfig(level=resolve_level(level), handlers=handlers, force=True)


def configure_logging(settings: "Settings", log_dir: Path | None = None) -> None:
    """Set up logging as the settings' environment expects.

    Development logs to the console only. Production adds a rotating log
    file; testing adds a test log that is overwritten on every run.
    """
    setup_logging(
        level=settings.log_level,
        enable_file_logging=not settings.is_development,
        log_dir=log_dir,
        is_test_env=settings.is_testing,
    )


def setup_test_logging(level: int | str = logging.DEBUG) -> None:
    """Verbose logging for test runs, mirrored to ``logs/test/test.log``."""
    setup_logging(level=level, enable_file_logging=True, is_test_env=True)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass ``__name__``."""
    return logging.getLogger(name)


def _console_handler(format_string: str | None, use_colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    formatter: logging.Formatter
    if use_colors:
        formatter = colorlog.ColoredFormatter(
            format_string or COLOR_FORMAT,
            datefmt=DATE_FORMAT,
            log_colors=LEVEL_COLORS,
        )
    else:
        formatter = logging.Formatter(format_string or PLAIN_FORMAT, DATE_FORMAT)
    handler.setFormatter(formatter)
    return handler


def _file_handler(log_dir: Path, is_test_env: bool) -> logging.Handler:
    handler: logging.Handler
    if is_test_env:
        handler = logging.FileHandler(log_dir / TEST_LOG_FILE_NAME, mode="w")
    else:
        handler = logging.handlers.RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    handler.setFormatter(logging.Formatter(PLAIN_FORMAT, DATE_FORMAT))
    return handler
