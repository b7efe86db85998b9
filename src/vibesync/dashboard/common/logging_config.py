"""
Logging configuration for the VibeSync dashboard.

Sets up console and file logging shared by the Qt window, the controller
and the background asyncio loop.
"""

import logging
import sys
from pathlib import Path

from vibesync.dashboard.common.config import get_config_dir

LOG_FILENAME = "dashboard.log"


def get_log_file() -> Path:
    """Get platform-specific log file path."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / LOG_FILENAME


def setup_logging(
    verbose: bool = False,
    component: str = "dashboard",
    wipe_on_startup: bool = True,
) -> logging.Logger:
    """
    Set up logging with file and console handlers.

    Args:
        verbose: Enable verbose debug logging
        component: Component name for log messages
        wipe_on_startup: Whether to wipe the log file on startup

    Returns:
        Logger instance for the component
    """
    level = logging.DEBUG if verbose else logging.INFO

    verbose_formatter = logging.Formatter(
        f"%(asctime)s - [{component}] %(name)s - %(levelname)s - "
        f"[%(filename)s:%(lineno)d] - %(message)s"
    )
    console_formatter = logging.Formatter(
        f"%(asctime)s - [{component}] %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    has_file_handler = any(
        isinstance(h, logging.FileHandler) for h in root_logger.handlers
    )

    if not has_file_handler:
        root_logger.handlers.clear()

    has_console_handler = any(
        isinstance(h, logging.StreamHandler) and h.stream == sys.stdout
        for h in root_logger.handlers
    )
    if not has_console_handler:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if not has_file_handler:
        try:
            log_file = get_log_file()

            if wipe_on_startup and log_file.exists():
                log_file.unlink()

            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
            file_handler.setFormatter(verbose_formatter)
            root_logger.addHandler(file_handler)

            print(f"Logs written to: {log_file}")

        except OSError as e:
            print(f"Warning: Could not set up file logging: {e}")

    if verbose:
        logging.getLogger("aiohttp").setLevel(logging.DEBUG)
        logging.getLogger("aiohttp.client").setLevel(logging.DEBUG)
        logging.getLogger(component).info("Verbose logging enabled")

    return logging.getLogger(component)
