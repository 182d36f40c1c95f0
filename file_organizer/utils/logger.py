# file_organizer/utils/logger.py

import logging
import logging.handlers
from pathlib import Path

import click

APP_NAME = "file-organizer"
LOG_FILE_NAME = "file_organizer.log"


def default_log_file() -> Path:
    """The log file location inside the per-user application directory."""
    return Path(click.get_app_dir(APP_NAME)) / LOG_FILE_NAME


class LoggerManager:
    """
    Configures the application-wide logging system.

    Two handlers are attached to the root logger:
    1. Console Handler: real-time feedback on stderr. Its level is chosen by
       the caller (INFO for verbose/dry-run runs, WARNING otherwise).
    2. Rotating File Handler: persistent DEBUG-level log that rolls over
       at 5MB and keeps 5 backups.
    """

    def __init__(self, log_file_path: Path | None = None, console_level=logging.WARNING):
        """
        Args:
            log_file_path: Where to write the persistent log. Defaults to
                the per-user application directory.
            console_level: Minimum level shown on the console.
        """
        self.log_file_path = log_file_path if log_file_path is not None else default_log_file()
        self.console_level = console_level
        self.root_logger = logging.getLogger()

    def setup(self):
        """Attaches the console and file handlers to the root logger."""
        # Handlers are only added once, so calling this twice is harmless.
        if self.root_logger.hasHandlers():
            return

        self.root_logger.setLevel(logging.DEBUG)
        self.root_logger.addHandler(self._create_console_handler())

        file_handler = self._create_file_handler()
        if file_handler is not None:
            self.root_logger.addHandler(file_handler)

        logging.debug(f"Logging configured. Log file: {self.log_file_path}")

    def _create_console_handler(self) -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setLevel(self.console_level)
        formatter = logging.Formatter(
            '%(asctime)s - [%(levelname)s] - %(message)s',
            datefmt='%H:%M:%S'
        )
        handler.setFormatter(formatter)
        return handler

    def _create_file_handler(self) -> logging.handlers.RotatingFileHandler | None:
        try:
            self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.handlers.RotatingFileHandler(
                self.log_file_path, maxBytes=5*1024*1024, backupCount=5, encoding='utf-8'
            )
        except OSError as e:
            # A read-only home directory should not stop the organizer from running.
            logging.getLogger(__name__).warning(f"Could not open log file '{self.log_file_path}': {e}")
            return None
        handler.setLevel(logging.DEBUG)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - [%(levelname)s] - %(filename)s:%(lineno)d - %(message)s'
        )
        handler.setFormatter(formatter)
        return handler


def setup_logging(verbose: bool = False, dry_run: bool = False, log_file_path: Path | None = None):
    """Initializes and configures the application-wide logging system."""
    console_level = logging.INFO if (verbose or dry_run) else logging.WARNING
    manager = LoggerManager(log_file_path, console_level)
    manager.setup()
