# Activity logging utility

import logging
import sys
from pathlib import Path
from typing import Optional, Union
import colorama
from colorama import Fore, Back, Style

# Enable ANSI handling on Windows consoles without wrapping sys.stdout
colorama.just_fix_windows_console()


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels"""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Back.WHITE + Style.BRIGHT
    }

    def format(self, record):
        log_color = self.COLORS.get(record.levelname, '')
        record.colored_levelname = f"{log_color}{record.levelname}{Style.RESET_ALL}"
        return super().format(record)


class TidyupLogger:
    """
    Centralized logging for tidyup

    Features:
    - Colored console output on stderr
    - Optional plain-text log file
    - Operation and file-action helpers

    The console stays quiet (WARNING) unless verbose mode is on; user-facing
    progress and summary lines are printed by the CLI, not logged.
    """

    def __init__(self, name: str = "tidyup", log_file: Optional[Union[str, Path]] = None,
                 verbose: bool = False):
        self.name = name
        self.log_file = Path(log_file) if log_file else None
        self.verbose = verbose
        self.logger = logging.getLogger(self.name)
        self._setup_logging()

    def _setup_logging(self):
        """(Re)initialize handlers from the current settings"""
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        # Clear any existing handlers
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        console_formatter = ColoredFormatter(
            '%(asctime)s | %(colored_levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        )

        # Bind to the current sys.stderr so redirected streams are honoured
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if self.verbose else logging.WARNING)
        console_handler.setFormatter(console_formatter)
        self.logger.addHandler(console_handler)

        if self.log_file is not None:
            file_formatter = logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def configure(self, verbose: bool = False, log_file: Optional[Union[str, Path]] = None):
        """Apply new verbosity and log file settings"""
        self.verbose = verbose
        self.log_file = Path(log_file) if log_file else None
        self._setup_logging()

    def debug(self, message: str, **kwargs):
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        self.logger.info(message, **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message, **kwargs)

    def log_operation_start(self, operation: str, details: str = ""):
        self.info(f"▶ {operation} started" + (f" ({details})" if details else ""))

    def log_operation_success(self, operation: str, details: str = ""):
        self.info(f"✔ {operation} finished" + (f" ({details})" if details else ""))

    def log_operation_error(self, operation: str, error: str):
        """Fatal errors always reach the console, verbose or not"""
        self.error(f"✖ {operation} aborted: {error}")

    def log_file_action(self, action: str, source: str, destination: str = "", dry_run: bool = False):
        """Log file operations (create, move, skip)"""
        prefix = "🔍 [DRY RUN] " if dry_run else "📁 "
        message = f"{prefix}{action}: {source}"
        if destination:
            message += f" → {destination}"
        self.debug(message)

    def log_stats(self, stats_dict: dict):
        """One INFO line per summary entry"""
        for key, value in stats_dict.items():
            self.info(f"{key} = {value}")

    def close(self):
        """Detach and close all handlers"""
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()


# Global logger instance
_global_logger: Optional[TidyupLogger] = None


def get_logger(name: str = "tidyup") -> TidyupLogger:
    """Process-wide TidyupLogger, created on first use"""
    global _global_logger
    if _global_logger is None:
        _global_logger = TidyupLogger(name)
    return _global_logger


def setup_logging(verbose: bool = False, log_file: Optional[Union[str, Path]] = None) -> TidyupLogger:
    """
    Reconfigure the shared logger for a run

    The console handler shows DEBUG records when `verbose` is set and only
    warnings and errors otherwise. `log_file`, when given, receives
    everything. Raises OSError if the log file cannot be opened.
    """
    logger = get_logger()
    logger.configure(verbose=verbose, log_file=log_file)
    logger.debug(f"logging configured (verbose={verbose}, log_file={log_file})")
    return logger
