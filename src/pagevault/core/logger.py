"""
Logging and Error Handling System

This module provides centralized logging configuration and warning/error
tracking for pagevault. Every module logs through ``logging.getLogger(__name__)``,
so all records propagate to the ``pagevault`` logger configured here.
"""

import logging
import logging.handlers
import os
import sys
from datetime import datetime
from typing import Optional, Dict, List
from pathlib import Path


APP_NAME = "pagevault"


class VaultLogger:
    """
    Centralized logging system for pagevault.

    Provides a rotating detailed log file, a rotating error-only log file and
    a concise console handler on the ``pagevault`` logger.
    """

    def __init__(self, log_dir: str = "logs", app_name: str = APP_NAME):
        """
        Initialize the logging system.

        Args:
            log_dir: Directory to store log files
            app_name: Name of the application logger
        """
        self.log_dir = Path(log_dir)
        self.app_name = app_name
        self.loggers: Dict[str, logging.Logger] = {}

        # Ensure log directory exists
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def setup_logger(self, level: int = logging.INFO) -> logging.Logger:
        """
        Set up the main application logger with file and console handlers.

        Handlers from an earlier setup are closed and replaced.

        Args:
            level: Console logging level (default: INFO)

        Returns:
            Configured logger instance
        """
        logger = logging.getLogger(self.app_name)
        logger.setLevel(logging.DEBUG)
        reset_handlers(logger)

        # Create formatters
        detailed_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        )

        # File handler with rotation
        log_file = self.log_dir / f"{self.app_name}.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)

        # Console handler
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(console_formatter)

        # Error file handler
        error_file = self.log_dir / f"{self.app_name}_errors.log"
        error_handler = logging.handlers.RotatingFileHandler(
            error_file,
            maxBytes=5*1024*1024,  # 5MB
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(detailed_formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
        logger.addHandler(error_handler)

        self.loggers['main'] = logger
        return logger

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            name: Name of the component

        Returns:
            Logger instance for the component
        """
        full_name = f"{self.app_name}.{name}"

        if full_name not in self.loggers:
            self.loggers[full_name] = logging.getLogger(full_name)

        return self.loggers[full_name]

    def log_system_info(self):
        """Log system information for debugging."""
        logger = self.get_logger('system')

        logger.debug("=== pagevault started ===")
        logger.debug(f"Python version: {sys.version}")
        logger.debug(f"Platform: {sys.platform}")
        logger.debug(f"Working directory: {os.getcwd()}")
        logger.debug(f"Log directory: {self.log_dir.absolute()}")


def reset_handlers(logger: logging.Logger) -> None:
    """Detach and close every handler on ``logger``."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class ErrorTracker:
    """
    Counts and logs the warnings and errors of one command run.

    Each record gets an ``ERR_``/``WARN_`` id so console output can be
    matched against the log files.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.error_ids: List[str] = []
        self.warning_ids: List[str] = []

    @staticmethod
    def _describe(message: str, context: str = None, url: str = None) -> str:
        if context:
            message += f" (Context: {context})"
        if url:
            message += f" (URL: {url})"
        return message

    def log_error(self,
                  error: Exception,
                  context: str = None,
                  url: str = None) -> str:
        """
        Log an error with context information.

        The traceback goes to the debug log only.

        Args:
            error: The exception that occurred
            context: Context where the error occurred
            url: URL being processed when error occurred

        Returns:
            Error ID for tracking
        """
        error_id = f"ERR_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.error_ids):03d}"
        self.error_ids.append(error_id)

        self.logger.error(self._describe(f"[{error_id}] {type(error).__name__}: {error}", context, url))
        self.logger.debug(f"[{error_id}] Full traceback:", exc_info=error)
        return error_id

    def log_warning(self,
                    message: str,
                    context: str = None,
                    url: str = None) -> str:
        """
        Log a warning with context information.

        Returns:
            Warning ID for tracking
        """
        warning_id = f"WARN_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.warning_ids):03d}"
        self.warning_ids.append(warning_id)

        self.logger.warning(self._describe(f"[{warning_id}] {message}", context, url))
        return warning_id

    def get_error_summary(self) -> Dict[str, int]:
        """Counts of errors and warnings logged so far."""
        return {
            'total_errors': len(self.error_ids),
            'total_warnings': len(self.warning_ids),
        }


# Global logger instance
_logger_instance: Optional[VaultLogger] = None


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Handlers are only attached by ``initialize_logging``; until then records
    propagate to whatever the root logger does.

    Args:
        name: Name of the component (optional)

    Returns:
        Logger instance
    """
    if _logger_instance is None:
        return logging.getLogger(f"{APP_NAME}.{name}" if name else APP_NAME)

    if name:
        return _logger_instance.get_logger(name)
    return _logger_instance.loggers.get('main') or logging.getLogger(APP_NAME)


def initialize_logging(log_dir: str = "logs", level: int = logging.INFO) -> logging.Logger:
    """
    Initialize (or re-initialize) the global logging system.

    Args:
        log_dir: Directory for log files
        level: Console logging level

    Returns:
        The configured application logger
    """
    global _logger_instance
    _logger_instance = VaultLogger(log_dir)
    logger = _logger_instance.setup_logger(level)
    _logger_instance.log_system_info()
    return logger


def shutdown_logging() -> None:
    """Close the handlers attached by ``initialize_logging``."""
    global _logger_instance
    reset_handlers(logging.getLogger(APP_NAME))
    _logger_instance = None


def create_error_tracker(logger_name: str = None) -> ErrorTracker:
    """
    Create an error tracker instance.

    Args:
        logger_name: Name of the logger to use

    Returns:
        ErrorTracker instance
    """
    return ErrorTracker(get_logger(logger_name))
