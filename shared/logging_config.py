"""
Shared logging configuration for the services.
Provides clean, concise logging with essential information only.
"""
import logging
import sys
import warnings
from typing import Optional


def setup_service_logging(
    service_name: str,
    log_level: str = "INFO",
    suppress_warnings: bool = True,
    startup_message: Optional[str] = None
) -> logging.Logger:
    """
    Set up standardized logging for a service.

    Args:
        service_name: Name of the service (e.g., "employee")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        suppress_warnings: Whether to suppress non-essential warnings
        startup_message: Custom startup message (optional)

    Returns:
        Configured logger instance
    """
    if suppress_warnings:
        # Pydantic v1 style config classes
        warnings.filterwarnings("ignore", ".*Support for class-based `config` is deprecated.*")

        # passlib probing newer bcrypt releases
        warnings.filterwarnings("ignore", ".*error reading bcrypt version.*")

        warnings.filterwarnings("ignore", ".*watchfiles.*")
        warnings.filterwarnings("ignore", ".*reloader.*")

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True
    )

    logger = logging.getLogger(service_name)

    noisy_loggers = [
        "uvicorn",
        "uvicorn.error",
        "uvicorn.access",
        "watchfiles.main",
        "passlib.handlers.bcrypt",
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "sqlalchemy.dialects",
        "aiosqlite",
    ]

    for noisy_logger in noisy_loggers:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    if startup_message:
        logger.info(startup_message)

    return logger


def log_service_startup(logger: logging.Logger, service_name: str, port: int, version: str = "1.0.0"):
    """Log essential startup information in a clean format"""
    logger.info(f"🚀 {service_name.title()} Service v{version} - Port {port}")


def log_service_ready(logger: logging.Logger, service_name: str, additional_info: Optional[str] = None):
    """Log service ready status"""
    base_message = f"✅ {service_name.title()} Service Ready"
    if additional_info:
        logger.info(f"{base_message} ({additional_info})")
    else:
        logger.info(base_message)


def log_dependency_status(logger: logging.Logger, service_name: str, status: str):
    """Log dependency status concisely"""
    status_emoji = "✅" if status == "ok" else "⚠️"
    logger.info(f"{status_emoji} {service_name}: {status}")


def log_service_shutdown(logger: logging.Logger, service_name: str):
    """Log service shutdown"""
    logger.info(f"🛑 {service_name.title()} Service Shutting Down")


class QuietStartupFilter(logging.Filter):
    """Filter to suppress noisy startup messages"""

    SUPPRESS_PATTERNS = [
        "Will watch for changes in these directories",
        "Started reloader process",
        "Started server process",
        "Waiting for application startup",
        "Application startup complete",
        "error reading bcrypt version",
    ]

    def filter(self, record):
        message = record.getMessage()
        return not any(pattern in message for pattern in self.SUPPRESS_PATTERNS)


def apply_quiet_filter():
    """Apply quiet filter to reduce startup noise"""
    quiet_filter = QuietStartupFilter()

    for logger_name in ["uvicorn", "uvicorn.error", "watchfiles.main", ""]:
        logging.getLogger(logger_name).addFilter(quiet_filter)
