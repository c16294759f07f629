"""Logging configuration for bucketctl."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    verbose: bool = False,
    log_file: str | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """Configure application logging levels.

    Args:
        verbose: If True, show DEBUG logs with timestamps and paths.
                 If False, only INFO and above for bucketctl.
        log_file: Optional path of a rotating log file (receives DEBUG)
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
    """
    # Root logger - suppress everything by default
    logging.getLogger().setLevel(logging.WARNING)

    app_logger = logging.getLogger("bucketctl")
    app_logger.setLevel(logging.DEBUG if verbose or log_file else logging.INFO)

    # AWS SDK and HTTP libraries
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("s3transfer").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    app_logger.handlers.clear()

    handler = RichHandler(
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
    )
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("%(message)s"))
    app_logger.addHandler(handler)
    app_logger.propagate = False  # Don't propagate to root logger

    if log_file:
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
        except OSError as e:
            app_logger.warning(f"Could not create log file {log_file}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            app_logger.addHandler(file_handler)
