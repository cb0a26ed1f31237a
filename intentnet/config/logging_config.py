# intentnet/config/logging_config.py
"""
Centralized logging configuration for intentnet
Uses loguru for logging with rotation, formatting, and filtering
"""

import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

from intentnet.config.settings import get_settings


def setup_logging(
    log_level: str | None = None,
    log_to_file: bool = False,
    log_dir: Path | None = None,
    rotation: str = "100 MB",
    retention: str = "30 days",
    compression: str | None = "zip",
    json_logs: bool | None = None,
):
    """
    Configure logging for the application

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to files
        log_dir: Directory for log files (default: settings.LOG_DIR)
        rotation: When to rotate logs (size or time based)
        retention: How long to keep logs
        compression: Compression format for rotated logs
        json_logs: Whether to use JSON formatting (default: settings.LOG_FORMAT)
    """
    settings = get_settings()

    # Remove default handler
    logger.remove()

    if log_level is None:
        log_level = settings.LOG_LEVEL
    if json_logs is None:
        json_logs = settings.LOG_FORMAT == "json"

    # Console handler with colors
    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stderr,
        format=console_format,
        level=log_level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_to_file:
        log_dir = Path(log_dir or settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
        )

        logger.add(
            log_dir / "intentnet_{time:YYYY-MM-DD}.log",
            format=file_format,
            level=log_level,
            rotation=rotation,
            retention=retention,
            compression=compression,
            serialize=json_logs,
        )

        # Training log
        logger.add(
            log_dir / "training_{time:YYYY-MM-DD}.log",
            format=file_format,
            level="INFO",
            rotation=rotation,
            retention=retention,
            compression=compression,
            serialize=json_logs,
            filter=lambda record: "training" in record["name"],
        )

    logger.info(f"Logging configured: level={log_level}, file_logging={log_to_file}")


class timed_operation:
    """
    Context manager for timing operations

    Usage:
        with timed_operation("Perceptron training"):
            trainer.train(examples)
    """

    def __init__(self, operation_name: str, log_level: str = "INFO"):
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time = None
        self.duration = 0.0

    def __enter__(self):
        self.start_time = datetime.now()
        logger.log(self.log_level, f"Starting: {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = (datetime.now() - self.start_time).total_seconds()

        if exc_type is None:
            logger.log(
                self.log_level, f"Completed: {self.operation_name} (took {self.duration:.2f}s)"
            )
        else:
            logger.error(f"Failed: {self.operation_name} after {self.duration:.2f}s - {exc_val}")


def log_training_run(
    num_intents: int,
    num_features: int,
    train_samples: int,
    iterations: int,
    error: float,
    duration_seconds: float,
):
    """
    Log training completion in structured format

    Args:
        num_intents: Number of perceptrons trained
        num_features: Feature vocabulary size
        train_samples: Number of training examples
        iterations: Epochs run so far in the session
        error: Final mean squared error
        duration_seconds: Training duration
    """
    logger.bind(
        type="model_training",
        num_intents=num_intents,
        num_features=num_features,
        train_samples=train_samples,
        iterations=iterations,
        error=error,
        duration_seconds=duration_seconds,
    ).info(
        f"Training completed: {num_intents} intents x {num_features} features | "
        f"Epochs: {iterations} | Loss: {error:.6f} | Duration: {duration_seconds:.2f}s"
    )
