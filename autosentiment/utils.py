"""
Utility functions for the AutoSentiment experiment.

This module contains reusable helper functions used across the project,
including logging setup, device selection, seeding and file operations.
"""

import json
import logging
import random
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import torch

ROOT_LOGGER_NAME = "autosentiment"
LOG_FILENAME = "autosentiment.log"


def setup_logger(
    logger_name: Optional[str] = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_dir: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """
    Set up a logger with both console and file handlers with rotation.

    Module loggers (``autosentiment.<module>``) carry no handlers of their own;
    they propagate to the package logger, which stays unconfigured (no files,
    warnings only) until it is set up explicitly.

    Args:
        logger_name: Name of the logger (package logger if None)
        console_level: Logging level for console output (default: INFO)
        file_level: Logging level for file output (default: DEBUG)
        log_dir: Directory for log files (default: ./logs)

    Returns:
        Configured logger instance
    """
    if logger_name is None:
        logger_name = ROOT_LOGGER_NAME

    logger = logging.getLogger(logger_name)

    if logger_name.startswith(ROOT_LOGGER_NAME + "."):
        return logger

    # Only configure if not already configured (avoid duplicate handlers)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    log_dir = Path(log_dir) if log_dir is not None else Path.cwd() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    # 10MB max, keep 5 backups
    file_handler = RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        mode='a'
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    return logger


def reset_logger(logger_name: str = ROOT_LOGGER_NAME) -> None:
    """Close and detach every handler of a logger so it can be set up again."""
    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def get_device() -> torch.device:
    """
    Return the best available torch device (cuda, mps or cpu).
    """
    if torch.cuda.is_available():
        return torch.device("cuda")
    if torch.backends.mps.is_available():
        return torch.device("mps")
    return torch.device("cpu")


def seed_everything(seed: int = 42) -> None:
    """
    Set random seeds for reproducibility.

    Args:
        seed: Random seed to use
    """
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    torch.cuda.manual_seed_all(seed)
    torch.backends.cudnn.deterministic = True
    torch.backends.cudnn.benchmark = False


def save_json(data: Dict[str, Any], file_path: Union[str, Path]) -> None:
    """
    Save a dictionary to a JSON file, creating parent directories.

    Args:
        data: Dictionary to save
        file_path: Path where to save the JSON file
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)


def format_time(seconds: float) -> str:
    """
    Format seconds into a human-readable time string.

    Args:
        seconds: Time in seconds

    Returns:
        Formatted time string (e.g., "2h 30m 15s")
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    else:
        return f"{secs}s"


def get_file_size(file_path: Union[str, Path]) -> str:
    """
    Get the size of a file in a human-readable format (e.g. "1.5 MB").
    """
    size_bytes = float(Path(file_path).stat().st_size)

    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0

    return f"{size_bytes:.1f} TB"
