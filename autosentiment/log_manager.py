"""
Log management utilities for the AutoSentiment experiment.

Provides logging setup from the configuration plus log statistics and cleanup.
"""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from .config import Config
from .utils import LOG_FILENAME, ROOT_LOGGER_NAME, reset_logger, setup_logger


def setup_logging_from_config(config: Optional[Config] = None) -> logging.Logger:
    """
    Configure the package logger from the ``logging`` config section.

    Existing package handlers are replaced, so calling this again with another
    configuration moves the log file and console level.

    Args:
        config: Experiment configuration (defaults apply if None)
    """
    reset_logger(ROOT_LOGGER_NAME)
    if config is None:
        return setup_logger(ROOT_LOGGER_NAME)

    level_name = str(config.logging.get('console_level', 'INFO')).upper()
    console_level = logging.getLevelName(level_name)
    if not isinstance(console_level, int):
        console_level = logging.INFO
    return setup_logger(ROOT_LOGGER_NAME, console_level=console_level, log_dir=config.logging.get('log_dir'))


def clean_old_logs(logs_dir: Path, days: Optional[int] = None) -> int:
    """
    Delete rotated log files.

    Args:
        logs_dir: Directory containing log files
        days: Only delete files last modified more than this many days ago

    Returns:
        Number of files cleaned
    """
    logs_dir = Path(logs_dir)
    if not logs_dir.exists():
        return 0

    logger = setup_logger(__name__)
    cutoff = datetime.now() - timedelta(days=days) if days is not None else None
    cleaned_count = 0

    for log_file in logs_dir.glob(f"{LOG_FILENAME}*"):
        modified = datetime.fromtimestamp(log_file.stat().st_mtime)
        if cutoff is not None and modified >= cutoff:
            continue
        # The active file stays open by the handler
        if log_file.name == LOG_FILENAME:
            continue
        try:
            log_file.unlink()
            cleaned_count += 1
            logger.info(f"Cleaned old log: {log_file.name}")
        except OSError as e:
            logger.warning(f"Failed to clean {log_file.name}: {e}")

    return cleaned_count


def get_log_stats(logs_dir: Path) -> dict:
    """
    Get statistics about log files.

    Args:
        logs_dir: Directory containing log files

    Returns:
        Dictionary with log statistics
    """
    logs_dir = Path(logs_dir)
    if not logs_dir.exists():
        return {"total_files": 0, "total_size_mb": 0, "files": []}

    stats = {
        "total_files": 0,
        "total_size_mb": 0,
        "files": []
    }

    for log_file in logs_dir.glob("*.log*"):
        size_mb = log_file.stat().st_size / (1024 * 1024)
        modified = datetime.fromtimestamp(log_file.stat().st_mtime)

        stats["files"].append({
            "name": log_file.name,
            "size_mb": round(size_mb, 2),
            "modified": modified.strftime("%Y-%m-%d %H:%M:%S")
        })

        stats["total_files"] += 1
        stats["total_size_mb"] += size_mb

    stats["total_size_mb"] = round(stats["total_size_mb"], 2)
    stats["files"].sort(key=lambda x: x["modified"], reverse=True)

    return stats


def print_log_stats(logs_dir: Path) -> None:
    """Print log statistics to console."""
    stats = get_log_stats(logs_dir)

    print(f"\nLog Statistics for {logs_dir}")
    print(f"{'='*50}")
    print(f"Total files: {stats['total_files']}")
    print(f"Total size: {stats['total_size_mb']} MB")

    if stats["files"]:
        print("\nFiles:")
        for file_info in stats["files"]:
            print(f"  {file_info['name']:<25} {file_info['size_mb']:>8.2f} MB  {file_info['modified']}")

    print()
