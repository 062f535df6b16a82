#!/usr/bin/env python3
"""
AutoSentiment - Main Entry Point

Runs the binary sentiment AutoML experiment end to end: searches for the most
accurate classifier within the time budget, evaluates and saves it, then
classifies a sample text with the saved model.

Usage:
    python main.py [--config path/to/config.yaml] [--time-budget SECONDS]
                   [--predict TEXT] [--skip-training] [--log-stats]
                   [--clean-logs DAYS]
"""

import argparse
import sys
from pathlib import Path

from autosentiment import AutoSentimentError, SentimentExperiment
from autosentiment.config import load_config
from autosentiment.log_manager import clean_old_logs, print_log_stats, setup_logging_from_config


def main():
    """Main entry point for the AutoSentiment experiment."""

    parser = argparse.ArgumentParser(
        description="AutoML binary sentiment classification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run with default configuration
    python main.py

    # Shorter search, then classify a custom text
    python main.py --time-budget 20 --predict "What a lovely edit"

    # Reuse the saved model without searching again
    python main.py --skip-training --predict "You are a rude troll"
    """
    )
    parser.add_argument(
        '--config',
        type=str,
        default='configs/config.yaml',
        help='Path to configuration file (default: configs/config.yaml)'
    )

    parser.add_argument(
        '--time-budget',
        type=float,
        default=None,
        help='Search time budget in seconds (overrides the configuration)'
    )

    parser.add_argument(
        '--predict',
        type=str,
        default=None,
        help='Text to classify with the saved model (default: demo.sample_text)'
    )

    parser.add_argument(
        '--skip-training',
        action='store_true',
        help='Skip the search and only run the prediction with the saved model'
    )

    parser.add_argument(
        '--log-stats',
        action='store_true',
        help='Show log statistics and exit'
    )

    parser.add_argument(
        '--clean-logs',
        type=int,
        metavar='DAYS',
        default=None,
        help='Delete rotated log files older than DAYS days and exit'
    )

    args = parser.parse_args()

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Configuration file not found: {config_path}")
        print("Please ensure the configuration file exists or specify a valid path with --config")
        return 1

    try:
        config = load_config(config_path)
    except (AutoSentimentError, OSError) as e:
        print(f"Invalid configuration: {e}")
        return 1

    logs_dir = Path(config.logging['log_dir'])
    if args.log_stats:
        print_log_stats(logs_dir)
        return 0

    if args.clean_logs is not None:
        cleaned = clean_old_logs(logs_dir, days=args.clean_logs)
        print(f"Cleaned {cleaned} old log files")
        return 0

    logger = setup_logging_from_config(config)

    try:
        experiment = SentimentExperiment(config)

        if not args.skip_training:
            experiment.run_experiment(time_budget_seconds=args.time_budget)

        sample_text = args.predict if args.predict is not None else config.sample_text
        prediction = experiment.predict_one(config.model_path, sample_text)
        experiment.report_prediction(sample_text, prediction)

        experiment.reporter.print_message("=============== End of process ===============")
        return 0

    except KeyboardInterrupt:
        print("\n\nExperiment interrupted by user")
        return 1

    except (AutoSentimentError, OSError, ValueError) as e:
        logger.error(f"Experiment failed: {e}")
        print(f"\nExperiment failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
