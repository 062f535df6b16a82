"""
AutoSentiment - automated binary sentiment classification.

Searches a catalog of text classifiers within a time budget, keeps the most
accurate one, evaluates it on held-out data and saves it for later scoring.
"""

__version__ = "0.1.0"

from .config import Config, load_config
from .data_loader import DatasetSchema, Sample, load_samples
from .evaluator import Prediction
from .exceptions import (
    AutoSentimentError, ConfigError, ModelLoadError, NoValidTrialError, SchemaError, TrialFailure,
)
from .experiment import SentimentExperiment, predict_one, run_experiment
from .metrics import (
    BinaryClassificationMetrics, MulticlassClassificationMetrics, RankingMetrics,
    RegressionMetrics, TaskType,
)
from .progress import ExperimentProgressHandler
from .reporting import ConsoleReporter
from .search import AutoMLSearch, TrialResult
from .selection import select_best_run

__all__ = [
    'Config',
    'load_config',
    'DatasetSchema',
    'Sample',
    'load_samples',
    'Prediction',
    'AutoSentimentError',
    'ConfigError',
    'ModelLoadError',
    'NoValidTrialError',
    'SchemaError',
    'TrialFailure',
    'SentimentExperiment',
    'predict_one',
    'run_experiment',
    'BinaryClassificationMetrics',
    'MulticlassClassificationMetrics',
    'RankingMetrics',
    'RegressionMetrics',
    'TaskType',
    'ExperimentProgressHandler',
    'ConsoleReporter',
    'AutoMLSearch',
    'TrialResult',
    'select_best_run',
]
