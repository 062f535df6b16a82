"""
Console reporting for the AutoSentiment experiment.

Formats fixed-width table rows, colored banners, metric blocks and the final
prediction line. Rows are built by pure functions so they can be compared
byte for byte; printing goes through a ``rich`` console.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from rich.console import Console

from .data_loader import preview
from .metrics import (
    BinaryClassificationMetrics, MetricsBundle, MulticlassClassificationMetrics,
    RankingMetrics, RegressionMetrics, TaskType,
)

DEFAULT_WIDTH = 114
HEADER_STYLE = 'yellow'


@dataclass(frozen=True)
class Column:
    """One fixed-width table column."""
    key: str
    label: str
    width: int
    precision: Optional[int] = None
    align: str = '>'

    def format_value(self, value: Any) -> str:
        if self.precision is not None:
            if value is None:
                value = math.nan
            return f"{float(value):{self.align}{self.width}.{self.precision}f}"
        return f"{'' if value is None else str(value):{self.align}{self.width}}"

    def format_label(self) -> str:
        return f"{self.label:{self.align}{self.width}}"


INDEX_COLUMN = Column('iteration', '', 4, align='<')
DURATION_COLUMN = Column('duration', 'Duration', 9, precision=1)

METRIC_COLUMNS: Dict[TaskType, List[Column]] = {
    TaskType.BINARY: [
        INDEX_COLUMN,
        Column('trainer', 'Trainer', 35, align='<'),
        Column('accuracy', 'Accuracy', 9, precision=4),
        Column('auc', 'AUC', 8, precision=4),
        Column('auprc', 'AUPRC', 8, precision=4),
        Column('f1', 'F1-score', 9, precision=4),
        DURATION_COLUMN,
    ],
    TaskType.MULTICLASS: [
        INDEX_COLUMN,
        Column('trainer', 'Trainer', 35, align='<'),
        Column('micro_accuracy', 'MicroAccuracy', 14, precision=4),
        Column('macro_accuracy', 'MacroAccuracy', 14, precision=4),
        DURATION_COLUMN,
    ],
    TaskType.REGRESSION: [
        INDEX_COLUMN,
        Column('trainer', 'Trainer', 35, align='<'),
        Column('r_squared', 'RSquared', 8, precision=4),
        Column('mae', 'Absolute-loss', 13, precision=2),
        Column('mse', 'Squared-loss', 12, precision=2),
        Column('rmse', 'RMS-loss', 8, precision=2),
        DURATION_COLUMN,
    ],
    TaskType.RANKING: [
        INDEX_COLUMN,
        Column('trainer', 'Trainer', 15, align='<'),
        Column('ndcg_1', 'NDCG@1', 9, precision=4),
        Column('ndcg_3', 'NDCG@3', 9, precision=4),
        Column('ndcg_10', 'NDCG@10', 9, precision=4),
        Column('dcg_10', 'DCG@10', 9, precision=4),
        DURATION_COLUMN,
    ],
}


def _binary_values(metrics: BinaryClassificationMetrics) -> Dict[str, float]:
    return {
        'accuracy': metrics.accuracy,
        'auc': metrics.area_under_roc_curve,
        'auprc': metrics.area_under_precision_recall_curve,
        'f1': metrics.f1_score,
    }


def _multiclass_values(metrics: MulticlassClassificationMetrics) -> Dict[str, float]:
    return {
        'micro_accuracy': metrics.micro_accuracy,
        'macro_accuracy': metrics.macro_accuracy,
    }


def _regression_values(metrics: RegressionMetrics) -> Dict[str, float]:
    return {
        'r_squared': metrics.r_squared,
        'mae': metrics.mean_absolute_error,
        'mse': metrics.mean_squared_error,
        'rmse': metrics.root_mean_squared_error,
    }


def _ranking_values(metrics: RankingMetrics) -> Dict[str, float]:
    return {
        'ndcg_1': metrics.ndcg_at(1),
        'ndcg_3': metrics.ndcg_at(3),
        'ndcg_10': metrics.ndcg_at(10),
        'dcg_10': metrics.dcg_at(10),
    }


METRIC_VALUES = {
    TaskType.BINARY: _binary_values,
    TaskType.MULTICLASS: _multiclass_values,
    TaskType.REGRESSION: _regression_values,
    TaskType.RANKING: _ranking_values,
}


def format_row(values: Mapping[str, Any], columns: Sequence[Column]) -> str:
    """Join fixed-width fields for ``columns``; missing numeric values print as nan."""
    return ' '.join(column.format_value(values.get(column.key)) for column in columns)


def format_header(columns: Sequence[Column]) -> str:
    return ' '.join(column.format_label() for column in columns)


def pad_row(message: str, width: int = DEFAULT_WIDTH) -> str:
    """Frame a message in pipes, padded to ``width`` characters overall."""
    return '|' + message.ljust(width - 2) + '|'


def iteration_values(
    iteration: int,
    trainer_name: str,
    metrics: Optional[MetricsBundle],
    runtime_seconds: Optional[float]
) -> Dict[str, Any]:
    values: Dict[str, Any] = {
        'iteration': iteration,
        'trainer': trainer_name,
        'duration': runtime_seconds,
    }
    if metrics is not None:
        values.update(METRIC_VALUES[metrics.task](metrics))
    return values


def format_iteration_row(
    iteration: int,
    trainer_name: str,
    metrics: Optional[MetricsBundle],
    runtime_seconds: Optional[float],
    task: TaskType = TaskType.BINARY
) -> str:
    """
    One progress-table row. The column set follows ``metrics.task``; a trial
    without metrics uses ``task`` and prints nan for every metric.
    """
    if metrics is not None:
        task = metrics.task
    values = iteration_values(iteration, trainer_name, metrics, runtime_seconds)
    return format_row(values, METRIC_COLUMNS[task])


def prediction_label(label: bool) -> str:
    return 'Toxic' if label else 'Non Toxic'


def format_prediction(text: str, label: bool) -> str:
    return f"Text: {text} | Prediction: {prediction_label(label)} sentiment"


def _percent(value: float) -> str:
    return 'NaN' if math.isnan(value) else f"{value:.2%}"


def _decimal(value: float) -> str:
    return 'NaN' if math.isnan(value) else f"{value:.2f}"


class ConsoleReporter:
    """
    Writes experiment output to a console.

    Holds no state other than the target console and the table width.
    """

    def __init__(self, width: int = DEFAULT_WIDTH, console: Optional[Console] = None):
        self.width = width
        self.console = console or Console(highlight=False)

    def _print(self, line: str = '', style: Optional[str] = None) -> None:
        # Styles are applied per call and reset by rich afterwards.
        self.console.print(line, style=style, markup=False, emoji=False, highlight=False, soft_wrap=True)

    def write_header(self, *lines: str) -> None:
        """Print a banner: yellow header lines followed by a '#' rule as long as the longest line."""
        self._print(' ')
        for line in lines:
            self._print(line, style=HEADER_STYLE)
        rule_length = max((len(line) for line in lines), default=0)
        self._print('#' * rule_length, style=HEADER_STYLE)

    def create_row(self, message: str) -> None:
        self._print(pad_row(message, self.width))

    def print_iteration_header(self, task: TaskType = TaskType.BINARY) -> None:
        self.create_row(format_header(METRIC_COLUMNS[task]))

    def print_iteration_metrics(
        self,
        iteration: int,
        trainer_name: str,
        metrics: Optional[MetricsBundle],
        runtime_seconds: Optional[float],
        task: TaskType = TaskType.BINARY
    ) -> None:
        self.create_row(format_iteration_row(iteration, trainer_name, metrics, runtime_seconds, task))

    def print_iteration_exception(self, error: BaseException) -> None:
        self._print(f"Exception during AutoML iteration: {error}")

    def show_samples(self, samples: Sequence[Any], num_rows: int = 4) -> None:
        """Print the first rows of a dataset, one 'Row-->' line per sample."""
        shown = preview(samples, num_rows)
        self.write_header(f"Showing {len(shown)} rows of training data with the columns")
        for sample in shown:
            self._print(f"Row--> | Text:{sample.text}| Label:{sample.label}")
            self._print()

    def print_top_models(self, trials: Sequence[Any], count: int = 3) -> None:
        """Print the ``count`` best trials by validation accuracy."""
        self._print('Top models ranked by accuracy --')
        if not trials:
            return
        task = trials[0].metrics.task if trials[0].metrics is not None else TaskType.BINARY
        self.print_iteration_header(task)
        for rank, trial in enumerate(trials[:count], start=1):
            self.print_iteration_metrics(rank, trial.trainer_name, trial.metrics, trial.runtime_seconds, task)

    def print_binary_metrics(self, trainer_name: str, metrics: BinaryClassificationMetrics) -> None:
        lines = [
            '*' * 60,
            f"*       Metrics for {trainer_name} binary classification model      ",
            '*' + '-' * 59,
            f"*       Accuracy: {_percent(metrics.accuracy)}",
            f"*       Area Under Curve:      {_percent(metrics.area_under_roc_curve)}",
            f"*       Area under Precision recall Curve:  {_percent(metrics.area_under_precision_recall_curve)}",
            f"*       F1Score:  {_percent(metrics.f1_score)}",
            f"*       PositivePrecision:  {_decimal(metrics.positive_precision)}",
            f"*       PositiveRecall:  {_decimal(metrics.positive_recall)}",
            f"*       NegativePrecision:  {_decimal(metrics.negative_precision)}",
            f"*       NegativeRecall:  {_percent(metrics.negative_recall)}",
            '*' * 60,
        ]
        for line in lines:
            self._print(line)

    def print_prediction(self, text: str, label: bool) -> None:
        self._print('=============== Single Prediction  ===============')
        self._print(format_prediction(text, label))
        self._print('=' * 50)

    def print_message(self, message: str) -> None:
        self._print(message)

