"""
Metric bundles for the AutoSentiment experiment.

Each task type has its own frozen bundle carrying a fixed set of metrics. The
``task`` tag on every bundle is what reporting code dispatches on.
"""

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Sequence, Union

import numpy as np
from sklearn.metrics import (
    accuracy_score, average_precision_score, dcg_score, f1_score,
    log_loss, mean_absolute_error, mean_squared_error, ndcg_score,
    precision_score, r2_score, recall_score, roc_auc_score,
)

from .utils import setup_logger


class TaskType(str, Enum):
    BINARY = 'binary'
    MULTICLASS = 'multiclass'
    REGRESSION = 'regression'
    RANKING = 'ranking'


@dataclass(frozen=True)
class BinaryClassificationMetrics:
    task: ClassVar[TaskType] = TaskType.BINARY

    accuracy: float
    area_under_roc_curve: float
    area_under_precision_recall_curve: float
    f1_score: float
    positive_precision: float
    positive_recall: float
    negative_precision: float
    negative_recall: float

    def to_dict(self) -> Dict[str, Any]:
        return {'task': self.task.value, **asdict(self)}


@dataclass(frozen=True)
class MulticlassClassificationMetrics:
    task: ClassVar[TaskType] = TaskType.MULTICLASS

    micro_accuracy: float
    macro_accuracy: float
    log_loss: float = math.nan

    @property
    def accuracy(self) -> float:
        return self.micro_accuracy

    def to_dict(self) -> Dict[str, Any]:
        return {'task': self.task.value, **asdict(self)}


@dataclass(frozen=True)
class RegressionMetrics:
    task: ClassVar[TaskType] = TaskType.REGRESSION

    r_squared: float
    mean_absolute_error: float
    mean_squared_error: float
    root_mean_squared_error: float

    def to_dict(self) -> Dict[str, Any]:
        return {'task': self.task.value, **asdict(self)}


@dataclass(frozen=True)
class RankingMetrics:
    task: ClassVar[TaskType] = TaskType.RANKING

    # Index k-1 holds the value at truncation level k.
    normalized_discounted_cumulative_gains: List[float] = field(default_factory=list)
    discounted_cumulative_gains: List[float] = field(default_factory=list)

    def ndcg_at(self, k: int) -> float:
        values = self.normalized_discounted_cumulative_gains
        return values[k - 1] if len(values) >= k else math.nan

    def dcg_at(self, k: int) -> float:
        values = self.discounted_cumulative_gains
        return values[k - 1] if len(values) >= k else math.nan

    def to_dict(self) -> Dict[str, Any]:
        return {'task': self.task.value, **asdict(self)}


MetricsBundle = Union[
    BinaryClassificationMetrics,
    MulticlassClassificationMetrics,
    RegressionMetrics,
    RankingMetrics,
]


def metric_accuracy(metrics: Any) -> float:
    """Accuracy of a bundle, or NaN when it has none (or no bundle at all)."""
    value = getattr(metrics, 'accuracy', None)
    if value is None:
        return math.nan
    return float(value)


def compute_binary_metrics(
    y_true: Sequence[bool],
    y_pred: Sequence[bool],
    scores: Sequence[float]
) -> BinaryClassificationMetrics:
    """
    Compute non-calibrated binary classification metrics.

    Args:
        y_true: True labels
        y_pred: Predicted labels
        scores: Raw positive-class scores used for the ranking metrics

    Returns:
        Binary metric bundle; ranking metrics are NaN when only one class
        is present in ``y_true``
    """
    logger = setup_logger(__name__)
    y_true = np.asarray(y_true, dtype=bool)
    y_pred = np.asarray(y_pred, dtype=bool)
    scores = np.asarray(scores, dtype=float)

    try:
        auc = float(roc_auc_score(y_true, scores))
    except ValueError as e:
        logger.debug(f"Could not compute ROC AUC: {e}")
        auc = math.nan

    if y_true.any():
        auprc = float(average_precision_score(y_true, scores))
    else:
        auprc = math.nan

    return BinaryClassificationMetrics(
        accuracy=float(accuracy_score(y_true, y_pred)),
        area_under_roc_curve=auc,
        area_under_precision_recall_curve=auprc,
        f1_score=float(f1_score(y_true, y_pred, zero_division=0)),
        positive_precision=float(precision_score(y_true, y_pred, zero_division=0)),
        positive_recall=float(recall_score(y_true, y_pred, zero_division=0)),
        negative_precision=float(precision_score(~y_true, ~y_pred, zero_division=0)),
        negative_recall=float(recall_score(~y_true, ~y_pred, zero_division=0)),
    )


def compute_multiclass_metrics(y_true, y_pred, probabilities=None, labels=None) -> MulticlassClassificationMetrics:
    """Micro accuracy, macro (per-class averaged) accuracy and log loss."""
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)

    per_class = []
    for label in np.unique(y_true):
        mask = y_true == label
        per_class.append(float(np.mean(y_pred[mask] == label)))

    loss = math.nan
    if probabilities is not None:
        loss = float(log_loss(y_true, probabilities, labels=labels))

    return MulticlassClassificationMetrics(
        micro_accuracy=float(accuracy_score(y_true, y_pred)),
        macro_accuracy=float(np.mean(per_class)) if per_class else math.nan,
        log_loss=loss,
    )


def compute_regression_metrics(y_true, y_pred) -> RegressionMetrics:
    mse = float(mean_squared_error(y_true, y_pred))
    return RegressionMetrics(
        r_squared=float(r2_score(y_true, y_pred)),
        mean_absolute_error=float(mean_absolute_error(y_true, y_pred)),
        mean_squared_error=mse,
        root_mean_squared_error=math.sqrt(mse),
    )


def compute_ranking_metrics(relevance, scores, max_k: int = 10) -> RankingMetrics:
    """
    NDCG@k and DCG@k for k in 1..max_k.

    Args:
        relevance: Graded relevance per query, shape (n_queries, n_items)
        scores: Predicted scores, same shape
        max_k: Deepest truncation level
    """
    relevance = np.asarray(relevance, dtype=float)
    scores = np.asarray(scores, dtype=float)
    depth = min(max_k, relevance.shape[1])
    return RankingMetrics(
        normalized_discounted_cumulative_gains=[
            float(ndcg_score(relevance, scores, k=k)) for k in range(1, depth + 1)
        ],
        discounted_cumulative_gains=[
            float(dcg_score(relevance, scores, k=k)) for k in range(1, depth + 1)
        ],
    )
