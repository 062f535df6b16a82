"""
Evaluation and inference for trained sentiment pipelines.

Scores are the pipeline's raw (non-calibrated) decision values when it has
them, otherwise the positive-class probability.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np

from .data_loader import Sample, split_texts_and_labels
from .metrics import BinaryClassificationMetrics, compute_binary_metrics
from .utils import setup_logger


@dataclass(frozen=True)
class Prediction:
    """Outcome of scoring one sample."""
    label: bool
    score: float
    probability: Optional[float] = None


def _positive_index(model: Any) -> int:
    classes = list(getattr(model, 'classes_', [False, True]))
    return classes.index(True) if True in classes else len(classes) - 1


def positive_probabilities(model: Any, texts: Sequence[str]) -> Optional[np.ndarray]:
    if not hasattr(model, 'predict_proba'):
        return None
    return np.asarray(model.predict_proba(list(texts)))[:, _positive_index(model)]


def positive_scores(model: Any, texts: Sequence[str]) -> np.ndarray:
    """Raw decision scores for the positive class."""
    if hasattr(model, 'decision_function'):
        return np.asarray(model.decision_function(list(texts)), dtype=float).ravel()
    probabilities = positive_probabilities(model, texts)
    if probabilities is None:
        raise TypeError(f"{type(model).__name__} exposes neither decision_function nor predict_proba")
    return probabilities.astype(float)


def evaluate(model: Any, samples: Sequence[Sample]) -> BinaryClassificationMetrics:
    """
    Evaluate a fitted pipeline on labeled samples.

    Args:
        model: Fitted pipeline
        samples: Held-out samples with labels

    Returns:
        Non-calibrated binary classification metrics
    """
    logger = setup_logger(__name__)
    if not samples:
        raise ValueError("Cannot evaluate on an empty dataset")

    texts, labels = split_texts_and_labels(samples)
    predictions = np.asarray(model.predict(texts), dtype=bool)
    scores = positive_scores(model, texts)

    metrics = compute_binary_metrics(labels, predictions, scores)
    logger.info(
        f"Evaluated on {len(samples)} samples - Accuracy: {metrics.accuracy:.4f}, "
        f"AUC: {metrics.area_under_roc_curve:.4f}, F1: {metrics.f1_score:.4f}"
    )
    return metrics


def predict(model: Any, sample: Sample) -> Prediction:
    """Score a single sample."""
    texts = [sample.text]
    label = bool(np.asarray(model.predict(texts))[0])
    score = float(positive_scores(model, texts)[0])
    probabilities = positive_probabilities(model, texts)
    probability = float(probabilities[0]) if probabilities is not None else None
    return Prediction(label=label, score=score, probability=probability)
