import math

import pytest

from autosentiment.metrics import (
    BinaryClassificationMetrics, MulticlassClassificationMetrics, TaskType,
    compute_binary_metrics, compute_multiclass_metrics, compute_ranking_metrics,
    compute_regression_metrics, metric_accuracy,
)


def test_binary_metrics_values():
    metrics = compute_binary_metrics(
        [True, True, False, False],
        [True, False, False, False],
        [0.9, 0.4, 0.2, 0.1],
    )

    assert metrics.task is TaskType.BINARY
    assert metrics.accuracy == pytest.approx(0.75)
    assert metrics.area_under_roc_curve == pytest.approx(1.0)
    assert metrics.positive_precision == pytest.approx(1.0)
    assert metrics.positive_recall == pytest.approx(0.5)
    assert metrics.negative_recall == pytest.approx(1.0)
    assert metrics.negative_precision == pytest.approx(2 / 3)


def test_binary_metrics_single_class_has_nan_ranking_metrics():
    metrics = compute_binary_metrics([False, False], [False, True], [0.1, 0.7])

    assert metrics.accuracy == pytest.approx(0.5)
    assert math.isnan(metrics.area_under_roc_curve)
    assert math.isnan(metrics.area_under_precision_recall_curve)


def test_metric_accuracy_handles_bundles_and_none():
    binary = compute_binary_metrics([True, False], [True, False], [1.0, 0.0])
    multiclass = MulticlassClassificationMetrics(micro_accuracy=0.6, macro_accuracy=0.5)

    assert metric_accuracy(binary) == 1.0
    assert metric_accuracy(multiclass) == 0.6
    assert math.isnan(metric_accuracy(None))


def test_multiclass_metrics():
    metrics = compute_multiclass_metrics([0, 0, 1, 2], [0, 1, 1, 2])

    assert metrics.micro_accuracy == pytest.approx(0.75)
    assert metrics.macro_accuracy == pytest.approx((0.5 + 1.0 + 1.0) / 3)


def test_regression_metrics():
    metrics = compute_regression_metrics([1.0, 2.0, 3.0], [1.0, 2.0, 5.0])

    assert metrics.mean_absolute_error == pytest.approx(2 / 3)
    assert metrics.root_mean_squared_error == pytest.approx(math.sqrt(4 / 3))


def test_ranking_metrics_truncation_levels():
    metrics = compute_ranking_metrics([[3, 2, 0, 1]], [[0.9, 0.8, 0.1, 0.2]], max_k=10)

    assert len(metrics.normalized_discounted_cumulative_gains) == 4
    assert metrics.ndcg_at(1) == pytest.approx(1.0)
    assert math.isnan(metrics.ndcg_at(10))


def test_to_dict_carries_task_tag():
    metrics = BinaryClassificationMetrics(0.5, 0.5, 0.5, 0.5, 0.5, 0.5, 0.5, 0.5)

    assert metrics.to_dict()['task'] == 'binary'
    assert metrics.to_dict()['accuracy'] == 0.5
