import math

import pytest

from autosentiment.metrics import MulticlassClassificationMetrics, RankingMetrics, RegressionMetrics, TaskType
from autosentiment.reporting import (
    METRIC_COLUMNS, format_header, format_iteration_row, format_prediction, pad_row,
)

from conftest import make_metrics


def test_iteration_row_is_deterministic():
    metrics = make_metrics(0.8125)

    first = format_iteration_row(1, 'LbfgsLogisticRegressionBinary', metrics, 2.34)
    second = format_iteration_row(1, 'LbfgsLogisticRegressionBinary', metrics, 2.34)

    assert first == second
    assert first.startswith('1    LbfgsLogisticRegressionBinary')
    assert '   0.8125' in first
    assert first.endswith('      2.3')


def test_binary_header_matches_row_width():
    columns = METRIC_COLUMNS[TaskType.BINARY]
    header = format_header(columns)
    row = format_iteration_row(12, 'NaiveBayesBinary', make_metrics(0.5), 10.0)

    assert len(header) == len(row)
    assert 'Accuracy' in header and 'F1-score' in header and 'Duration' in header


def test_missing_metrics_print_as_nan():
    row = format_iteration_row(3, 'FastTreeBinary', None, None)

    assert row.count('nan') == 5


def test_nan_metric_value_is_rendered():
    metrics = make_metrics(math.nan)

    assert 'nan' in format_iteration_row(1, 'X', metrics, 1.0)


def test_pad_row_frames_message_to_width():
    row = pad_row('hello', 20)

    assert row == '|hello             |'
    assert len(row) == 20


@pytest.mark.parametrize("metrics, label", [
    (MulticlassClassificationMetrics(micro_accuracy=0.9, macro_accuracy=0.8), 'MicroAccuracy'),
    (RegressionMetrics(r_squared=0.5, mean_absolute_error=1.0, mean_squared_error=2.0,
                       root_mean_squared_error=math.sqrt(2.0)), 'RSquared'),
    (RankingMetrics([0.1 * k for k in range(1, 11)], [0.2 * k for k in range(1, 11)]), 'NDCG@10'),
])
def test_columns_follow_metrics_task_tag(metrics, label):
    row = format_iteration_row(1, 'Trainer', metrics, 1.0, task=TaskType.BINARY)

    assert len(row) == len(format_header(METRIC_COLUMNS[metrics.task]))
    assert label in format_header(METRIC_COLUMNS[metrics.task])


@pytest.mark.parametrize("label, word", [(True, 'Toxic'), (False, 'Non Toxic')])
def test_prediction_line(label, word):
    assert format_prediction("This is a very rude movie", label) == (
        f"Text: This is a very rude movie | Prediction: {word} sentiment"
    )


def test_write_header_prints_rule_as_long_as_longest_line(reporter, console_output):
    reporter.write_header("short", "a much longer line")

    lines = console_output.getvalue().splitlines()
    assert lines[1:3] == ["short", "a much longer line"]
    assert lines[3] == '#' * len("a much longer line")


def test_create_row_uses_reporter_width(reporter, console_output):
    reporter.create_row("abc")

    line = console_output.getvalue().splitlines()[0]
    assert len(line) == 114
    assert line.startswith('|abc') and line.endswith('|')


def test_show_samples_prints_requested_rows(reporter, console_output, train_file):
    from autosentiment.data_loader import load_samples
    samples = load_samples(train_file)

    reporter.show_samples(samples, 4)

    output = console_output.getvalue()
    assert "Showing 4 rows of training data with the columns" in output
    assert output.count("Row--> | Text:") == 4


def test_print_binary_metrics_block(reporter, console_output):
    reporter.print_binary_metrics('LinearSvmBinary', make_metrics(0.875))

    output = console_output.getvalue()
    assert "Metrics for LinearSvmBinary binary classification model" in output
    assert "Accuracy: 87.50%" in output
    assert "PositivePrecision:  0.75" in output


def test_print_top_models_ranks_rows(reporter, console_output, make_trial_result):
    trials = [make_trial_result(0, 0.9, 'A'), make_trial_result(1, 0.8, 'B')]

    reporter.print_top_models(trials, count=3)

    lines = console_output.getvalue().splitlines()
    assert lines[0] == 'Top models ranked by accuracy --'
    assert lines[2].startswith('|1    A')
    assert lines[3].startswith('|2    B')
