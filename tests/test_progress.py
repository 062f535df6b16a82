from autosentiment.metrics import RegressionMetrics, TaskType
from autosentiment.progress import ExperimentProgressHandler, ProgressSink
from autosentiment.search import TrialResult


def _table_rows(output):
    return [line for line in output.splitlines() if line.startswith('|')]


def test_n_calls_print_header_plus_n_rows(reporter, console_output, make_trial_result):
    handler = ExperimentProgressHandler(reporter)

    for index, accuracy in enumerate([0.7, 0.8, 0.9], start=1):
        handler.on_trial_complete(index, make_trial_result(index, accuracy))

    rows = _table_rows(console_output.getvalue())
    assert len(rows) == 4
    assert 'Trainer' in rows[0] and 'Accuracy' in rows[0]
    assert rows[3].startswith('|3    LbfgsLogisticRegressionBinary')
    assert handler.iterations_reported == 3


def test_no_calls_print_nothing(reporter, console_output):
    ExperimentProgressHandler(reporter)

    assert console_output.getvalue() == ''


def test_failed_trial_prints_exception_line(reporter, console_output, make_trial_result):
    handler = ExperimentProgressHandler(reporter)

    handler.on_trial_complete(1, make_trial_result(1, 0.99, 'FastForestBinary', failed=True))

    output = console_output.getvalue()
    assert "Exception during AutoML iteration: FastForestBinary: RuntimeError: boom" in output
    assert len(_table_rows(output)) == 1


def test_row_columns_follow_metrics_task(reporter, console_output):
    handler = ExperimentProgressHandler(reporter, task=TaskType.REGRESSION)
    trial = TrialResult(
        trial_number=0,
        trainer_name='FastTreeRegression',
        metrics=RegressionMetrics(0.5, 1.25, 2.5, 1.58),
        runtime_seconds=1.0,
    )

    handler.on_trial_complete(1, trial)

    rows = _table_rows(console_output.getvalue())
    assert 'RSquared' in rows[0]
    assert '0.5000' in rows[1] and '1.25' in rows[1]


def test_handler_satisfies_progress_sink_protocol(reporter):
    sink: ProgressSink = ExperimentProgressHandler(reporter)

    assert callable(sink.on_trial_complete)
