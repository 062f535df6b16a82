import math

import pytest

from autosentiment.exceptions import NoValidTrialError
from autosentiment.selection import is_candidate, rank_by_accuracy, select_best_run


def test_highest_accuracy_wins(make_trial_result):
    trials = [make_trial_result(0, 0.81), make_trial_result(1, 0.95), make_trial_result(2, 0.77)]

    assert select_best_run(trials) is trials[1]


def test_failed_trial_is_excluded_even_when_highest(make_trial_result):
    trials = [make_trial_result(0, 0.81), make_trial_result(1, 0.99, failed=True), make_trial_result(2, 0.77)]

    assert select_best_run(trials) is trials[0]
    assert not is_candidate(trials[1])


def test_nan_accuracy_is_excluded(make_trial_result):
    trials = [make_trial_result(0, math.nan), make_trial_result(1, 0.6)]

    assert select_best_run(trials) is trials[1]


def test_ties_go_to_first_trial(make_trial_result):
    trials = [make_trial_result(0, 0.9, 'A'), make_trial_result(1, 0.9, 'B')]

    assert select_best_run(trials).trainer_name == 'A'


@pytest.mark.parametrize("accuracies, failed", [
    ([], False),
    ([0.9, 0.8], True),
    ([math.nan], False),
])
def test_no_candidate_raises(make_trial_result, accuracies, failed):
    trials = [make_trial_result(i, a, failed=failed) for i, a in enumerate(accuracies)]

    with pytest.raises(NoValidTrialError):
        select_best_run(trials)


def test_rank_by_accuracy_is_stable(make_trial_result):
    trials = [
        make_trial_result(0, 0.7, 'A'),
        make_trial_result(1, 0.9, 'B'),
        make_trial_result(2, 0.7, 'C'),
        make_trial_result(3, 0.95, 'D', failed=True),
    ]

    assert [t.trainer_name for t in rank_by_accuracy(trials)] == ['B', 'A', 'C']
