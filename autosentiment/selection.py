"""
Best-run selection over completed search trials.
"""

import math
from typing import List, Sequence

from .exceptions import NoValidTrialError
from .metrics import metric_accuracy


def is_candidate(trial) -> bool:
    """A trial competes only if it did not fail and has a defined accuracy."""
    return trial.failure is None and not math.isnan(metric_accuracy(trial.metrics))


def select_best_run(trials: Sequence):
    """
    Return the trial with the highest validation accuracy.

    Failed trials and trials without a defined accuracy are ignored. Ties go
    to the earliest trial in ``trials``.

    Raises:
        NoValidTrialError: If no trial qualifies
    """
    best = None
    best_accuracy = -math.inf
    for trial in trials:
        if not is_candidate(trial):
            continue
        accuracy = metric_accuracy(trial.metrics)
        if accuracy > best_accuracy:
            best, best_accuracy = trial, accuracy

    if best is None:
        raise NoValidTrialError(
            f"None of the {len(trials)} trials produced a usable validation accuracy"
        )
    return best


def rank_by_accuracy(trials: Sequence) -> List:
    """Candidate trials ordered best first; equal accuracies keep their original order."""
    candidates = [trial for trial in trials if is_candidate(trial)]
    return sorted(candidates, key=lambda trial: metric_accuracy(trial.metrics), reverse=True)
