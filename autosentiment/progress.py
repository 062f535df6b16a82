"""
Progress reporting for the AutoML search.

The search engine calls ``on_trial_complete`` once per finished trial, one
call at a time and in completion order.
"""

from typing import Optional, Protocol

from .metrics import TaskType
from .reporting import ConsoleReporter


class ProgressSink(Protocol):
    """Anything that can receive completed trials from the search engine."""

    def on_trial_complete(self, trial_index: int, trial_result) -> None:
        ...


class ExperimentProgressHandler:
    """
    Prints the progress table: one header row before the first trial, then
    one row per trial (metrics, or an exception line for failed trials).
    """

    def __init__(self, reporter: Optional[ConsoleReporter] = None, task: TaskType = TaskType.BINARY):
        self.reporter = reporter or ConsoleReporter()
        self.task = task
        self._iteration_index = 0

    @property
    def iterations_reported(self) -> int:
        return self._iteration_index

    def on_trial_complete(self, trial_index: int, trial_result) -> None:
        if self._iteration_index == 0:
            self.reporter.print_iteration_header(self.task)
        self._iteration_index += 1

        if trial_result.failure is not None:
            self.reporter.print_iteration_exception(trial_result.failure)
        else:
            self.reporter.print_iteration_metrics(
                trial_index,
                trial_result.trainer_name,
                trial_result.metrics,
                trial_result.runtime_seconds,
                self.task,
            )
