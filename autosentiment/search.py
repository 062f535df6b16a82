"""
AutoML search engine for the AutoSentiment experiment.

Uses Optuna to explore the trainer catalog and each trainer's hyperparameter
space within a wall-clock time budget. Every finished trial becomes a
``TrialResult`` and is handed to the progress sink.
"""

import math
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import optuna
from optuna.samplers import TPESampler
from sklearn.model_selection import train_test_split

from .catalog import available_trainers, build_pipeline
from .config import Config
from .data_loader import Sample, split_texts_and_labels
from .evaluator import evaluate
from .exceptions import TrialFailure
from .metrics import MetricsBundle, metric_accuracy
from .selection import is_candidate
from .utils import setup_logger


@dataclass(frozen=True)
class TrialResult:
    """Outcome of one candidate pipeline."""
    trial_number: int
    trainer_name: str
    metrics: Optional[MetricsBundle]
    runtime_seconds: float
    hyperparams: Dict[str, Any] = field(default_factory=dict)
    model: Any = field(default=None, repr=False, compare=False)
    failure: Optional[TrialFailure] = None

    @property
    def accuracy(self) -> float:
        return metric_accuracy(self.metrics)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view without the fitted model."""
        return {
            'trial_number': self.trial_number,
            'trainer_name': self.trainer_name,
            'metrics': self.metrics.to_dict() if self.metrics is not None else None,
            'runtime_seconds': self.runtime_seconds,
            'hyperparams': self.hyperparams,
            'failure': str(self.failure) if self.failure is not None else None,
        }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def suggest_value(trial: optuna.Trial, name: str, values: Any) -> Any:
    """
    Suggest one hyperparameter from its configured space.

    - list of ints: integer range between min and max
    - list of floats: float range between min and max
    - dict with ``low``/``high`` (optional ``log``, ``step``): numeric range
    - any other list: categorical; nested lists become comma-separated strings
    - scalar: fixed value
    """
    if isinstance(values, dict):
        low, high = values['low'], values['high']
        log = bool(values.get('log', False))
        if _is_int(low) and _is_int(high):
            return trial.suggest_int(name, low, high, log=log, step=values.get('step', 1))
        return trial.suggest_float(name, float(low), float(high), log=log, step=values.get('step'))

    if isinstance(values, list):
        if values and all(_is_int(v) for v in values):
            return trial.suggest_int(name, min(values), max(values))
        if values and all(isinstance(v, float) for v in values):
            return trial.suggest_float(name, min(values), max(values))
        choices = []
        for v in values:
            if isinstance(v, list):
                choices.append(','.join(map(str, v)))
            else:
                choices.append(v)
        return trial.suggest_categorical(name, choices)

    return values


class AutoMLSearch:
    """Time-boxed hyperparameter and trainer search using Optuna."""

    def __init__(self, config: Config):
        """
        Args:
            config: Experiment configuration
        """
        self.config = config
        self.logger = setup_logger(__name__)

        self.search_config = config.search
        self.max_trials = self.search_config.get('max_trials')
        self.n_jobs = int(self.search_config.get('n_jobs', 1))
        self.validation_size = float(self.search_config['validation_size'])
        self.patience = self.search_config.get('early_stopping_patience')
        self.seed = config.seed
        self.trainer_names = available_trainers(config)

        self.study: Optional[optuna.Study] = None
        self.search_time: Optional[float] = None
        self._results: List[TrialResult] = []
        self._lock = threading.Lock()

    def _setup_study(self) -> optuna.Study:
        return optuna.create_study(
            direction='maximize',
            sampler=TPESampler(seed=self.seed),
            pruner=optuna.pruners.NopPruner(),
        )

    def _suggest_hyperparameters(self, trial: optuna.Trial, trainer_name: str) -> Dict[str, Any]:
        space = self.config.get_model_hyperparams(trainer_name)
        return {
            param: suggest_value(trial, f"{trainer_name}_{param}", values)
            for param, values in space.items()
        }

    def _suggest_featurizer(self, trial: optuna.Trial) -> Dict[str, Any]:
        return {
            param: suggest_value(trial, f"featurizer_{param}", values)
            for param, values in self.config.featurizer.items()
        }

    def _split(self, samples: Sequence[Sample]):
        texts, labels = split_texts_and_labels(samples)
        if len(samples) < 2:
            raise ValueError(f"Need at least 2 training samples, got {len(samples)}")

        class_counts = Counter(labels)
        stratify = labels if len(class_counts) > 1 and min(class_counts.values()) >= 2 else None
        try:
            return train_test_split(
                texts, labels,
                test_size=self.validation_size,
                random_state=self.seed,
                stratify=stratify,
            )
        except ValueError:
            # Validation split too small to hold every class
            return train_test_split(
                texts, labels, test_size=self.validation_size, random_state=self.seed
            )

    def _record(self, result: TrialResult, progress_sink) -> None:
        # Serializes result collection and sink calls across Optuna worker threads.
        with self._lock:
            self._results.append(result)
            if progress_sink is not None:
                progress_sink.on_trial_complete(len(self._results), result)

    def _make_objective(self, train_texts, train_labels, validation_samples, progress_sink):
        def objective(trial: optuna.Trial) -> float:
            trainer_name = trial.suggest_categorical('trainer', self.trainer_names)
            start_time = time.time()
            hyperparams: Dict[str, Any] = {}
            try:
                hyperparams = self._suggest_hyperparameters(trial, trainer_name)
                featurizer_params = self._suggest_featurizer(trial)
                self.logger.debug(f"Trial {trial.number}: {trainer_name} with {hyperparams}")

                pipeline = build_pipeline(
                    trainer_name, hyperparams, featurizer_params, config=self.config, seed=self.seed
                )
                pipeline.fit(train_texts, train_labels)
                metrics = evaluate(pipeline, validation_samples)
                result = TrialResult(
                    trial_number=trial.number,
                    trainer_name=trainer_name,
                    metrics=metrics,
                    runtime_seconds=time.time() - start_time,
                    hyperparams={**hyperparams, **featurizer_params},
                    model=pipeline,
                )
            except Exception as e:
                self.logger.error(f"Trial {trial.number} ({trainer_name}) failed: {e}")
                result = TrialResult(
                    trial_number=trial.number,
                    trainer_name=trainer_name,
                    metrics=None,
                    runtime_seconds=time.time() - start_time,
                    hyperparams=hyperparams,
                    failure=TrialFailure(trainer_name, e),
                )

            self._record(result, progress_sink)
            if result.failure is not None:
                # Worst possible value to discourage this configuration
                return float('-inf')
            accuracy = result.accuracy
            return accuracy if not math.isnan(accuracy) else float('-inf')
        return objective

    def _early_stopping_callback(self):
        best = {'accuracy': -math.inf, 'stale': 0}

        def callback(study: optuna.Study, frozen_trial: optuna.trial.FrozenTrial) -> None:
            # Optuna calls this from worker threads when n_jobs > 1
            with self._lock:
                value = frozen_trial.value
                if value is not None and value > best['accuracy']:
                    best['accuracy'] = value
                    best['stale'] = 0
                else:
                    best['stale'] += 1
                should_stop = best['stale'] >= self.patience
            if should_stop:
                self.logger.info(f"No improvement in {self.patience} trials, stopping search early")
                study.stop()
        return callback

    def search(self, training_samples: Sequence[Sample], time_budget: float, progress_sink=None) -> List[TrialResult]:
        """
        Run the search until the time budget is spent or the search stops early.

        Args:
            training_samples: Labeled samples; a validation split is held out
            time_budget: Wall-clock budget in seconds
            progress_sink: Receives ``on_trial_complete(index, result)`` per trial

        Returns:
            Every trial result in completion order
        """
        train_texts, val_texts, train_labels, val_labels = self._split(training_samples)
        validation_samples = [Sample(text, label) for text, label in zip(val_texts, val_labels)]

        self.logger.info(
            f"Starting search over {len(self.trainer_names)} trainers for {time_budget:.0f}s "
            f"({len(train_texts)} train / {len(validation_samples)} validation samples)"
        )

        self._results = []
        self.study = self._setup_study()
        callbacks = [self._early_stopping_callback()] if self.patience else []

        previous_verbosity = optuna.logging.get_verbosity()
        optuna.logging.set_verbosity(optuna.logging.WARNING)
        start_time = time.time()
        try:
            self.study.optimize(
                self._make_objective(train_texts, train_labels, validation_samples, progress_sink),
                n_trials=self.max_trials,
                timeout=time_budget,
                n_jobs=self.n_jobs,
                callbacks=callbacks,
            )
        finally:
            optuna.logging.set_verbosity(previous_verbosity)
        self.search_time = time.time() - start_time

        failed = sum(1 for result in self._results if result.failure is not None)
        self.logger.info(
            f"Search completed in {self.search_time:.1f}s: {len(self._results)} trials, {failed} failed"
        )
        return list(self._results)

    def get_search_summary(self) -> Dict[str, Any]:
        """Counts and timings for the last search."""
        if not self._results:
            return {}

        completed = [result for result in self._results if is_candidate(result)]
        return {
            'total_trials': len(self._results),
            'completed_trials': len(completed),
            'failed_trials': sum(1 for result in self._results if result.failure is not None),
            'search_time': self.search_time,
            'trainer_distribution': dict(Counter(result.trainer_name for result in self._results)),
            'average_trial_time': sum(r.runtime_seconds for r in self._results) / len(self._results),
        }
