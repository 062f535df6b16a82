"""
Experiment orchestrator for the AutoSentiment sample.

Coordinates the whole workflow:
- Loading the training and test files
- Previewing the training data
- Running the time-boxed AutoML search with a progress table
- Selecting, evaluating and persisting the best pipeline
- Single-sample prediction with a persisted pipeline
"""

import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import Config
from .data_loader import DatasetSchema, Sample, load_samples
from .evaluator import Prediction, evaluate, predict
from .exceptions import ModelLoadError
from .log_manager import setup_logging_from_config
from .metrics import BinaryClassificationMetrics, TaskType
from .persistence import load_model, save_model
from .progress import ExperimentProgressHandler
from .reporting import ConsoleReporter
from .search import AutoMLSearch, TrialResult
from .selection import rank_by_accuracy, select_best_run
from .utils import format_time, save_json, seed_everything, setup_logger

CONFIG_SNAPSHOT_FILENAME = "effective_config.yaml"


class SentimentExperiment:
    """
    Binary sentiment AutoML experiment.

    Paths and the time budget come from the configuration; every argument of
    ``run_experiment`` can override them for one run.
    """

    def __init__(
        self,
        config: Config,
        reporter: Optional[ConsoleReporter] = None,
        search_engine: Optional[Any] = None
    ):
        """
        Args:
            config: Experiment configuration
            reporter: Console reporter (a default one writes to stdout)
            search_engine: Object exposing ``search(samples, time_budget, sink)``;
                defaults to the Optuna search
        """
        self.config = config
        self.reporter = reporter or ConsoleReporter(width=config.console_width)
        self.search_engine = search_engine
        self.schema = DatasetSchema.from_config(config.data)
        setup_logging_from_config(config)
        self.logger = setup_logger(__name__)

        self.training_samples: List[Sample] = []
        self.test_samples: List[Sample] = []
        self.trials: List[TrialResult] = []
        self.best_run: Optional[TrialResult] = None
        self.test_metrics: Optional[BinaryClassificationMetrics] = None
        self.stages: List[Dict[str, Any]] = []

    def _run_stage(self, stage_name: str, stage_function, *args):
        """Run one stage with timing; failures are recorded and re-raised."""
        self.logger.info(f"Starting stage: {stage_name}")
        stage_start = time.time()
        try:
            result = stage_function(*args)
        except Exception as e:
            self.stages.append({
                'name': stage_name,
                'duration': time.time() - stage_start,
                'status': 'failed',
                'error': str(e),
            })
            self.logger.error(f"Stage '{stage_name}' failed: {e}")
            raise

        stage_time = time.time() - stage_start
        self.stages.append({'name': stage_name, 'duration': stage_time, 'status': 'completed'})
        self.logger.info(f"Stage '{stage_name}' completed in {stage_time:.1f}s")
        return result

    def run_experiment(
        self,
        train_path: Optional[Union[str, Path]] = None,
        test_path: Optional[Union[str, Path]] = None,
        model_path: Optional[Union[str, Path]] = None,
        time_budget_seconds: Optional[float] = None
    ) -> TrialResult:
        """
        Search for the best pipeline, evaluate it on the test file and save it.

        Returns:
            The best trial

        Raises:
            FileNotFoundError: If a data file is missing
            SchemaError: If a data file is malformed
            NoValidTrialError: If no trial succeeded
        """
        train_path = Path(train_path) if train_path is not None else self.config.train_path
        test_path = Path(test_path) if test_path is not None else self.config.test_path
        model_path = Path(model_path) if model_path is not None else self.config.model_path
        time_budget = float(time_budget_seconds if time_budget_seconds is not None
                            else self.config.time_budget_seconds)
        if time_budget <= 0:
            raise ValueError(f"Time budget must be positive, got {time_budget}")

        self.stages = []
        start_time = time.time()
        seed_everything(self.config.seed)

        self._run_stage("data_loading", self._load_data, train_path, test_path)
        self.reporter.show_samples(self.training_samples, self.config.preview_rows)

        self._run_stage("search", self._run_search, time_budget)
        self.reporter.print_top_models(
            rank_by_accuracy(self.trials), int(self.config.output['top_models'])
        )

        self.best_run = self._run_stage("selection", select_best_run, self.trials)
        self.logger.info(
            f"Best trainer: {self.best_run.trainer_name} "
            f"(validation accuracy {self.best_run.accuracy:.4f})"
        )

        self._run_stage("evaluation", self._evaluate_best_run)
        self._run_stage("saving_artifacts", self._save_model, model_path)

        elapsed = time.time() - start_time
        self._write_summary(model_path, elapsed)
        self.logger.info(f"Experiment completed in {format_time(elapsed)}")
        return self.best_run

    def _load_data(self, train_path: Path, test_path: Path) -> None:
        has_header = bool(self.config.data['has_header'])
        separator = self.config.data['separator']
        self.training_samples = load_samples(train_path, has_header, self.schema, separator)
        self.test_samples = load_samples(test_path, has_header, self.schema, separator)
        self.logger.info(
            f"Loaded {len(self.training_samples)} training and {len(self.test_samples)} test samples"
        )

    def _run_search(self, time_budget: float) -> None:
        if self.search_engine is None:
            self.search_engine = AutoMLSearch(self.config)

        self.reporter.write_header("=============== Running AutoML experiment ===============")
        self.reporter.print_message(
            f"Running AutoML binary classification experiment for {time_budget:g} seconds..."
        )
        progress_handler = ExperimentProgressHandler(self.reporter, TaskType.BINARY)
        self.trials = list(self.search_engine.search(self.training_samples, time_budget, progress_handler))
        self.reporter.print_message('')
        self.logger.info(f"Search finished with {len(self.trials)} trials")

    def _evaluate_best_run(self) -> None:
        self.reporter.write_header("=============== Evaluating model's accuracy with test data ===============")
        self.test_metrics = evaluate(self.best_run.model, self.test_samples)
        self.reporter.print_binary_metrics(self.best_run.trainer_name, self.test_metrics)

    def _save_model(self, model_path: Path) -> None:
        save_model(
            self.best_run.model,
            self.schema,
            model_path,
            trainer_name=self.best_run.trainer_name,
            metadata={
                'validation_accuracy': self.best_run.accuracy,
                'hyperparams': self.best_run.hyperparams,
            },
        )
        self.reporter.print_message(f"The model is saved to {model_path}")

    def _write_summary(self, model_path: Path, elapsed: float) -> None:
        """Write the run summary and the effective configuration next to the model."""
        results_path = model_path.parent / self.config.output['results_filename']
        save_json(self.get_summary(elapsed), results_path)
        self.config.save(model_path.parent / CONFIG_SNAPSHOT_FILENAME)
        self.logger.info(f"Experiment summary saved to: {results_path}")

    def get_summary(self, elapsed: Optional[float] = None) -> Dict[str, Any]:
        """Leaderboard, best trial, test metrics and stage timings of the last run."""
        summary: Dict[str, Any] = {
            'created_at': datetime.now().isoformat(timespec='seconds'),
            'total_time': elapsed,
            'stages': list(self.stages),
            'data': {
                'train_samples': len(self.training_samples),
                'test_samples': len(self.test_samples),
                'schema': self.schema.to_dict(),
            },
            'trials': [trial.to_dict() for trial in self.trials],
            'leaderboard': [
                {'rank': rank, 'trainer_name': trial.trainer_name, 'accuracy': trial.accuracy}
                for rank, trial in enumerate(rank_by_accuracy(self.trials), start=1)
            ],
        }
        if self.best_run is not None:
            summary['best_trial'] = self.best_run.to_dict()
        if self.test_metrics is not None:
            summary['test_metrics'] = self.test_metrics.to_dict()
        if hasattr(self.search_engine, 'get_search_summary'):
            summary['search'] = self.search_engine.get_search_summary()
        return summary

    def predict_one(self, model_path: Optional[Union[str, Path]] = None, sample_text: Optional[str] = None) -> Prediction:
        """
        Load a persisted pipeline and classify one text.

        Raises:
            ModelLoadError: If the artifact is missing or incompatible
        """
        model_path = Path(model_path) if model_path is not None else self.config.model_path
        sample_text = sample_text if sample_text is not None else self.config.sample_text

        self.reporter.write_header("=============== Testing prediction engine ===============")
        model, _ = load_model(model_path, expected_schema=self.schema)
        self.reporter.print_message("=============== Loaded Model OK  ===============")
        self.reporter.print_message("=============== Created Prediction Engine OK  ===============")

        try:
            prediction = predict(model, Sample(sample_text))
        except Exception as e:
            raise ModelLoadError(f"Loaded model cannot score text: {e}") from e

        self.logger.info(f"Predicted {prediction.label} (score {prediction.score:.4f}) for: {sample_text}")
        return prediction

    def report_prediction(self, sample_text: str, prediction: Prediction) -> None:
        self.reporter.print_prediction(sample_text, prediction.label)


def run_experiment(
    config: Config,
    train_path: Optional[Union[str, Path]] = None,
    test_path: Optional[Union[str, Path]] = None,
    model_path: Optional[Union[str, Path]] = None,
    time_budget_seconds: Optional[float] = None
) -> TrialResult:
    """Run a full experiment with the default reporter and search engine."""
    return SentimentExperiment(config).run_experiment(train_path, test_path, model_path, time_budget_seconds)


def predict_one(config: Config, model_path: Optional[Union[str, Path]] = None,
                sample_text: Optional[str] = None) -> Prediction:
    """Classify one text with a persisted pipeline and print the prediction line."""
    experiment = SentimentExperiment(config)
    prediction = experiment.predict_one(model_path, sample_text)
    experiment.report_prediction(sample_text if sample_text is not None else config.sample_text, prediction)
    return prediction
