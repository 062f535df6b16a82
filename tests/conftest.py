"""Shared fixtures for the AutoSentiment test suite."""

import io

import numpy as np
import pytest
from rich.console import Console

from autosentiment.config import Config
from autosentiment.exceptions import TrialFailure
from autosentiment.metrics import BinaryClassificationMetrics
from autosentiment.reporting import ConsoleReporter
from autosentiment.search import TrialResult


TRAIN_ROWS = [
    ("Thanks for fixing the citation, much appreciated.", 0),
    ("You are a rude idiot and nobody wants your edits.", 1),
    ("I added a reference to the journal article.", 0),
    ("Stop vandalizing this page, you rude loser.", 1),
    ("Could you explain why the infobox was removed?", 0),
    ("This is a rude and stupid comment, moron.", 1),
    ("Welcome to the project, let me know if you need help.", 0),
    ("Get lost, you rude and worthless troll.", 1),
    ("The dates in the timeline look correct now.", 0),
    ("What a rude fool, never touch a keyboard again.", 1),
    ("Good catch on the spelling error.", 0),
    ("Shut up, nobody asked for your rude rewrite.", 1),
]

TEST_ROWS = [
    ("Thank you for adding the references.", 0),
    ("You are a rude idiot.", 1),
    ("The new heading is clearer.", 0),
    ("Rude and stupid edit, loser.", 1),
]


class KeywordModel:
    """Predicts toxic for any text containing 'rude'."""

    classes_ = np.array([False, True])

    def __init__(self, keyword: str = 'rude'):
        self.keyword = keyword

    def fit(self, texts, labels):
        return self

    def decision_function(self, texts):
        return np.array([1.0 if self.keyword in text.lower() else -1.0 for text in texts])

    def predict(self, texts):
        return self.decision_function(texts) > 0


class StubSearchEngine:
    """Returns canned trials and forwards them to the progress sink."""

    def __init__(self, trials):
        self.trials = list(trials)
        self.calls = []

    def search(self, training_samples, time_budget, progress_sink):
        self.calls.append((len(training_samples), time_budget))
        for index, trial in enumerate(self.trials, start=1):
            progress_sink.on_trial_complete(index, trial)
        return list(self.trials)


def make_metrics(accuracy: float) -> BinaryClassificationMetrics:
    return BinaryClassificationMetrics(
        accuracy=accuracy,
        area_under_roc_curve=0.9,
        area_under_precision_recall_curve=0.85,
        f1_score=0.8,
        positive_precision=0.75,
        positive_recall=0.7,
        negative_precision=0.8,
        negative_recall=0.85,
    )


def make_trial(number: int, accuracy: float, trainer_name: str = 'LbfgsLogisticRegressionBinary',
               failed: bool = False, model=None) -> TrialResult:
    return TrialResult(
        trial_number=number,
        trainer_name=trainer_name,
        metrics=make_metrics(accuracy),
        runtime_seconds=0.5 + number,
        model=model if model is not None else KeywordModel(),
        failure=TrialFailure(trainer_name, RuntimeError("boom")) if failed else None,
    )


def write_tsv(path, rows, header=("Text", "Label")):
    lines = []
    if header is not None:
        lines.append("\t".join(header))
    lines.extend(f"{text}\t{label}" for text, label in rows)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def train_file(tmp_path):
    return write_tsv(tmp_path / "train.tsv", TRAIN_ROWS)


@pytest.fixture
def test_file(tmp_path):
    return write_tsv(tmp_path / "test.tsv", TEST_ROWS)


@pytest.fixture
def config(tmp_path, train_file, test_file):
    return Config.from_dict({
        'data': {'train_path': str(train_file), 'test_path': str(test_file)},
        'output': {'model_path': str(tmp_path / "models" / "model.joblib")},
        'search': {
            'time_budget_seconds': 30,
            'max_trials': 3,
            'trainers': ['LbfgsLogisticRegressionBinary', 'NaiveBayesBinary'],
        },
        'logging': {'log_dir': str(tmp_path / "logs")},
    })


@pytest.fixture
def console_output():
    return io.StringIO()


@pytest.fixture
def reporter(console_output):
    console = Console(file=console_output, width=200, color_system=None)
    return ConsoleReporter(width=114, console=console)


@pytest.fixture
def make_trial_result():
    return make_trial


@pytest.fixture
def keyword_model():
    return KeywordModel()


@pytest.fixture
def stub_engine():
    return StubSearchEngine
