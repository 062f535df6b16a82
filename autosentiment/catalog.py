"""
Catalog of candidate trainers for the AutoML search.

Every entry builds an unfitted scikit-learn ``Pipeline`` that accepts raw
texts: the classical trainers sit behind a TF-IDF featurizer, the neural
trainers tokenize internally.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sklearn.base import BaseEstimator
from sklearn.ensemble import GradientBoostingClassifier, RandomForestClassifier
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.linear_model import LogisticRegression, SGDClassifier
from sklearn.naive_bayes import ComplementNB
from sklearn.pipeline import Pipeline
from sklearn.svm import LinearSVC

from .config import Config
from .exceptions import ConfigError
from .trainer import NeuralTextClassifier


@dataclass(frozen=True)
class TrainerSpec:
    """A named trainer and how to construct its estimator."""
    name: str
    factory: Callable[[int], BaseEstimator]
    uses_featurizer: bool = True
    neural: bool = False


def _neural(architecture: str) -> Callable[[int], BaseEstimator]:
    def factory(seed: int) -> BaseEstimator:
        return NeuralTextClassifier(architecture=architecture, seed=seed)
    return factory


TRAINER_CATALOG: Dict[str, TrainerSpec] = {
    spec.name: spec for spec in [
        TrainerSpec(
            'LbfgsLogisticRegressionBinary',
            lambda seed: LogisticRegression(solver='lbfgs', max_iter=1000),
        ),
        TrainerSpec(
            'LinearSvmBinary',
            lambda seed: LinearSVC(max_iter=5000, random_state=seed),
        ),
        TrainerSpec(
            'SgdCalibratedBinary',
            lambda seed: SGDClassifier(loss='log_loss', max_iter=1000, tol=1e-3, random_state=seed),
        ),
        TrainerSpec(
            'AveragedPerceptronBinary',
            lambda seed: SGDClassifier(
                loss='perceptron', learning_rate='constant', eta0=1.0, penalty=None,
                average=True, max_iter=1000, tol=1e-3, random_state=seed,
            ),
        ),
        TrainerSpec(
            'NaiveBayesBinary',
            lambda seed: ComplementNB(),
        ),
        TrainerSpec(
            'FastForestBinary',
            lambda seed: RandomForestClassifier(n_estimators=100, random_state=seed),
        ),
        TrainerSpec(
            'FastTreeBinary',
            lambda seed: GradientBoostingClassifier(n_estimators=100, random_state=seed),
        ),
        TrainerSpec('FfnTextBinary', _neural('ffn'), uses_featurizer=False, neural=True),
        TrainerSpec('CnnTextBinary', _neural('cnn'), uses_featurizer=False, neural=True),
    ]
}


def available_trainers(config: Optional[Config] = None) -> List[str]:
    """Trainer names to search: the configured allow-list, or the whole catalog."""
    names = config.get_trainer_names() if config is not None else None
    if not names:
        return list(TRAINER_CATALOG)
    unknown = [name for name in names if name not in TRAINER_CATALOG]
    if unknown:
        raise ConfigError(f"Unknown trainers in search.trainers: {unknown}")
    return list(names)


def convert_featurizer_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """Turn search-space values into TfidfVectorizer arguments."""
    converted = dict(params)
    ngram_range = converted.get('ngram_range')
    if isinstance(ngram_range, str):
        low, high = (int(part.strip()) for part in ngram_range.split(','))
        converted['ngram_range'] = (low, high)
    elif isinstance(ngram_range, list):
        converted['ngram_range'] = tuple(ngram_range)
    return converted


def neural_defaults(config: Config) -> Dict[str, Any]:
    """Training settings shared by every neural trial."""
    training = config.training
    preprocessing = config.preprocessing
    early_stopping = training.get('early_stopping', {})
    return {
        'max_epochs': training['max_epochs'],
        'batch_size': training['batch_size'],
        'learning_rate': training['learning_rate'],
        'max_grad_norm': training.get('max_grad_norm', 1.0),
        'patience': early_stopping.get('patience', 3),
        'min_delta': early_stopping.get('min_delta', 0.001),
        'device': training.get('device', 'cpu'),
        'max_length': preprocessing['max_length'],
        'vocab_size': preprocessing['vocab_size'],
        'min_token_freq': preprocessing['min_token_freq'],
        'min_token_length': preprocessing['min_token_length'],
        'lowercase': preprocessing['lowercase'],
    }


def build_pipeline(
    trainer_name: str,
    hyperparams: Optional[Dict[str, Any]] = None,
    featurizer_params: Optional[Dict[str, Any]] = None,
    config: Optional[Config] = None,
    seed: int = 42
) -> Pipeline:
    """
    Build an unfitted pipeline for one trial.

    Args:
        trainer_name: Catalog name of the trainer
        hyperparams: Trainer hyperparameters sampled for the trial
        featurizer_params: TF-IDF parameters sampled for the trial
        config: Experiment configuration (neural training defaults)
        seed: Random seed passed to the estimator

    Raises:
        KeyError: If the trainer is not in the catalog
        ValueError: If a hyperparameter is not accepted by the estimator
    """
    spec = TRAINER_CATALOG[trainer_name]
    estimator = spec.factory(seed)

    params = {}
    if spec.neural and config is not None:
        params.update(neural_defaults(config))
    params.update(hyperparams or {})
    if params:
        estimator.set_params(**params)

    steps = []
    if spec.uses_featurizer:
        featurizer = TfidfVectorizer(lowercase=True)
        if featurizer_params:
            featurizer.set_params(**convert_featurizer_params(featurizer_params))
        steps.append(('featurizer', featurizer))
    steps.append(('trainer', estimator))
    return Pipeline(steps)
