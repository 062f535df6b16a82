"""
Configuration loader and validator for the AutoSentiment experiment.

Loads a YAML file, fills in defaults for optional sections and exposes the
experiment settings (data paths, model path, time budget) as named properties.
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .exceptions import ConfigError


DEFAULTS: Dict[str, Any] = {
    'data': {
        'has_header': True,
        'separator': '\t',
        'text_column': 'Text',
        'label_column': 'Label',
        'preview_rows': 4,
    },
    'search': {
        'time_budget_seconds': 60,
        'max_trials': None,
        'n_jobs': 1,
        'validation_size': 0.2,
        'metric': 'accuracy',
        'early_stopping_patience': None,
        'trainers': None,
    },
    'featurizer': {},
    'models': {'hyperparameters': {}},
    'training': {
        'max_epochs': 10,
        'batch_size': 32,
        'learning_rate': 0.001,
        'max_grad_norm': 1.0,
        'early_stopping': {'patience': 3, 'min_delta': 0.001},
    },
    'preprocessing': {
        'vocab_size': 20000,
        'min_token_freq': 1,
        'min_token_length': 1,
        'max_length': 64,
        'lowercase': True,
    },
    'output': {
        'results_filename': 'experiment_results.json',
        'top_models': 3,
    },
    'console': {'width': 114},
    'reproducibility': {'seed': 42},
    'logging': {'log_dir': 'logs', 'console_level': 'WARNING'},
    'demo': {'sample_text': 'This is a very rude movie'},
}

REQUIRED_SECTIONS = ['data', 'output']
REQUIRED_KEYS = ['data.train_path', 'data.test_path', 'output.model_path']


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """
    Experiment configuration backed by a YAML file.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None,
                 overrides: Optional[Dict[str, Any]] = None):
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML configuration file
            overrides: Values merged on top of the file (or used alone when
                no path is given)
        """
        self.config_path = Path(config_path) if config_path is not None else None
        raw = self._load_config() if self.config_path is not None else {}
        if overrides:
            raw = _merge(raw, overrides)
        self._validate_sections(raw)
        self._config = _merge(DEFAULTS, raw)
        self._validate_values()

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "Config":
        """Build a configuration without a backing file."""
        return cls(None, overrides=values)

    def _load_config(self) -> Dict[str, Any]:
        """Load YAML configuration file."""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file: {e}")
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Configuration root must be a mapping: {self.config_path}")
        return loaded

    @staticmethod
    def _validate_sections(raw: Dict[str, Any]) -> None:
        """Basic validation of required configuration sections."""
        for section in REQUIRED_SECTIONS:
            if section not in raw:
                raise ConfigError(f"Missing required configuration section: {section}")
        for dotted in REQUIRED_KEYS:
            section, key = dotted.split('.')
            if not raw[section] or raw[section].get(key) in (None, ''):
                raise ConfigError(f"Missing required configuration key: {dotted}")

    def _validate_values(self) -> None:
        if self.time_budget_seconds <= 0:
            raise ConfigError("search.time_budget_seconds must be positive")
        if self.preview_rows < 0:
            raise ConfigError("data.preview_rows must not be negative")
        validation_size = self.search['validation_size']
        if not 0.0 < float(validation_size) < 1.0:
            raise ConfigError("search.validation_size must be between 0 and 1")
        if self.search['metric'] != 'accuracy':
            raise ConfigError(f"Unsupported search.metric: {self.search['metric']} (only 'accuracy')")
        if self.console_width < 10:
            raise ConfigError("console.width must be at least 10")
        if self.search['max_trials'] is not None and int(self.search['max_trials']) < 1:
            raise ConfigError("search.max_trials must be at least 1")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'data.train_path')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self._config
        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.
        """
        keys = key.split('.')
        config = self._config
        for k in keys[:-1]:
            config = config.setdefault(k, {})
        config[keys[-1]] = value

    @property
    def data(self) -> Dict[str, Any]:
        return self._config['data']

    @property
    def search(self) -> Dict[str, Any]:
        return self._config['search']

    @property
    def featurizer(self) -> Dict[str, Any]:
        return self._config['featurizer']

    @property
    def models(self) -> Dict[str, Any]:
        return self._config['models']

    @property
    def training(self) -> Dict[str, Any]:
        return self._config['training']

    @property
    def preprocessing(self) -> Dict[str, Any]:
        return self._config['preprocessing']

    @property
    def output(self) -> Dict[str, Any]:
        return self._config['output']

    @property
    def reproducibility(self) -> Dict[str, Any]:
        return self._config['reproducibility']

    @property
    def logging(self) -> Dict[str, Any]:
        return self._config['logging']

    # Named experiment settings

    @property
    def train_path(self) -> Path:
        return Path(self.data['train_path'])

    @property
    def test_path(self) -> Path:
        return Path(self.data['test_path'])

    @property
    def model_path(self) -> Path:
        return Path(self.output['model_path'])

    @property
    def time_budget_seconds(self) -> float:
        return float(self.search['time_budget_seconds'])

    @property
    def preview_rows(self) -> int:
        return int(self.data['preview_rows'])

    @property
    def console_width(self) -> int:
        return int(self._config['console']['width'])

    @property
    def seed(self) -> int:
        return int(self.reproducibility['seed'])

    @property
    def sample_text(self) -> str:
        return self._config['demo']['sample_text']

    def get_model_hyperparams(self, trainer_name: str) -> Dict[str, Any]:
        """Hyperparameter search space for a trainer (empty if unset)."""
        return self.get(f'models.hyperparameters.{trainer_name}', {}) or {}

    def get_trainer_names(self) -> Optional[List[str]]:
        """Allow-list of trainers to search, or None for the whole catalog."""
        return self.search.get('trainers')

    def save(self, save_path: Union[str, Path]) -> None:
        """
        Save current configuration to YAML file.
        """
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self._config, f, indent=2, default_flow_style=False)

    def __str__(self) -> str:
        return f"Config(path={self.config_path}, sections={list(self._config.keys())})"

    def __repr__(self) -> str:
        return self.__str__()


def load_config(config_path: Union[str, Path]) -> Config:
    """
    Load configuration from YAML file.
    """
    return Config(config_path)
