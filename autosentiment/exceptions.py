"""
Error types raised by the AutoSentiment experiment.

Missing or unreadable files are reported with the builtin ``OSError`` family
(``FileNotFoundError`` in particular); everything specific to this project
derives from ``AutoSentimentError``.
"""

from typing import Optional


class AutoSentimentError(Exception):
    """Base class for all project errors."""


class ConfigError(AutoSentimentError, ValueError):
    """Configuration file is missing a section or holds an invalid value."""


class SchemaError(AutoSentimentError, ValueError):
    """A data row does not match the expected columns or types."""

    def __init__(self, message: str, path: Optional[str] = None, row: Optional[int] = None):
        self.path = path
        self.row = row
        location = ""
        if path is not None:
            location = f" ({path}" + (f", row {row}" if row is not None else "") + ")"
        super().__init__(f"{message}{location}")


class ModelLoadError(AutoSentimentError):
    """A persisted model is missing, unreadable or incompatible."""


class TrialFailure(AutoSentimentError):
    """
    Failure of a single search trial.

    Attached to the trial's result by the search engine; never fatal to the
    search as a whole.
    """

    def __init__(self, trainer_name: str, cause: BaseException):
        self.trainer_name = trainer_name
        self.cause = cause
        super().__init__(f"{trainer_name}: {type(cause).__name__}: {cause}")


class NoValidTrialError(AutoSentimentError):
    """No trial produced a usable validation accuracy."""
