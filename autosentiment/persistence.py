"""
Saving and loading trained pipelines.

An artifact is a single joblib file holding the fitted pipeline together with
the schema it was trained against and a format version.
"""

import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import joblib
import sklearn
import torch

from .data_loader import DatasetSchema
from .exceptions import ModelLoadError
from .utils import get_file_size, setup_logger

ARTIFACT_FORMAT_VERSION = 1
REQUIRED_ARTIFACT_KEYS = ('format_version', 'model', 'schema')


def save_model(
    model: Any,
    schema: DatasetSchema,
    path: Union[str, Path],
    trainer_name: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Path:
    """
    Persist a fitted pipeline and its schema, replacing any existing file.

    The artifact is written to a temporary file in the target directory and
    moved into place, so a failed write never leaves a truncated artifact.
    """
    logger = setup_logger(__name__)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    artifact = {
        'format_version': ARTIFACT_FORMAT_VERSION,
        'trainer_name': trainer_name,
        'schema': schema.to_dict(),
        'model': model,
        'created_at': datetime.now().isoformat(timespec='seconds'),
        'library_versions': {
            'scikit-learn': sklearn.__version__,
            'torch': torch.__version__,
        },
        'metadata': metadata or {},
    }

    handle, temp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix='.tmp')
    os.close(handle)
    try:
        joblib.dump(artifact, temp_name)
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.remove(temp_name)
        raise

    logger.info(f"Model saved to: {path} ({get_file_size(path)})")
    return path


def load_artifact(path: Union[str, Path]) -> Dict[str, Any]:
    """Read and validate a raw artifact dictionary."""
    path = Path(path)
    if not path.is_file():
        raise ModelLoadError(f"Model file not found: {path}")

    try:
        artifact = joblib.load(path)
    except Exception as e:
        raise ModelLoadError(f"Could not read model file {path}: {e}") from e

    if not isinstance(artifact, dict) or any(key not in artifact for key in REQUIRED_ARTIFACT_KEYS):
        raise ModelLoadError(f"Not a model artifact: {path}")

    version = artifact['format_version']
    if version != ARTIFACT_FORMAT_VERSION:
        raise ModelLoadError(
            f"Unsupported artifact format version {version} (expected {ARTIFACT_FORMAT_VERSION}): {path}"
        )
    return artifact


def load_model(
    path: Union[str, Path],
    expected_schema: Optional[DatasetSchema] = None
) -> Tuple[Any, DatasetSchema]:
    """
    Load a persisted pipeline.

    Args:
        path: Artifact file
        expected_schema: When given, the stored schema must match it

    Returns:
        Tuple of (model, schema)

    Raises:
        ModelLoadError: If the file is missing, unreadable or incompatible
    """
    logger = setup_logger(__name__)
    artifact = load_artifact(path)

    try:
        schema = DatasetSchema.from_dict(artifact['schema'])
    except (KeyError, TypeError, ValueError) as e:
        raise ModelLoadError(f"Artifact schema is invalid: {e}") from e

    if expected_schema is not None and schema != expected_schema:
        raise ModelLoadError(f"Artifact schema {schema} does not match expected {expected_schema}")

    model = artifact['model']
    if not hasattr(model, 'predict'):
        raise ModelLoadError(f"Artifact does not contain a predictive model: {path}")

    logger.info(f"Loaded {artifact.get('trainer_name') or 'model'} from: {path}")
    return model, schema
