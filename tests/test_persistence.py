import joblib
import pytest

from autosentiment.catalog import build_pipeline
from autosentiment.data_loader import DatasetSchema, load_samples, split_texts_and_labels
from autosentiment.exceptions import ModelLoadError
from autosentiment.persistence import ARTIFACT_FORMAT_VERSION, load_artifact, load_model, save_model


def test_round_trip_gives_identical_predictions(tmp_path, train_file):
    texts, labels = split_texts_and_labels(load_samples(train_file))
    model = build_pipeline('LbfgsLogisticRegressionBinary').fit(texts, labels)
    path = tmp_path / "nested" / "dir" / "model.joblib"

    save_model(model, DatasetSchema(), path, trainer_name='LbfgsLogisticRegressionBinary')
    loaded, schema = load_model(path, expected_schema=DatasetSchema())

    assert schema == DatasetSchema()
    assert list(loaded.predict(texts)) == list(model.predict(texts))


def test_save_overwrites_existing_file(tmp_path, keyword_model):
    path = tmp_path / "model.joblib"
    path.write_bytes(b"old contents")

    save_model(keyword_model, DatasetSchema(), path, metadata={'note': 'x'})

    artifact = load_artifact(path)
    assert artifact['format_version'] == ARTIFACT_FORMAT_VERSION
    assert artifact['metadata'] == {'note': 'x'}
    assert [p.name for p in tmp_path.iterdir()] == ['model.joblib']


def test_missing_file_raises_model_load_error(tmp_path):
    with pytest.raises(ModelLoadError, match="not found"):
        load_model(tmp_path / "absent.joblib")


def test_corrupt_file_raises_model_load_error(tmp_path):
    path = tmp_path / "corrupt.joblib"
    path.write_bytes(b"definitely not a pickle")

    with pytest.raises(ModelLoadError):
        load_model(path)


def test_foreign_object_raises_model_load_error(tmp_path):
    path = tmp_path / "foreign.joblib"
    joblib.dump([1, 2, 3], path)

    with pytest.raises(ModelLoadError, match="Not a model artifact"):
        load_model(path)


def test_unsupported_version_raises_model_load_error(tmp_path, keyword_model):
    path = tmp_path / "future.joblib"
    joblib.dump({'format_version': 99, 'model': keyword_model, 'schema': DatasetSchema().to_dict()}, path)

    with pytest.raises(ModelLoadError, match="format version"):
        load_model(path)


def test_schema_mismatch_raises_model_load_error(tmp_path, keyword_model):
    path = tmp_path / "model.joblib"
    save_model(keyword_model, DatasetSchema(text_column='Comment'), path)

    with pytest.raises(ModelLoadError, match="does not match"):
        load_model(path, expected_schema=DatasetSchema())
