import pytest

from autosentiment.data_loader import (
    DatasetSchema, Sample, SimpleTokenizer, TextDataset, load_samples, parse_label, preview,
)
from autosentiment.exceptions import SchemaError

from conftest import TRAIN_ROWS, write_tsv


def test_load_samples_reads_text_and_boolean_labels(train_file):
    samples = load_samples(train_file)

    assert len(samples) == len(TRAIN_ROWS)
    assert samples[0] == Sample(TRAIN_ROWS[0][0], False)
    assert samples[1].label is True


def test_load_samples_without_header(tmp_path):
    path = write_tsv(tmp_path / "plain.tsv", [("hello", "true"), ("bye", "FALSE")], header=None)

    samples = load_samples(path, has_header=False)

    assert samples == [Sample("hello", True), Sample("bye", False)]


def test_empty_text_loads_as_empty_string(tmp_path):
    path = write_tsv(tmp_path / "empty_text.tsv", [("", 1), ("fine", 0)])

    samples = load_samples(path)

    assert samples[0].text == ""
    assert samples[0].label is True


def test_missing_file_raises_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_samples(tmp_path / "missing.tsv")


def test_invalid_label_names_file_and_row(tmp_path):
    path = write_tsv(tmp_path / "bad.tsv", [("ok", 1), ("not ok", "maybe")])

    with pytest.raises(SchemaError) as excinfo:
        load_samples(path)

    assert excinfo.value.row == 3
    assert str(path) in str(excinfo.value)


def test_missing_label_is_schema_error(tmp_path):
    path = tmp_path / "short.tsv"
    path.write_text("Text\tLabel\nfirst\t1\nsecond only\n", encoding="utf-8")

    with pytest.raises(SchemaError):
        load_samples(path)


def test_single_column_file_is_schema_error(tmp_path):
    path = tmp_path / "one_column.tsv"
    path.write_text("Text\nhello\n", encoding="utf-8")

    with pytest.raises(SchemaError, match="columns"):
        load_samples(path)


def test_empty_file_is_schema_error(tmp_path):
    path = tmp_path / "empty.tsv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(SchemaError):
        load_samples(path)


@pytest.mark.parametrize("value, expected", [
    ("true", True), ("False", False), ("1", True), ("0", False), (" TRUE ", True),
])
def test_parse_label_literals(value, expected):
    assert parse_label(value) is expected


def test_parse_label_rejects_other_values():
    with pytest.raises(ValueError):
        parse_label("2")


def test_preview_returns_first_rows(train_file):
    samples = load_samples(train_file)

    assert preview(samples, 4) == samples[:4]
    assert preview(samples[:2], 4) == samples[:2]


def test_schema_round_trips_through_dict():
    schema = DatasetSchema(text_column='Comment', label_column='Toxic')

    assert DatasetSchema.from_dict(schema.to_dict()) == schema
    assert schema.to_dict()['label_type'] == 'bool'


def test_tokenizer_encodes_with_padding_and_unknowns():
    tokenizer = SimpleTokenizer()
    tokenizer.build_vocabulary(["a rude movie", "a nice movie"])

    ids = tokenizer.encode("A rude, unseen movie", max_length=8)

    assert len(ids) == 8
    assert ids[0] == tokenizer.token_to_id['a']
    assert 1 in ids
    assert ids[-1] == 0


def test_tokenizer_requires_vocabulary():
    with pytest.raises(ValueError):
        SimpleTokenizer().encode("text", max_length=4)


def test_text_dataset_items():
    tokenizer = SimpleTokenizer()
    tokenizer.build_vocabulary(["good edit", "bad edit"])
    dataset = TextDataset(["good edit"], [1], tokenizer, max_length=4)

    item = dataset[0]

    assert len(dataset) == 1
    assert item['input_ids'].tolist()[2:] == [0, 0]
    assert item['attention_mask'].tolist() == [1, 1, 0, 0]
    assert item['labels'].item() == 1


def test_loading_leaves_working_directory_untouched(train_file, tmp_path, monkeypatch):
    workdir = tmp_path / "workdir"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    load_samples(train_file)

    assert list(workdir.iterdir()) == []
