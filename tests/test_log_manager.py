import json
import logging
import os
import time

from autosentiment.config import Config
from autosentiment.log_manager import clean_old_logs, get_log_stats, setup_logging_from_config
from autosentiment.utils import LOG_FILENAME, ROOT_LOGGER_NAME, format_time, save_json, setup_logger


def test_log_stats_for_missing_directory(tmp_path):
    assert get_log_stats(tmp_path / "none") == {"total_files": 0, "total_size_mb": 0, "files": []}


def test_log_stats_counts_files(tmp_path):
    (tmp_path / LOG_FILENAME).write_text("line\n")
    (tmp_path / f"{LOG_FILENAME}.1").write_text("older\n")

    stats = get_log_stats(tmp_path)

    assert stats["total_files"] == 2
    assert {entry["name"] for entry in stats["files"]} == {LOG_FILENAME, f"{LOG_FILENAME}.1"}


def test_clean_old_logs_keeps_active_file(tmp_path):
    active = tmp_path / LOG_FILENAME
    rotated = tmp_path / f"{LOG_FILENAME}.1"
    active.write_text("current\n")
    rotated.write_text("old\n")

    assert clean_old_logs(tmp_path) == 1
    assert active.exists()
    assert not rotated.exists()


def test_clean_old_logs_respects_age(tmp_path):
    recent = tmp_path / f"{LOG_FILENAME}.1"
    old = tmp_path / f"{LOG_FILENAME}.2"
    recent.write_text("recent\n")
    old.write_text("old\n")
    ten_days_ago = time.time() - 10 * 24 * 3600
    os.utime(old, (ten_days_ago, ten_days_ago))

    assert clean_old_logs(tmp_path, days=7) == 1
    assert recent.exists()
    assert not old.exists()


def test_save_json_creates_parents(tmp_path):
    path = tmp_path / "a" / "b" / "result.json"

    save_json({'value': 1.5, 'path': tmp_path}, path)

    assert json.loads(path.read_text(encoding="utf-8")) == {'value': 1.5, 'path': str(tmp_path)}


def test_format_time():
    assert format_time(5) == "5s"
    assert format_time(125) == "2m 5s"
    assert format_time(3725) == "1h 2m 5s"


def _config(log_dir, level):
    return Config.from_dict({
        'data': {'train_path': 'train.tsv', 'test_path': 'test.tsv'},
        'output': {'model_path': 'models/model.joblib'},
        'logging': {'log_dir': str(log_dir), 'console_level': level},
    })


def test_setup_logging_from_config_replaces_handlers(tmp_path):
    setup_logging_from_config(_config(tmp_path / "first", 'INFO'))
    logger = setup_logging_from_config(_config(tmp_path / "second", 'WARNING'))

    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    console_handlers = [h for h in logger.handlers if not isinstance(h, logging.FileHandler)]
    assert len(logger.handlers) == 2
    assert file_handlers[0].baseFilename == str(tmp_path / "second" / LOG_FILENAME)
    assert console_handlers[0].level == logging.WARNING


def test_module_logger_does_not_configure_package(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    logger = setup_logger(f"{ROOT_LOGGER_NAME}.something")

    assert logger.handlers == []
    assert not (tmp_path / "logs").exists()
