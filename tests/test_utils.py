import json
import logging
import logging.handlers

import pytest

from utils import load_config, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_load_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({'particles': {'count': 3}}))
    assert load_config(str(path)) == {'particles': {'count': 3}}


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.json"))


def test_load_config_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(json.JSONDecodeError):
        load_config(str(path))


def test_load_config_requires_an_object(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_setup_logging_writes_to_a_rotating_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "motion.log"
    config = {'logging': {'level': 'debug', 'log_file': str(log_file)}}
    setup_logging(config)
    setup_logging(config)

    root = restore_root_logger
    file_handlers = [h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert len(root.handlers) == 2
    assert root.level == logging.DEBUG

    logging.info("hello from the test")
    file_handlers[0].flush()
    assert "hello from the test" in log_file.read_text()


def test_setup_logging_without_file(restore_root_logger):
    setup_logging({'logging': {'log_file': ''}})
    root = restore_root_logger
    assert len(root.handlers) == 1
    assert not isinstance(root.handlers[0], logging.FileHandler)
    assert root.level == logging.INFO
