import json
import logging

import pytest

import logger_setup


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "run_id": "test_run",
        "logging": {"level": "DEBUG", "format": "%(levelname)s - %(message)s"},
    }))
    return path


@pytest.fixture
def app_logger():
    yield logging.getLogger("cradle_sim")
    logger = logging.getLogger("cradle_sim")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


def test_setup_writes_run_log(tmp_path, config_file, app_logger):
    logger = logger_setup.setup_logging(str(config_file), runs_dir=str(tmp_path / "runs"))

    assert logger is app_logger
    assert not logger.propagate
    assert logger.level == logging.DEBUG
    logger.info("hello cradle")
    for handler in logger.handlers:
        handler.flush()

    log_file = tmp_path / "runs" / "test_run" / "simulation.log"
    assert log_file.exists()
    assert "INFO - hello cradle" in log_file.read_text()


def test_setup_twice_does_not_duplicate_handlers(tmp_path, config_file, app_logger):
    logger_setup.setup_logging(str(config_file), runs_dir=str(tmp_path / "runs"))
    logger = logger_setup.setup_logging(str(config_file), runs_dir=str(tmp_path / "runs"))
    assert len(logger.handlers) == 2
