# logger_setup.py

import logging
import os
import json


def _replace_handlers(logger: logging.Logger, handlers: list):
    """Closes the logger's current handlers so repeated setup never duplicates output."""
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)


def setup_logging(config_path='config.json', runs_dir='runs'):
    """
    Configures the "cradle_sim" logger from the run configuration.

    Records go to the console and to runs/<run_id>/simulation.log. The logger
    does not propagate, so Numba's compilation chatter and pygame's messages
    on the root logger stay out of the run log.

    Data Contract:
    - Inputs:
        - config_path (str) - JSON file with 'run_id' and a 'logging' section
          holding 'level' and 'format'.
        - runs_dir (str) - Parent directory for per-run log directories.
    - Outputs: logging.Logger - the configured "cradle_sim" logger.
    - Side Effects: Creates runs_dir/<run_id>/ and replaces the logger's handlers.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)

    run_id = config['run_id']
    log_config = config['logging']

    logger = logging.getLogger("cradle_sim")
    logger.setLevel(log_config['level'])
    logger.propagate = False

    run_dir = os.path.join(runs_dir, run_id)
    os.makedirs(run_dir, exist_ok=True)
    log_file = os.path.join(run_dir, 'simulation.log')

    formatter = logging.Formatter(log_config['format'])
    handlers = [logging.FileHandler(log_file), logging.StreamHandler()]
    for handler in handlers:
        handler.setFormatter(formatter)
    _replace_handlers(logger, handlers)

    logger.info(f"Logging to {log_file} (run '{run_id}', level {log_config['level']}).")
    return logger
