# utils.py
"""
Application plumbing shared by the runners: logging setup and reading
and writing JSON config files. Nothing here knows about particles.
"""
import logging
import logging.handlers
import json
import os
from typing import Dict, Any, Optional

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any], level: Optional[str] = None) -> None:
#   - Inputs:
#     - config: the full app config; only its "logging" section is read
#       ("level", "format", "log_file", "max_bytes", "backup_count").
#     - level: overrides the configured level when given (e.g. from the CLI).
#   - Side Effects: Replaces the root logger's handlers with a console
#     handler and a rotating file handler. Creates the log directory.
#     Caps numba's own logger at WARNING.
#
# load_config(path: str) -> Dict[str, Any]
#   - Raises: FileNotFoundError or json.JSONDecodeError, after logging.
#
# save_config(path: str, config: Dict[str, Any]) -> str
#   - Side Effects: Writes indented JSON, creating the parent directory.
#   - Outputs: the written path.

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = 'logs/followers.log'
NOISY_LOGGERS = ('numba',)


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def setup_logging(config: Dict[str, Any], level: Optional[str] = None) -> None:
    """
    Routes the root logger to the console and to a rotating log file.
    """
    log_config = config.get('logging', {})
    log_level = (level or log_config.get('level', 'INFO')).upper()
    formatter = logging.Formatter(log_config.get('format', DEFAULT_LOG_FORMAT))
    log_file_path = log_config.get('log_file', DEFAULT_LOG_FILE)
    _ensure_parent_dir(log_file_path)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=log_config.get('max_bytes', 1024 * 1024),
            backupCount=log_config.get('backup_count', 5),
        ),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"Logging to console and {log_file_path} at level {log_level}.")


def load_config(path: str) -> Dict[str, Any]:
    """Reads a JSON config file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"Error decoding JSON from {path}: {e}")
        raise
    logging.debug(f"Configuration sections: {sorted(config)}")
    return config


def save_config(path: str, config: Dict[str, Any]) -> str:
    """Writes a config dictionary as indented JSON."""
    _ensure_parent_dir(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)
        f.write('\n')
    logging.info(f"Configuration saved to {path}.")
    return path
