# utils.py
"""
Utility functions for the animation framework.

This module provides helper functions, such as logging setup and config
loading, that are used across different parts of the application but do not
belong to a specific domain like kinematics or rendering.
"""
import logging
import logging.handlers
import json
import os
from typing import Dict, Any

import numpy as np

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary whose optional "logging" section may hold
#       "level", "format", "log_file", "max_bytes", "backup_count",
#       "console" and "quiet_level".
#   - Side Effects: Replaces the root logger's handlers with a rotating
#     file handler and, unless "console" is false, a console handler.
#     Creates the log directory. Caps numba and sounddevice loggers at
#     "quiet_level" so a DEBUG run only shows this application's output.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed JSON document.
#   - Raises: FileNotFoundError, json.JSONDecodeError (logged first).
#
# clamp(value, low, high):
#   - Works on Python floats and NumPy arrays alike.

NOISY_LOGGERS = ("numba", "sounddevice")


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Routes the root logger to a size-rotated log file and the console.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', '%(asctime)s - %(levelname)s - %(message)s')
    log_file_path = log_config.get('log_file', 'logs/particles.log')
    max_bytes = int(log_config.get('max_bytes', 1024 * 1024))
    backup_count = int(log_config.get('backup_count', 5))
    quiet_level = log_config.get('quiet_level', 'WARNING').upper()

    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    formatter = logging.Formatter(log_format)
    handlers = [logging.handlers.RotatingFileHandler(
        log_file_path, maxBytes=max_bytes, backupCount=backup_count
    )]
    if log_config.get('console', True):
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # The jit compiler logs every pass at DEBUG.
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    logging.info(
        f"Logging at {log_level} to {log_file_path} "
        f"(rotating at {max_bytes} bytes, {backup_count} backups)."
    )

def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise
    logging.info(f"Configuration loaded with sections: {', '.join(sorted(config))}.")
    return config

def clamp(value, low, high):
    """Clamps a scalar or an array into [low, high]."""
    if isinstance(value, np.ndarray):
        return np.clip(value, low, high)
    return max(low, min(high, value))
