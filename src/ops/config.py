"""
Configuration loading and validation.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple

import yaml

from detection.roi_filter import is_valid_filter_conditions

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided path (treated as overrides)

    Raises:
        OSError, yaml.YAMLError: If a present config file cannot be read.
    """
    config_dir = os.path.dirname(config_path)
    base_path = os.path.join(config_dir, "default.yaml")
    local_overrides_path = os.path.join(config_dir, "config.yaml")

    try:
        merged: Dict[str, Any] = {}
        if os.path.exists(base_path):
            merged = _read_yaml(base_path)
        if os.path.exists(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        # Finally apply explicit config_path if it's not one of the files above
        explicit = os.path.abspath(config_path)
        if os.path.exists(config_path) and explicit not in (
            os.path.abspath(base_path),
            os.path.abspath(local_overrides_path),
        ):
            merged = _deep_merge(merged, _read_yaml(config_path))
        return merged
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Failed to load configuration: {e}")
        raise


def _is_positive_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and v > 0


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['model', 'inference', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Model descriptor
    model = config.get('model') or {}
    labels = model.get('labels')
    if not isinstance(labels, list) or not labels:
        return False, "model.labels must be a non-empty list"
    if not all(isinstance(x, str) and x for x in labels):
        return False, "model.labels entries must be non-empty strings"
    if len(set(labels)) != len(labels):
        return False, "model.labels must not contain duplicates"

    input_shape = model.get('input_shape', [1, 3, 64, 64])
    if not isinstance(input_shape, list) or len(input_shape) != 4:
        return False, "model.input_shape must be a list of [N, C, H, W]"
    if not all(_is_positive_int(x) for x in input_shape):
        return False, "model.input_shape values must be positive integers"
    if input_shape[1] not in (1, 3):
        return False, "model.input_shape channels must be 1 or 3"

    if 'max_batch_size' in model and not _is_positive_int(model['max_batch_size']):
        return False, "model.max_batch_size must be a positive integer"
    if model.get('path') is not None and not isinstance(model['path'], str):
        return False, "model.path must be a string"

    # Request lifecycle
    inference = config.get('inference') or {}
    backend = inference.get('backend', 'opencv')
    if backend not in ('opencv',):
        return False, "inference.backend must be one of: opencv"
    if not isinstance(inference.get('blocking_fetch', True), bool):
        return False, "inference.blocking_fetch must be a boolean"
    timeout = inference.get('fetch_timeout')
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            return False, "inference.fetch_timeout must be a positive number"
    conditions = inference.get('filter_conditions')
    if conditions is not None and not isinstance(conditions, str):
        return False, "inference.filter_conditions must be a string"
    if conditions and not is_valid_filter_conditions(conditions):
        return False, f"inference.filter_conditions is malformed: {conditions}"

    # Log settings
    if not isinstance(config['log_path'], str):
        return False, "log_path must be a string"
    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None
