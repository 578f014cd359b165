"""
Configuration Loader for Fusion Service

This module loads configuration from JSON file and provides fallback defaults.
"""

import copy
import json
import os
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# Default configuration (used as fallback)
DEFAULT_CONFIG = {
    "fusion_weights": {
        "facial_high_confidence": 0.5,
        "facial_low_confidence": 0.3,
        "facial_confidence_threshold": 0.6,
        "voice": 0.3,
        "text": 0.2
    },
    "fallback": {
        "emotion": "Neutral",
        "confidence": 0.5
    },
    "default_strategy": "weighted",
    "facial_aggregation": {
        "frame_count": 5,
        "interval_ms": 200
    },
    "classifier_service_urls": {
        "voice": "http://localhost:8011",
        "text": "http://localhost:8012"
    },
    "classifier_timeout_seconds": 10.0
}

# Cache for loaded config
_config_cache: Optional[Dict[str, Any]] = None


def _merge_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill keys missing from a loaded config with default values (one level deep)."""
    merged = copy.deepcopy(DEFAULT_CONFIG)
    for key, value in config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to config file. If None, uses FUSION_CONFIG_PATH or
            config.json next to this module.

    Returns:
        Configuration dictionary. Returns default config if file not found or invalid.
    """
    global _config_cache

    # Return cached config if available
    if _config_cache is not None and config_path is None:
        return _config_cache

    # Determine config file path
    if config_path is None:
        config_path = os.getenv("FUSION_CONFIG_PATH")
    if config_path is None:
        module_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(module_dir, "config.json")

    try:
        if os.path.exists(config_path):
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                config = _merge_defaults(loaded)
                logger.info(f"Loaded configuration from {config_path}")
            else:
                logger.error(
                    f"Config file {config_path} must contain a JSON object, got "
                    f"{type(loaded).__name__}. Using default configuration."
                )
                config = copy.deepcopy(DEFAULT_CONFIG)
        else:
            logger.warning(f"Config file not found at {config_path}, using default configuration")
            config = copy.deepcopy(DEFAULT_CONFIG)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in config file {config_path}: {e}. Using default configuration.")
        config = copy.deepcopy(DEFAULT_CONFIG)
    except OSError as e:
        logger.error(f"Error loading config file {config_path}: {e}. Using default configuration.")
        config = copy.deepcopy(DEFAULT_CONFIG)

    _config_cache = config
    return config


def clear_config_cache() -> None:
    """Drop the cached configuration so the next load_config() re-reads it."""
    global _config_cache
    _config_cache = None
