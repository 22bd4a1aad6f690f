import json
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "max_steps": 10_000,
    "max_generations": 64,
    "window_width": 15,
    "blank": "_",
    "log_level": "WARNING",
    "merge_duplicates": True,
    "step_delay": 0.3,
}

# Expected types for validation
CONFIG_SCHEMA = {
    "max_steps": int,
    "max_generations": int,
    "window_width": int,
    "blank": str,
    "log_level": str,
    "merge_duplicates": bool,
    "step_delay": (int, float),
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def validate_config(config):
    for key, expected_type in CONFIG_SCHEMA.items():
        if key not in config:
            raise ValueError(f"Missing required configuration key: {key}")
        value = config[key]
        # bool is an int subclass; only accept it where a bool is expected
        if not isinstance(value, expected_type) or (isinstance(value, bool) and expected_type is not bool):
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(value)}.")

    for key in ("max_steps", "max_generations"):
        if config[key] < 0:
            raise ValueError(f"Config key '{key}' must not be negative.")
    if config["window_width"] < 1:
        raise ValueError("Config key 'window_width' must be at least 1.")
    if config["step_delay"] < 0:
        raise ValueError("Config key 'step_delay' must not be negative.")
    if config["log_level"].upper() not in LOG_LEVELS:
        raise ValueError(f"Config key 'log_level' must be one of {', '.join(LOG_LEVELS)}.")


def load_config(path=None):
    """Return the defaults merged with the JSON file at ``path``, validated."""
    config = DEFAULT_CONFIG.copy()
    if path is None:
        return config

    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        user_config = json.load(f)
    if not isinstance(user_config, dict):
        raise TypeError(f"Configuration file {path} must contain a JSON object.")

    # Merge defaults with overrides
    config.update(user_config)
    validate_config(config)

    logger.debug("Loaded config from %s: %s", path, config)
    return config
