import logging
import os
import yaml

DEFAULT_CONFIG = {
    "default_host": "localhost",
    "default_port": 5000,
    "connect_timeout": None,   # None = platform default
    "log_level": "WARNING",
    "log_file": None,
}


class ConfigError(Exception):
    pass


def load_config(path):
    """
    Load settings from a YAML file, falling back to DEFAULT_CONFIG for
    anything the file doesn't set. A missing file is not an error.
    """
    config = dict(DEFAULT_CONFIG)
    if not path or not os.path.exists(path):
        return config
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")

    unknown = set(data) - set(DEFAULT_CONFIG)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
    config.update(data)
    validate_config(config)
    return config


def validate_config(config):
    port = config["default_port"]
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ConfigError(f"default_port must be an integer in 1-65535, got {port!r}")
    if not isinstance(config["default_host"], str) or not config["default_host"].strip():
        raise ConfigError("default_host must be a non-empty string")
    timeout = config["connect_timeout"]
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"connect_timeout must be a positive number or null, got {timeout!r}")
    level = config["log_level"]
    # getLevelName maps known names to ints and anything else to "Level X"
    if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
        raise ConfigError(f"log_level must be a level name such as DEBUG or WARNING, got {level!r}")
