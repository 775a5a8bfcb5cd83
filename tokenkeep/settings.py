import copy
import os

import structlog
import yaml

from tokenkeep.constants import CONFIG_FILE, DEFAULT_SETTINGS

logger = structlog.get_logger("settings")


# Cache variable
_cached_settings = None


def _merge_defaults(settings):
    # Deep merge with defaults so new sections are always present
    merged_settings = copy.deepcopy(DEFAULT_SETTINGS)
    for section, values in (settings or {}).items():
        if isinstance(values, dict) and isinstance(merged_settings.get(section), dict):
            merged_settings[section].update(values)
        else:
            merged_settings[section] = values
    return merged_settings


def _apply_environment(settings):
    database_uri = os.environ.get("TOKENKEEP_DATABASE_URI")
    if database_uri:
        settings["database"]["uri"] = database_uri
    log_format = os.environ.get("LOG_FORMAT")
    if log_format:
        settings["logging"]["format"] = log_format
    return settings


def load_settings(config_file=None, force=False):
    global _cached_settings

    if _cached_settings and not force and config_file is None:
        return _cached_settings

    config_file = config_file or CONFIG_FILE
    if os.path.exists(config_file):
        logger.debug("Reading configuration file", path=config_file)
        with open(config_file, "r") as yaml_file:
            settings = _merge_defaults(yaml.safe_load(yaml_file) or {})
    else:
        settings = copy.deepcopy(DEFAULT_SETTINGS)

    settings = _apply_environment(settings)
    _cached_settings = settings
    return settings


def save_settings(settings, config_file=None):
    config_file = config_file or CONFIG_FILE
    os.makedirs(os.path.dirname(config_file) or ".", exist_ok=True)
    with open(config_file, "w") as yaml_file:
        yaml.dump(settings, yaml_file)
    reload_conf(config_file)


def set_token_settings(secret_bytes=None, max_secret_attempts=None, config_file=None):
    settings = load_settings(config_file)
    if secret_bytes is not None:
        if int(secret_bytes) < 8:
            raise ValueError("secret_bytes must be at least 8")
        settings["tokens"]["secret_bytes"] = int(secret_bytes)
    if max_secret_attempts is not None:
        if int(max_secret_attempts) < 1:
            raise ValueError("max_secret_attempts must be positive")
        settings["tokens"]["max_secret_attempts"] = int(max_secret_attempts)
    save_settings(settings, config_file)
    return settings


def reload_conf(config_file=None):
    """Reload application settings cache"""
    global _cached_settings
    _cached_settings = None
    return load_settings(config_file, force=True)
