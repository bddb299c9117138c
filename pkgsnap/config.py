#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import toml
import yaml

# Configure logging
stderr_handler = logging.StreamHandler(sys.stderr)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[stderr_handler]
)
logger = logging.getLogger("pkgsnap")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']
ENV_PREFIX = 'PKGSNAP_'

TRUE_VALUES = {'true', 'yes', 'on', '1'}
FALSE_VALUES = {'false', 'no', 'off', '0'}


def get_config_path(config_path=None):
    """Get the path to the configuration file.

    Checks in order:
    1. An explicit path argument
    2. PKGSNAP_CONFIG environment variable
    3. ~/.pkgsnap/ directory
    """
    if config_path:
        return Path(config_path).expanduser()

    override = os.environ.get('PKGSNAP_CONFIG')
    if override and Path(override).expanduser().exists():
        return Path(override).expanduser()

    pkgsnap_dir = Path.home() / '.pkgsnap'
    for filename in CONFIG_FILENAMES:
        candidate = pkgsnap_dir / filename
        if candidate.exists() and candidate.stat().st_size > 0:
            return candidate

    # Nothing on disk yet; this is where save_config writes
    return pkgsnap_dir / 'config.json'


def _file_format(path):
    suffix = path.suffix.lower()
    if suffix == '.toml':
        return 'toml'
    if suffix in ('.yaml', '.yml'):
        return 'yaml'
    return 'json'


def _read_config_file(path):
    fmt = _file_format(path)
    if fmt == 'toml':
        with open(path, 'rb') as f:
            data = tomllib.load(f)
    else:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) if fmt == 'yaml' else json.load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"expected a mapping at the top level, got {type(data).__name__}")
    return data


def load_config(config_path=None):
    """
    Build the effective configuration.

    Defaults are overlaid with the config file, if there is one, and then
    with PKGSNAP_<SECTION>_<KEY> environment variables. A file that cannot
    be read or parsed is logged and ignored.
    """
    path = get_config_path(config_path)
    config = get_default_config()

    if path.exists():
        try:
            config = merge_configs(config, _read_config_file(path))
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Ignoring config {path}: {e}")

    return apply_env_overrides(config)


def save_config(config, config_path=None):
    """Write ``config`` in the format its file suffix names and return the path."""
    path = get_config_path(config_path)
    fmt = _file_format(path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            if fmt == 'toml':
                toml.dump(config, f)
            elif fmt == 'yaml':
                yaml.safe_dump(config, f, default_flow_style=False)
            else:
                json.dump(config, f, indent=2)
    except OSError as e:
        logger.error(f"Could not write config {path}: {e}")
        raise

    logger.debug(f"Configuration saved to {path}")
    return path


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "package_directory": "~/.pkgsnap/packages",
            "auto_commit": True
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        }
    }


def configure_logging(config):
    """Apply the ``logging`` section: level on the pkgsnap logger, format on stderr."""
    settings = config.get("logging", {})
    level = getattr(logging, str(settings.get("level", "INFO")).upper(), logging.INFO)
    logger.setLevel(level)

    fmt = settings.get("format")
    if fmt:
        stderr_handler.setFormatter(logging.Formatter(fmt))


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Nested sections are merged key by key; anything else in
    ``override_config`` replaces the base value.
    """
    merged = dict(base_config)
    for key, value in override_config.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_configs(current, value)
        else:
            merged[key] = value
    return merged


def _coerce(value):
    lowered = value.lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    if value.isdigit():
        return int(value)
    return value


def apply_env_overrides(config):
    """
    Override known settings from PKGSNAP_<SECTION>_<KEY> variables.

    Only keys already present in a section are looked up, so underscores
    inside key names need no escaping: PKGSNAP_GENERAL_PACKAGE_DIRECTORY
    sets ``general.package_directory``.
    """
    for section, values in config.items():
        if not isinstance(values, dict):
            continue
        for key in values:
            env_key = f"{ENV_PREFIX}{section}_{key}".upper()
            if env_key in os.environ:
                values[key] = _coerce(os.environ[env_key])
    return config
