#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import logging
import sys

import toml
import yaml

from .domain.repository import RepositoryConfig
from .exit_codes import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("gitscm")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. GITSCM_CONFIG environment variable
    2. ~/.gitscm/config.{json,toml,yaml,yml}
    """
    if os.environ.get('GITSCM_CONFIG'):
        return Path(os.environ['GITSCM_CONFIG']).expanduser()

    gitscm_dir = Path.home() / '.gitscm'
    for filename in CONFIG_FILENAMES:
        path = gitscm_dir / filename
        if path.exists() and path.stat().st_size > 2:  # Not empty/trivial
            return path

    # If no file exists, return default path for saving
    return gitscm_dir / 'config.json'


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ('.yaml', '.yml'):
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config(config_path: Optional[Path] = None):
    """Load configuration from file.

    Defaults are overlaid with the config file and then with GITSCM_*
    environment variables. An unreadable file is logged and ignored.
    """
    config_path = Path(config_path) if config_path else get_config_path()

    config = get_default_config()

    if config_path.exists():
        try:
            file_config = _read_config_file(config_path)
            if not isinstance(file_config, dict):
                raise ValueError("top level must be a mapping")
            config = merge_configs(config, file_config)
        except Exception as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    return apply_env_overrides(config)


def save_config(config, config_path: Optional[Path] = None):
    """Save configuration to file."""
    config_path = Path(config_path) if config_path else get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        suffix = config_path.suffix.lower()
        if suffix == '.toml':
            with open(config_path, 'w') as f:
                toml.dump(config, f)
        elif suffix in ('.yaml', '.yml'):
            with open(config_path, 'w') as f:
                yaml.safe_dump(config, f, default_flow_style=False)
        else:
            with open(config_path, 'w') as f:
                json.dump(config, f, indent=2)

        logger.info(f"Configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Error saving config to {config_path}: {e}")
        raise


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "state_directory": "~/.gitscm",
            "workspace_root": "~/.gitscm/workspaces",
        },
        "git": {
            "executable": "git",
            "timeout_seconds": 600,
            "remote": "origin",
            "user_name": "gitscm",
            "user_email": "gitscm@localhost",
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        },
        # Default values of build parameters referenced by branch names
        "parameters": {},
        "projects": {},
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: GITSCM_SECTION_KEY
    For example: GITSCM_GIT_TIMEOUT_SECONDS=120
    """
    env_prefix = "GITSCM_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == "GITSCM_CONFIG":
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if isinstance(current_level[matched_key], dict):
                current_level = current_level[matched_key]
                i += best_match_len
            else:
                # Path conflict: env var is longer than the config path
                break

    return config


def configure_logging(config) -> None:
    """Apply the configured log level and format to the gitscm logger."""
    settings = config.get("logging", {})
    level = str(settings.get("level", "INFO")).upper()
    logger.setLevel(getattr(logging, level, logging.INFO))
    fmt = settings.get("format")
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))


def get_project_config(config, project: str) -> RepositoryConfig:
    """
    Repository configuration of ``project``.

    Raises:
        ConfigError: if the project is unknown or incompletely configured
    """
    projects = config.get("projects") or {}
    data = projects.get(project)
    if data is None:
        known = ", ".join(sorted(projects)) or "none"
        raise ConfigError(f"Unknown project '{project}' (configured: {known})")
    if not isinstance(data, dict) or not data.get("source"):
        raise ConfigError(f"Project '{project}' has no source repository configured")
    if data.get("merge") and not data.get("merge_target"):
        raise ConfigError(f"Project '{project}' enables merging but sets no merge_target")
    return RepositoryConfig.from_dict(data)


def get_state_directory(config) -> Path:
    return Path(config.get("general", {}).get("state_directory", "~/.gitscm")).expanduser()


def get_workspace(config, project: str, override: Optional[str] = None) -> Path:
    """Workspace directory of ``project``: explicit, per-project, or under workspace_root."""
    if override:
        return Path(override).expanduser()
    data = (config.get("projects") or {}).get(project) or {}
    if data.get("workspace"):
        return Path(data["workspace"]).expanduser()
    root = config.get("general", {}).get("workspace_root", "~/.gitscm/workspaces")
    return Path(root).expanduser() / project
