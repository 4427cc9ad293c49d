#!/usr/bin/env python3

import os
import json
import tomllib
import logging
import sys
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .domain.changelog import NEWEST_FIRST, ORDERS
from .domain.record import DEFAULT_DELIMITER, check_delimiter
from .exit_codes import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ['.gitlogjson.toml', '.gitlogjson.json', '.gitlogjson.yaml', '.gitlogjson.yml']
ENV_PREFIX = "GITLOGJSON_"


def configure_logging(debug: bool = False) -> None:
    """Send log records to stderr, keeping stdout free for the document."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[logging.StreamHandler(sys.stderr)]
        )
    else:
        logging.basicConfig(
            level=logging.INFO,
            format="%(levelname)s: %(message)s",
            handlers=[logging.StreamHandler(sys.stderr)]
        )


@dataclass(frozen=True)
class ChangelogConfig:
    """
    Options for one changelog run.

    Attributes:
        short_hash: Abbreviated commit ids (%h) instead of full ones (%H)
        dest: Output path, or "-" for stdout
        filter: Optional glob; only matching tags are used
        pretty: Indent the JSON document
        order: "newest-first" or "oldest-first"
        delimiter: Field separator requested from git log
        timeout: Seconds allowed for each git invocation
        repo: Repository working directory
        git: git executable
    """
    short_hash: bool = False
    dest: str = "changelog.json"
    filter: Optional[str] = None
    pretty: bool = False
    order: str = NEWEST_FIRST
    delimiter: str = DEFAULT_DELIMITER
    timeout: float = 30
    repo: str = "."
    git: str = "git"

    def __post_init__(self):
        self.validate()

    @property
    def newest_first(self) -> bool:
        return self.order == NEWEST_FIRST

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChangelogConfig':
        """
        Build a config from a flat mapping, validating every value.

        Raises:
            ConfigError: on unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        return cls(**data)

    def validate(self) -> None:
        for name in ('short_hash', 'pretty'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false, got {getattr(self, name)!r}")
        if self.order not in ORDERS:
            raise ConfigError(f"order must be one of {', '.join(ORDERS)}, got {self.order!r}")
        try:
            check_delimiter(self.delimiter)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or not self.timeout > 0:
            raise ConfigError(f"timeout must be a positive number of seconds, got {self.timeout!r}")
        if not self.dest:
            raise ConfigError("dest must not be empty")
        if self.filter is not None and not isinstance(self.filter, str):
            raise ConfigError(f"filter must be a string, got {self.filter!r}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return ChangelogConfig().to_dict()


def get_config_path(repo: str = ".", explicit: Optional[str] = None) -> Optional[Path]:
    """Get the path to the configuration file.

    Checks in order:
    1. An explicit path (the --config option)
    2. GITLOGJSON_CONFIG environment variable
    3. .gitlogjson.{toml,json,yaml,yml} in the repository
    """
    if explicit:
        path = Path(explicit).expanduser()
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        return path

    # Check for environment variable override
    if 'GITLOGJSON_CONFIG' in os.environ:
        path = Path(os.environ['GITLOGJSON_CONFIG']).expanduser()
        if path.exists():
            return path
        logger.warning(f"GITLOGJSON_CONFIG points to a missing file: {path}")

    repo_dir = Path(repo).expanduser()
    for filename in CONFIG_FILENAMES:
        path = repo_dir / filename
        if path.exists():
            return path

    return None


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {str(key).replace('-', '_'): value for key, value in data.items()}


def read_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Read a configuration file in TOML, YAML or JSON format.

    Settings may sit at the top level or under a "gitlogjson" table.
    """
    try:
        if config_path.suffix.lower() in ['.toml']:
            with open(config_path, 'rb') as f:
                file_config = tomllib.load(f)
        elif config_path.suffix.lower() in ['.yaml', '.yml']:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f)
        else:
            # Default to JSON format
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e

    if file_config is None:
        return {}
    if not isinstance(file_config, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    if isinstance(file_config.get('gitlogjson'), dict):
        file_config = file_config['gitlogjson']

    logger.debug(f"Loaded configuration from {config_path}")
    return _normalize_keys(file_config)


def merge_configs(base_config, override_config):
    """
    Merge two flat configuration dictionaries.

    None values in the override leave the base value in place, so unset
    command-line options do not clobber file settings.
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if value is None:
            continue
        merged[key] = value

    return merged


def _typed_env_value(value: str) -> Any:
    if value.lower() in ('true', 'yes', 'on'):
        return True
    elif value.lower() in ('false', 'no', 'off'):
        return False
    elif value.isdigit():
        return int(value)
    return value


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: GITLOGJSON_KEY
    For example: GITLOGJSON_SHORT_HASH=true
    """
    overridden = dict(config)
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == 'GITLOGJSON_CONFIG':
            continue

        key = env_key[len(ENV_PREFIX):].lower()
        if key not in config:
            logger.debug(f"Ignoring unknown environment setting {env_key}")
            continue

        if key in ('short_hash', 'pretty'):
            typed = _typed_env_value(value)
            # "1"/"0" are digits, but mean on/off here
            overridden[key] = bool(typed) if isinstance(typed, int) else typed
        elif key == 'timeout':
            try:
                overridden[key] = float(value)
            except ValueError as e:
                raise ConfigError(f"{env_key} must be a number of seconds, got {value!r}") from e
        elif key == 'repo':
            # Resolved by load_config before the config file is looked up
            continue
        else:
            overridden[key] = value

    return overridden


def load_config(
    repo: Optional[str] = None,
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ChangelogConfig:
    """
    Load configuration: defaults, then file, then environment, then overrides.

    Args:
        repo: Repository directory (GITLOGJSON_REPO, then ".", if None);
            it is also where the config file is searched for
        config_path: Explicit config file path
        overrides: Values from the command line (None means unset)

    Returns:
        Validated ChangelogConfig
    """
    if repo is None:
        repo = os.environ.get(f"{ENV_PREFIX}REPO", ".")

    config = get_default_config()

    path = get_config_path(repo, config_path)
    if path is not None:
        config = merge_configs(config, read_config_file(path))

    config = apply_env_overrides(config)

    if overrides:
        config = merge_configs(config, overrides)

    config['repo'] = repo
    return ChangelogConfig.from_dict(config)
