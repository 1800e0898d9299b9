#!/usr/bin/env python3

import os
import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import logging
import sys

import yaml

from .domain import RepositoryRef, PathFilter, INCLUDE, REJECT
from .exit_codes import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("ggl")

DEFAULT_CONFIG_NAME = 'config.yaml'


@dataclass(frozen=True)
class Config:
    """Parsed configuration: where the repositories live and which ones to read."""
    root: Path
    repositories: Tuple[RepositoryRef, ...]
    path: Optional[Path] = None


def _user_config_dir() -> Path:
    xdg = os.environ.get('XDG_CONFIG_HOME')
    if xdg:
        return Path(xdg)
    return Path.home() / '.config'


def get_config_path(explicit: Optional[str] = None) -> Path:
    """Get the path to the configuration file.

    Checks in order:
    1. The --config flag
    2. GGL_CONFIG environment variable
    3. config.yaml in the current directory
    4. $XDG_CONFIG_HOME/ggl.yaml (~/.config/ggl.yaml)
    """
    if explicit:
        path = Path(explicit).expanduser()
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        return path

    candidates: List[Path] = []
    if 'GGL_CONFIG' in os.environ:
        candidates.append(Path(os.environ['GGL_CONFIG']).expanduser())
    candidates.append(Path(DEFAULT_CONFIG_NAME))
    candidates.append(_user_config_dir() / 'ggl.yaml')

    for path in candidates:
        if path.exists():
            logger.debug(f"Using config from {path}")
            return path

    tried = ", ".join(str(p) for p in candidates)
    raise ConfigError(f"No config file found (tried: {tried})")


def read_config_file(config_path: Path) -> Dict[str, Any]:
    """Read a YAML, TOML or JSON configuration file into a dict."""
    try:
        if config_path.suffix.lower() in ['.toml']:
            with open(config_path, 'rb') as f:
                file_config = tomllib.load(f)
        elif config_path.suffix.lower() in ['.json']:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
        else:
            # Default to YAML format
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"Malformed config file {config_path}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigError(f"Malformed config file {config_path}: expected a mapping at the top level")
    return file_config


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    GGL_ROOT replaces the `root` directory.
    """
    if os.environ.get('GGL_ROOT'):
        config = dict(config)
        config['root'] = os.environ['GGL_ROOT']
    return config


def _require_str(entry: Dict[str, Any], key: str, where: str, default: Optional[str] = None) -> str:
    value = entry.get(key, default)
    if value is None:
        raise ConfigError(f"{where}: missing required field '{key}'")
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{where}: field '{key}' must be a non-empty string")
    return value


def _parse_filters(raw: Any, where: str) -> Tuple[PathFilter, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ConfigError(f"{where}: 'filters' must be a list")

    filters = []
    for i, item in enumerate(raw):
        item_where = f"{where} filter {i}"
        if not isinstance(item, dict):
            raise ConfigError(f"{item_where}: expected a mapping")
        filter_type = _require_str(item, 'filter_type', item_where).lower()
        if filter_type not in (INCLUDE, REJECT):
            raise ConfigError(f"{item_where}: filter_type must be 'include' or 'reject', got {filter_type!r}")
        paths = item.get('paths') or []
        if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
            raise ConfigError(f"{item_where}: 'paths' must be a list of strings")
        filters.append(PathFilter(filter_type=filter_type, paths=tuple(paths)))
    return tuple(filters)


def parse_repository(entry: Any, index: int) -> RepositoryRef:
    """Validate one entry of the `repositories` list."""
    where = f"repositories[{index}]"
    if not isinstance(entry, dict):
        raise ConfigError(f"{where}: expected a mapping")

    path = _require_str(entry, 'path', where)
    name = _require_str(entry, 'name', where, default=Path(path).name or path)
    where = f"repository '{name}'"

    fetch = entry.get('fetch', False)
    if not isinstance(fetch, bool):
        raise ConfigError(f"{where}: field 'fetch' must be true or false")

    return RepositoryRef(
        name=name,
        path=path,
        remote=_require_str(entry, 'remote', where, default='origin'),
        branch=_require_str(entry, 'branch', where),
        fetch=fetch,
        filters=_parse_filters(entry.get('filters'), where),
    )


def parse_config(data: Dict[str, Any], config_path: Optional[Path] = None) -> Config:
    """Validate a configuration dict and build a Config."""
    root = data.get('root', '.')
    if not isinstance(root, str):
        raise ConfigError("'root' must be a string")

    repositories = data.get('repositories')
    if not isinstance(repositories, list):
        raise ConfigError("'repositories' must be a list of repositories")

    return Config(
        root=Path(root).expanduser(),
        repositories=tuple(parse_repository(entry, i) for i, entry in enumerate(repositories)),
        path=config_path,
    )


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file."""
    path = get_config_path(config_path)
    config = parse_config(apply_env_overrides(read_config_file(path)), config_path=path)
    logger.debug(f"Loaded {len(config.repositories)} repositories from {path}")
    return config
