"""
Configuration and path management.

Provides site root detection and the site configuration record.
A site is a directory containing an ``inkwell.yaml`` file.

Resolution order for site root:
  1. INKWELL_SITE_ROOT environment variable (highest priority)
  2. Walk up from cwd looking for inkwell.yaml
  3. Global config file (~/.config/inkwell/config.yaml) site_root key
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from inkwell.content.schema import ValidationContext
from inkwell.content.stats import DEFAULT_WORDS_PER_MINUTE
from inkwell.core.errors import ConfigError

SITE_CONFIG_NAME = "inkwell.yaml"
DEFAULT_CONTENT_DIR = "content/posts"


@dataclass(frozen=True)
class SiteConfig:
    """Site settings passed explicitly to everything that needs them."""

    root: Path
    content_dir: Path
    site_url: str = "http://localhost:8000"
    site_name: str = "inkwell"
    author: str = "Anonymous"
    words_per_minute: int = DEFAULT_WORDS_PER_MINUTE
    workers: int = 1
    min_body_length: int = 100
    max_body_length: int = 50_000
    max_tags: int = 10

    def validation_context(self) -> ValidationContext:
        return ValidationContext(
            min_body_length=self.min_body_length,
            max_body_length=self.max_body_length,
            max_tags=self.max_tags,
        )

    def url_for(self, slug: str) -> str:
        """Public URL of a post."""
        return f"{self.site_url.rstrip('/')}/blog/{slug}"


def get_global_config_path() -> Path:
    """Return the path to the global inkwell config file.

    Respects XDG_CONFIG_HOME if set, otherwise defaults to
    ~/.config/inkwell/config.yaml.
    """
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        base = Path(xdg_config_home)
    else:
        base = Path.home() / ".config"
    return base / "inkwell" / "config.yaml"


def load_global_config() -> dict:
    """Load the global inkwell configuration.

    Returns:
        Configuration dict, or empty dict if file is missing or invalid.
    """
    config_path = get_global_config_path()
    if not config_path.is_file():
        return {}
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            return data
        return {}
    except (OSError, yaml.YAMLError):
        return {}


def _walk_up_for_config(start_path: Path) -> Path | None:
    """Walk up the directory tree looking for inkwell.yaml."""
    current = start_path.resolve()
    while True:
        if (current / SITE_CONFIG_NAME).is_file():
            return current
        if current == current.parent:
            return None
        current = current.parent


def find_site_root(start_path: Path | None = None) -> Path:
    """Find the site root using 3-tier resolution.

    Args:
        start_path: Starting path for the walk (defaults to cwd)

    Returns:
        Path to the site root

    Raises:
        FileNotFoundError: If no site root is found by any method
    """
    # Tier 1: INKWELL_SITE_ROOT environment variable
    env_root = os.environ.get("INKWELL_SITE_ROOT")
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if env_path.is_dir():
            return env_path
        raise FileNotFoundError(f"INKWELL_SITE_ROOT={env_root} is not a directory.")

    # Tier 2: Walk up from start_path looking for inkwell.yaml
    if start_path is None:
        start_path = Path.cwd()
    result = _walk_up_for_config(Path(start_path))
    if result is not None:
        return result

    # Tier 3: Global config file
    site_root_str = load_global_config().get("site_root")
    if site_root_str:
        global_path = Path(site_root_str).expanduser().resolve()
        if global_path.is_dir():
            return global_path
        raise FileNotFoundError(
            f"Global config site_root={site_root_str} is not a directory."
        )

    raise FileNotFoundError(
        f"Could not find {SITE_CONFIG_NAME} starting from {start_path}. "
        f"Set INKWELL_SITE_ROOT or configure site_root in {get_global_config_path()}."
    )


@lru_cache(maxsize=1)
def get_site_root() -> Path:
    """Get the cached site root path."""
    return find_site_root()


def _int_setting(data: dict[str, Any], key: str, default: int, minimum: int = 0) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ConfigError(f"'{key}' must be an integer >= {minimum}, got {value!r}")
    return value


def _str_setting(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{key}' must be a non-empty string, got {value!r}")
    return value


def load_site_config(site_root: Path | None = None) -> SiteConfig:
    """Load ``inkwell.yaml`` from the site root.

    A missing file yields the defaults.

    Raises:
        ConfigError: If the file is not valid YAML or holds bad values
    """
    if site_root is None:
        site_root = get_site_root()
    root = Path(site_root)
    config_path = root / SITE_CONFIG_NAME

    data: dict[str, Any] = {}
    if config_path.is_file():
        try:
            loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        data = loaded or {}

    validation = data.get("validation") or {}
    if not isinstance(validation, dict):
        raise ConfigError("'validation' must be a mapping")

    content_dir = Path(_str_setting(data, "content_dir", DEFAULT_CONTENT_DIR)).expanduser()
    if not content_dir.is_absolute():
        content_dir = root / content_dir

    min_body = _int_setting(validation, "min_body_length", 100)
    max_body = _int_setting(validation, "max_body_length", 50_000, minimum=1)
    if min_body > max_body:
        raise ConfigError("'min_body_length' cannot exceed 'max_body_length'")

    return SiteConfig(
        root=root,
        content_dir=content_dir,
        site_url=_str_setting(data, "site_url", SiteConfig.site_url),
        site_name=_str_setting(data, "site_name", SiteConfig.site_name),
        author=_str_setting(data, "author", SiteConfig.author),
        words_per_minute=_int_setting(
            data, "words_per_minute", DEFAULT_WORDS_PER_MINUTE, minimum=1
        ),
        workers=_int_setting(data, "workers", 1, minimum=1),
        min_body_length=min_body,
        max_body_length=max_body,
        max_tags=_int_setting(validation, "max_tags", 10, minimum=1),
    )
