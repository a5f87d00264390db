"""Settings loading and logging setup.

Settings come from an optional YAML file, then environment variables
override individual values:

    RECIPE_SETTINGS_PATH            path of the YAML file
    RECIPE_CACHE_TTL_HOURS          cache.ttl_hours
    RECIPE_CACHE_MAX_ENTRIES        cache.max_entries
    RECIPE_CACHE_BACKEND            cache.backend (memory | json | sql)
    RECIPE_CACHE_PATH               cache.path (json backend directory)
    RECIPE_DATABASE_URL             cache.database_url (sql backend)
    RECIPE_SWEEP_INTERVAL_SECONDS   cache.sweep_interval_seconds
    RECIPE_PROFILES_PATH            profiles_path
    LOG_LEVEL                       log_level
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from recipe_engine.scaling.policy import ScalingPolicy

BACKENDS = ("memory", "json", "sql")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the cache and scalers."""

    cache_ttl_hours: float = 24.0
    cache_max_entries: int = 1000
    cache_backend: str = "memory"
    cache_path: str = ".cache/recipes"
    database_url: str = "sqlite:///data/recipe_cache.db"
    sweep_interval_seconds: Optional[float] = None
    profiles_path: Optional[str] = None
    log_level: str = "INFO"
    scaling: ScalingPolicy = field(default_factory=ScalingPolicy)

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ValueError: Naming the first invalid setting
        """
        if self.cache_ttl_hours <= 0:
            raise ValueError("cache_ttl_hours must be positive")
        if self.cache_max_entries <= 0:
            raise ValueError("cache_max_entries must be positive")
        if self.cache_backend not in BACKENDS:
            raise ValueError(
                f"cache_backend must be one of {list(BACKENDS)}, got {self.cache_backend!r}"
            )
        if self.sweep_interval_seconds is not None and self.sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be positive")
        if logging.getLevelName(self.log_level) == f"Level {self.log_level}":
            raise ValueError(f"Unknown log_level: {self.log_level!r}")


def _from_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")

    cache = data.get("cache") or {}
    values: Dict[str, Any] = {}
    for yaml_key, attr in (
        ("ttl_hours", "cache_ttl_hours"),
        ("max_entries", "cache_max_entries"),
        ("backend", "cache_backend"),
        ("path", "cache_path"),
        ("database_url", "database_url"),
        ("sweep_interval_seconds", "sweep_interval_seconds"),
    ):
        if yaml_key in cache:
            values[attr] = cache[yaml_key]

    for key in ("profiles_path", "log_level"):
        if key in data:
            values[key] = data[key]

    if data.get("scaling"):
        values["scaling"] = ScalingPolicy.from_dict(data["scaling"])
    return values


def _from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for env_var, attr in (
        ("RECIPE_CACHE_TTL_HOURS", "cache_ttl_hours"),
        ("RECIPE_CACHE_MAX_ENTRIES", "cache_max_entries"),
        ("RECIPE_CACHE_BACKEND", "cache_backend"),
        ("RECIPE_CACHE_PATH", "cache_path"),
        ("RECIPE_DATABASE_URL", "database_url"),
        ("RECIPE_SWEEP_INTERVAL_SECONDS", "sweep_interval_seconds"),
        ("RECIPE_PROFILES_PATH", "profiles_path"),
        ("LOG_LEVEL", "log_level"),
    ):
        if environ.get(env_var):
            values[attr] = environ[env_var]
    return values


def load_settings(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """Load settings from YAML and the environment.

    Args:
        path: YAML settings file (falls back to RECIPE_SETTINGS_PATH; no
            file means defaults)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated Settings

    Raises:
        FileNotFoundError: If an explicit settings file doesn't exist
        ValueError: If a value is out of range or has the wrong type
    """
    environ = os.environ if environ is None else environ
    path = path or environ.get("RECIPE_SETTINGS_PATH")

    values: Dict[str, Any] = {}
    if path:
        values.update(_from_yaml(Path(path)))
    values.update(_from_env(environ))

    try:
        settings = Settings(
            cache_ttl_hours=float(values.get("cache_ttl_hours", Settings.cache_ttl_hours)),
            cache_max_entries=int(values.get("cache_max_entries", Settings.cache_max_entries)),
            cache_backend=str(values.get("cache_backend", Settings.cache_backend)).lower(),
            cache_path=str(values.get("cache_path", Settings.cache_path)),
            database_url=str(values.get("database_url", Settings.database_url)),
            sweep_interval_seconds=(
                float(values["sweep_interval_seconds"])
                if values.get("sweep_interval_seconds") is not None else None
            ),
            profiles_path=values.get("profiles_path"),
            log_level=str(values.get("log_level", Settings.log_level)).upper(),
            scaling=values.get("scaling", ScalingPolicy()),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid settings: {e}") from e

    settings.validate()
    return settings


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Configure root logging once; module-level loggers inherit it."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    return logging.getLogger("recipe_engine")
