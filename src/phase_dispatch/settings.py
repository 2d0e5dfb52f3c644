from __future__ import annotations

import dataclasses
import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from platformdirs import user_config_dir

from .errors import ConfigurationError
from .utils.logging import configure_logging

logger = logging.getLogger(__name__)

APP_NAME = "phase_dispatch"
SECTION = "dispatcher"
ENV_SETTINGS_FILE = "PD_SETTINGS_FILE"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _as_bool(value: Any) -> bool:
    """Interpret common truthy/falsey values into a bool.

    Accepts: True/False, 1/0, "true"/"false", "yes"/"no", "on"/"off" (case-insensitive).
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        v = value.strip().lower()
        if v in {"1", "true", "yes", "y", "on"}:
            return True
        if v in {"0", "false", "no", "n", "off", ""}:
            return False
        raise ValueError(f"not a boolean: {value!r}")
    raise ValueError(f"not a boolean: {value!r}")


@dataclass
class DispatcherSettings:
    """Runtime options for event dispatchers.

    Settings are assembled from (lowest to highest precedence):
    - dataclass defaults
    - a TOML or YAML file (env PD_SETTINGS_FILE, or settings.toml in the user config dir)
    - environment variables (prefix: PD_)
    """

    # Trace dispatch, enqueue and flush through the dispatcher's logger
    debug: bool = False
    # Log and skip failing listeners instead of propagating their exceptions
    isolate_listener_errors: bool = False
    log_level: str = "WARNING"

    def validate(self) -> None:
        """Normalize values in place."""
        self.debug = bool(self.debug)
        self.isolate_listener_errors = bool(self.isolate_listener_errors)
        level = str(self.log_level).strip().upper()
        if level not in _LOG_LEVELS:
            logger.warning("Invalid log level %r; falling back to WARNING", self.log_level)
            level = "WARNING"
        self.log_level = level

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    def apply_logging(self) -> None:
        """Install the stdout log handler at ``log_level`` (DEBUG when ``debug`` is set)."""
        configure_logging("DEBUG" if self.debug else self.log_level)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DispatcherSettings":
        """Build settings from a mapping, ignoring unknown keys.

        Raises:
            ConfigurationError: if a boolean option holds an unrecognized value.
        """
        allowed = {f.name for f in dataclasses.fields(cls)}
        filtered: Dict[str, Any] = {}
        for k, v in data.items():
            if k not in allowed:
                logger.debug("Ignoring unknown setting %r", k)
                continue
            if k in ("debug", "isolate_listener_errors"):
                try:
                    v = _as_bool(v)
                except ValueError as exc:
                    raise ConfigurationError(f"Invalid value for {k}: {v!r}") from exc
            filtered[k] = v
        obj = cls(**filtered)
        obj.validate()
        return obj

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        env = os.environ if env is None else env
        mapping = {
            "PD_DEBUG": ("debug", _as_bool),
            "PD_ISOLATE_LISTENER_ERRORS": ("isolate_listener_errors", _as_bool),
            "PD_LOG_LEVEL": ("log_level", str),
        }
        out: Dict[str, Any] = {}
        for env_key, (field_name, caster) in mapping.items():
            if env_key in env and env[env_key] != "":
                try:
                    out[field_name] = caster(env[env_key])
                except ValueError as exc:
                    logger.error("Invalid env for %s=%r: %s", env_key, env[env_key], exc)
        return out

    @staticmethod
    def _section(doc: Any) -> Dict[str, Any]:
        # Accept either a [dispatcher] table or top-level keys
        if not isinstance(doc, dict):
            return {}
        flat = {k: v for k, v in doc.items() if not isinstance(v, dict)}
        if isinstance(doc.get(SECTION), dict):
            flat.update(doc[SECTION])
        return flat

    @classmethod
    def from_file(cls, path: Path) -> Dict[str, Any]:
        """Read raw settings from a ``.toml``, ``.yaml`` or ``.yml`` file."""
        if not path.exists():
            logger.debug("Settings file not found: %s", path)
            return {}
        suffix = path.suffix.lower()
        try:
            if suffix == ".toml":
                with path.open("rb") as f:
                    doc = tomllib.load(f)
            elif suffix in (".yaml", ".yml"):
                with path.open("r", encoding="utf-8") as f:
                    doc = yaml.safe_load(f) or {}
            else:
                logger.warning("Unsupported settings file type: %s", path)
                return {}
        except (OSError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
            logger.error("Failed to read settings %s: %s", path, exc)
            return {}
        return cls._section(doc)

    @classmethod
    def discover_config_path(cls, env: Optional[Mapping[str, str]] = None) -> Optional[Path]:
        env = os.environ if env is None else env
        env_path = env.get(ENV_SETTINGS_FILE)
        if env_path:
            return Path(env_path).expanduser().resolve()
        default_path = Path(user_config_dir(appname=APP_NAME)) / "settings.toml"
        if default_path.exists():
            return default_path
        return None

    @classmethod
    def from_sources(
        cls,
        *,
        env: Optional[Mapping[str, str]] = None,
        file_path: Optional[Path | str] = None,
    ) -> "DispatcherSettings":
        # Order of precedence (lowest to highest): defaults < file < env
        data: Dict[str, Any] = {}
        if file_path is not None:
            chosen_path: Optional[Path] = Path(file_path).expanduser().resolve()
        else:
            chosen_path = cls.discover_config_path(env)
        if chosen_path is not None:
            data.update(cls.from_file(chosen_path))
        data.update(cls.from_env(env))
        settings = cls.from_dict(data)
        logger.debug("Dispatcher settings: %s", settings)
        return settings


__all__ = ["DispatcherSettings"]
