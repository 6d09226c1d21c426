"""
Config system - Layered configuration for the guard.

Sources, later overriding earlier:
JSON config files > .env file > environment variables > explicit overrides
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import dotenv_values

from .cookies import FOREVER_MINUTES
from .faults import ConfigInvalidFault

logger = logging.getLogger("authguard.config")


SAMESITE_VALUES = ("strict", "lax", "none")

# Environment values under these paths are kept verbatim ("007" stays "007").
STRING_KEYS = frozenset({
    ("guard", "name"),
    ("guard", "secret_key"),
    ("guard", "cookie", "path"),
    ("guard", "cookie", "domain"),
})


@dataclass
class CookieConfig:
    """Attributes applied to the recall cookie."""
    path: str | None = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str | None = "lax"


@dataclass
class GuardConfig:
    """
    Typed guard configuration.

    Attributes:
        name: Stable guard name the session/recall keys derive from
        secret_key: Secret for sealing recall cookies (None disables them)
        cookie: Recall cookie attributes
        remember_minutes: Lifetime of the recall cookie
    """
    name: str | None = None
    secret_key: str | None = None
    cookie: CookieConfig = field(default_factory=CookieConfig)
    remember_minutes: int = FOREVER_MINUTES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GuardConfig":
        """
        Build from a plain dict (as returned by ``ConfigLoader.get_guard_config``).

        Raises:
            ConfigInvalidFault: A value is out of range
        """
        cookie_data = dict(data.get("cookie") or {})
        unknown = set(cookie_data) - set(CookieConfig.__dataclass_fields__)
        if unknown:
            raise ConfigInvalidFault("guard.cookie", f"unknown keys: {', '.join(sorted(unknown))}")

        samesite = cookie_data.get("samesite")
        if samesite is not None:
            samesite = str(samesite).lower()
            if samesite not in SAMESITE_VALUES:
                raise ConfigInvalidFault(
                    "guard.cookie.samesite",
                    f"must be one of {', '.join(SAMESITE_VALUES)}",
                )
            cookie_data["samesite"] = samesite

        remember_minutes = data.get("remember_minutes", FOREVER_MINUTES)
        if not isinstance(remember_minutes, int) or remember_minutes <= 0:
            raise ConfigInvalidFault("guard.remember_minutes", "must be a positive integer")

        name = data.get("name")
        secret_key = data.get("secret_key")
        return cls(
            name=str(name) if name is not None else None,
            secret_key=str(secret_key) if secret_key is not None else None,
            cookie=CookieConfig(**cookie_data),
            remember_minutes=remember_minutes,
        )


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Environment keys are prefixed and use double underscores for nesting:
    ``AUTHGUARD_GUARD__COOKIE__SECURE=true`` -> ``{"guard": {"cookie": {"secure": True}}}``
    """

    def __init__(self, env_prefix: str = "AUTHGUARD_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "AUTHGUARD_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Args:
            paths: JSON config file paths
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for path in paths or []:
            loader._load_json_file(Path(path))

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_json_file(self, path: Path) -> None:
        """Load config from JSON file."""
        if not path.exists():
            logger.debug(f"Config file not found, skipping: {path}")
            return

        with open(path) as f:
            data = json.load(f)
            if data:
                self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str) -> None:
        """Load prefixed keys from a .env file."""
        if not Path(path).exists():
            logger.debug(f"Env file not found, skipping: {path}")
            return

        for key, value in dotenv_values(path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self) -> None:
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str) -> None:
        """Convert AUTHGUARD_GUARD__SECRET_KEY to a nested dict entry."""
        key = key[len(self.env_prefix):]
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        if tuple(parts) in STRING_KEYS:
            current[parts[-1]] = value
        else:
            current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict) -> None:
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current: Any = self.config_data

        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def to_dict(self) -> dict:
        return self.config_data

    def get_guard_config(self) -> dict:
        """
        Get guard configuration with defaults.

        Returns:
            Guard configuration dictionary
        """
        merged = {
            "name": None,
            "secret_key": None,
            "cookie": {
                "path": "/",
                "domain": None,
                "secure": False,
                "httponly": True,
                "samesite": "lax",
            },
            "remember_minutes": FOREVER_MINUTES,
        }

        user_config = self.get("guard", {})
        if user_config:
            self._merge_dict(merged, user_config)

        return merged
