"""Library configuration.

``ModelSyncConfig`` collects the few knobs the library exposes.  It can
be built directly, from a dict, or from a YAML document::

    # modelsync.yaml
    default_authorization_type: AMAZON_COGNITO_USER_POOLS
    log_level: DEBUG

    config = load_config("modelsync.yaml")
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from modelsync.auth.types import AuthorizationType
from modelsync.errors import UsageError

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class ModelSyncConfig:
    """Configuration for request building and subscriptions.

    Parameters
    ----------
    default_authorization_type:
        Mechanism used for schemas that declare no authorization rules.
    thread_name_prefix:
        Name prefix of the worker thread a subscription starts when no
        executor is injected.
    log_level:
        Level applied by the CLI's logging setup.  The library itself
        never configures logging.
    """

    default_authorization_type: AuthorizationType = AuthorizationType.API_KEY
    thread_name_prefix: str = "modelsync-subscription"
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if isinstance(self.default_authorization_type, str):
            try:
                parsed = AuthorizationType.parse(self.default_authorization_type)
            except ValueError as exc:
                raise UsageError(str(exc)) from exc
            object.__setattr__(self, "default_authorization_type", parsed)
        if not isinstance(self.thread_name_prefix, str):
            raise UsageError(
                f"thread_name_prefix must be a string, got {self.thread_name_prefix!r}"
            )
        level = str(self.log_level).upper()
        if level not in _LOG_LEVELS:
            raise UsageError(
                f"Unknown log level {self.log_level!r}. Available: {', '.join(_LOG_LEVELS)}"
            )
        object.__setattr__(self, "log_level", level)

    @property
    def logging_level(self) -> int:
        """Return ``log_level`` as a ``logging`` module constant."""
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ModelSyncConfig":
        """Build a config from a mapping; missing keys keep their defaults.

        Raises
        ------
        UsageError
            If *data* has unknown keys or invalid values.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise UsageError("Configuration must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise UsageError(
                f"Unknown configuration key(s): {', '.join(unknown)}",
                f"Supported keys: {', '.join(sorted(known))}",
            )
        return cls(**data)

    @classmethod
    def from_yaml(cls, text: str) -> "ModelSyncConfig":
        """Build a config from a YAML document."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise UsageError(f"Invalid configuration YAML: {exc}") from exc
        return cls.from_dict(data)


def load_config(path: str | Path | None = None) -> ModelSyncConfig:
    """Load configuration from *path*, or return the defaults when ``None``."""
    if path is None:
        return ModelSyncConfig()
    return ModelSyncConfig.from_yaml(Path(path).read_text(encoding="utf-8"))
