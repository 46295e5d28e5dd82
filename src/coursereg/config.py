"""Configuration loading for coursereg."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_FILE = "coursereg.yaml"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class GradingPolicyConfig:
    """Default grading weights (percent) applied to new courses."""

    attendance: int = 10
    midterm: int = 30
    final: int = 60

    def validate(self) -> None:
        weights = (self.attendance, self.midterm, self.final)
        if any(w < 0 or w > 100 for w in weights):
            raise ConfigError("Grading weights must be between 0 and 100")
        if sum(weights) != 100:
            raise ConfigError(f"Grading weights must sum to 100, got {sum(weights)}")


@dataclass
class Settings:
    """coursereg runtime settings.

    Values come from an optional YAML file and are then overridden by
    COURSEREG_* environment variables.
    """

    db_path: str = "coursereg.db"
    log_dir: str = "logs"
    log_level: str = "INFO"
    default_max_credits: int = 24
    grading_policy: GradingPolicyConfig = field(default_factory=GradingPolicyConfig)
    api_title: str = "coursereg API"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create settings from a dictionary.

        Args:
            data: Configuration dictionary from YAML.

        Returns:
            Parsed settings object.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        known = {
            "db_path",
            "log_dir",
            "log_level",
            "default_max_credits",
            "grading_policy",
            "api_title",
            "cors_origins",
        }
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        policy_data = data.get("grading_policy") or {}
        if not isinstance(policy_data, dict):
            raise ConfigError("grading_policy must be a mapping")
        policy = GradingPolicyConfig(
            attendance=_as_int(policy_data.get("attendance", 10), "grading_policy.attendance"),
            midterm=_as_int(policy_data.get("midterm", 30), "grading_policy.midterm"),
            final=_as_int(policy_data.get("final", 60), "grading_policy.final"),
        )
        policy.validate()

        cors_origins = data.get("cors_origins", ["*"])
        if not isinstance(cors_origins, list):
            raise ConfigError("cors_origins must be a list")

        settings = cls(
            db_path=str(data.get("db_path", "coursereg.db")),
            log_dir=str(data.get("log_dir", "logs")),
            log_level=str(data.get("log_level", "INFO")).upper(),
            default_max_credits=_as_int(
                data.get("default_max_credits", 24), "default_max_credits"
            ),
            grading_policy=policy,
            api_title=str(data.get("api_title", "coursereg API")),
            cors_origins=[str(origin) for origin in cors_origins],
        )
        if settings.default_max_credits < 0:
            raise ConfigError("default_max_credits must not be negative")
        return settings

    def apply_environment(self, environ: dict[str, str] | None = None) -> Settings:
        """Override values from COURSEREG_* environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            self, for chaining.
        """
        env = os.environ if environ is None else environ
        if "COURSEREG_DB_PATH" in env:
            self.db_path = env["COURSEREG_DB_PATH"]
        if "COURSEREG_LOG_DIR" in env:
            self.log_dir = env["COURSEREG_LOG_DIR"]
        if "COURSEREG_LOG_LEVEL" in env:
            self.log_level = env["COURSEREG_LOG_LEVEL"].upper()
        if "COURSEREG_DEFAULT_MAX_CREDITS" in env:
            self.default_max_credits = _as_int(
                env["COURSEREG_DEFAULT_MAX_CREDITS"], "COURSEREG_DEFAULT_MAX_CREDITS"
            )
        return self


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def load_settings(
    config_path: str | Path | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Load settings from YAML (if present) and the environment.

    Args:
        config_path: Explicit config file. When omitted, 'coursereg.yaml' in the
            current directory is used if it exists.
        environ: Environment mapping used for overrides.

    Returns:
        The resolved settings.

    Raises:
        ConfigError: If an explicit config file is missing or malformed.
    """
    if config_path is None:
        candidate = Path(DEFAULT_CONFIG_FILE)
        path = candidate if candidate.exists() else None
    else:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

    data: dict[str, Any] = {}
    if path is not None:
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        data = loaded

    return Settings.from_dict(data).apply_environment(environ)
