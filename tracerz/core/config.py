from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml


SEED_ENV_VAR = "TRACERZ_SEED"

MODIFIER_SETS = ("english", "extended")
HANDLER_SETS = ("builtin",)


@dataclass(frozen=True)
class Settings:
    origin: str = "#origin#"
    count: int = 1
    seed: Optional[int] = None
    modifier_sets: list[str] = field(default_factory=lambda: list(MODIFIER_SETS))
    handler_sets: list[str] = field(default_factory=lambda: list(HANDLER_SETS))


class ConfigError(ValueError):
    pass


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load settings overrides from a YAML file.

    Format (all keys optional):
      origin: "#origin#"
      count: 3
      seed: 42
      modifier_sets: [english, extended]
      handler_sets: [builtin]
    """
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("config file must be a mapping")

    out: dict[str, Any] = {}
    for k, v in raw.items():
        if k == "origin":
            if not isinstance(v, str) or not v:
                raise ConfigError("origin must be a non-empty string")
        elif k == "count":
            if isinstance(v, bool) or not isinstance(v, int) or v < 1:
                raise ConfigError("count must be a positive integer")
        elif k == "seed":
            if v is not None and (isinstance(v, bool) or not isinstance(v, int)):
                raise ConfigError("seed must be an integer")
        elif k == "modifier_sets":
            _check_names(k, v, MODIFIER_SETS)
        elif k == "handler_sets":
            _check_names(k, v, HANDLER_SETS)
        else:
            raise ConfigError(f"unknown config key: {k}")
        out[k] = v
    return out


def _check_names(key: str, value: Any, allowed: tuple[str, ...]) -> None:
    if not isinstance(value, list) or any(not isinstance(x, str) for x in value):
        raise ConfigError(f"{key} must be a list of strings")
    unknown = [x for x in value if x not in allowed]
    if unknown:
        raise ConfigError(f"{key}: unknown entries {unknown} (choose from: {', '.join(allowed)})")


def seed_from_env() -> Optional[int]:
    raw = (os.getenv(SEED_ENV_VAR, "") or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{SEED_ENV_VAR} must be an integer, got {raw!r}") from e


def merged_settings(overrides: dict[str, Any] | None = None) -> Settings:
    """Return default Settings updated with `overrides`; the env seed fills a missing seed."""
    settings = Settings()
    if overrides:
        settings = replace(settings, **overrides)
    if settings.seed is None:
        settings = replace(settings, seed=seed_from_env())
    return settings


def load_and_merge(config_file: str | None) -> Settings:
    if not config_file:
        return merged_settings()
    return merged_settings(load_config_file(config_file))
