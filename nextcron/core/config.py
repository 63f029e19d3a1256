"""
nextcron Configuration — loads and merges runner settings from multiple sources.

Precedence (highest to lowest):
1. Explicit overrides (passed in code, e.g. CLI flags)
2. Environment variables (CRON_SECRET, NEXTCRON_*)
3. Project config (./nextcron.toml, [runner] table)
4. Defaults (hardcoded)

Environment variable mapping:
    CRON_SECRET       → cron_secret
    NEXTCRON_BASE_URL → base_url
    NEXTCRON_CONFIG   → config_path
    NEXTCRON_VERBOSE  → verbose
    NEXTCRON_FILTER   → filter
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from nextcron.core.errors import ConfigError

DEFAULT_CONFIG_PATH = "./vercel.json"
SECRET_ENV_VAR = "CRON_SECRET"

_ENV_MAPPING = {
    SECRET_ENV_VAR: "cron_secret",
    "NEXTCRON_BASE_URL": "base_url",
    "NEXTCRON_CONFIG": "config_path",
    "NEXTCRON_VERBOSE": "verbose",
    "NEXTCRON_FILTER": "filter",
}


class RunnerConfig(BaseModel):
    """Settings a CronRunner is built from."""

    base_url: str = ""
    cron_secret: str = ""
    config_path: str = DEFAULT_CONFIG_PATH
    verbose: int = Field(default=0, ge=0, le=2)
    filter: str | None = None

    @staticmethod
    def load(
        overrides: dict[str, Any] | None = None,
        project_path: Path | None = None,
    ) -> RunnerConfig:
        """
        Load configuration from all sources and merge.

        Precedence: overrides > env vars > project toml > defaults.
        Override values of None are ignored so unset CLI flags fall through.
        """
        merged: dict[str, Any] = {}

        # Layer 1: Project config (./nextcron.toml)
        project_config_path = project_path or Path.cwd() / "nextcron.toml"
        if project_config_path.exists():
            project_data = _load_toml(project_config_path)
            merged.update(project_data.get("runner", {}))

        # Layer 2: Environment variables
        merged.update(_load_from_env())

        # Layer 3: Explicit overrides
        if overrides:
            merged.update({k: v for k, v in overrides.items() if v is not None})

        _substitute_env_vars(merged)

        try:
            return RunnerConfig(**merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Internal Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


def _load_from_env() -> dict[str, Any]:
    """Load settings from the mapped environment variables."""
    result: dict[str, Any] = {}
    for env_var, key in _ENV_MAPPING.items():
        value = os.environ.get(env_var)
        if value:
            result[key] = value
    return result


def _substitute_env_vars(data: dict) -> None:
    """Substitute ${ENV_VAR} patterns in string values."""
    pattern = re.compile(r"\$\{([^}]+)\}")

    for key, value in data.items():
        if isinstance(value, str):
            for var_name in pattern.findall(value):
                env_value = os.environ.get(var_name, "")
                value = value.replace(f"${{{var_name}}}", env_value)
            data[key] = value
