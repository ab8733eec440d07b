"""AnalysisSettings and SettingsManager — explicit analysis configuration.

Settings are an object handed to the engine, never module state::

    settings = SettingsManager().load(project_root)
    engine = CircuitEngine(snapshot, settings)
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from panelwise import config
from panelwise.issues import SettingsError

logger = logging.getLogger(__name__)


class AnalysisSettings(BaseModel):
    """Tunable values for one analysis pass."""

    demand_factors: dict[str, float] = Field(
        default_factory=lambda: dict(config.DEFAULT_DEMAND_FACTORS)
    )
    """Fixture kind -> demand factor."""

    unknown_demand_factor: float = config.UNKNOWN_DEMAND_FACTOR
    circuit_capacity_w: float = config.DEFAULT_CIRCUIT_CAPACITY_W
    emergency_prefix: str = config.DEFAULT_EMERGENCY_PREFIX
    type_aliases: dict[str, str] = Field(
        default_factory=lambda: dict(config.DEFAULT_TYPE_ALIASES)
    )
    log_level: str | None = None
    """Level for the ``panelwise`` logger; None leaves it untouched."""

    @field_validator("demand_factors")
    @classmethod
    def _check_factors(cls, value: dict[str, float]) -> dict[str, float]:
        for kind, factor in value.items():
            if factor < 0:
                raise ValueError(f"demand factor for {kind} must be >= 0, got {factor}")
        return {k.upper(): v for k, v in value.items()}

    @field_validator("circuit_capacity_w")
    @classmethod
    def _check_capacity(cls, value: float) -> float:
        if value < 0:
            raise ValueError(f"circuit capacity must be >= 0, got {value}")
        return value

    @field_validator("type_aliases")
    @classmethod
    def _upper_aliases(cls, value: dict[str, str]) -> dict[str, str]:
        return {k.upper(): v.upper() for k, v in value.items()}

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level


# Environment variable -> settings field
_ENV_KEYS: dict[str, dict[str, Any]] = {
    "PANELWISE_CIRCUIT_CAPACITY_W": {
        "field": "circuit_capacity_w",
        "description": "Maximum used load per circuit (W)",
    },
    "PANELWISE_EMERGENCY_PREFIX": {
        "field": "emergency_prefix",
        "description": "Name prefix marking emergency fixtures",
    },
    "PANELWISE_LOG_LEVEL": {
        "field": "log_level",
        "description": "Level applied to the panelwise logger",
    },
}


class SettingsManager:
    """Load analysis settings for a project.

    Merge order: defaults -> ``.panelwise/settings.json`` -> environment.
    """

    def load(self, project_path: str | Path | None = None) -> AnalysisSettings:
        data: dict[str, Any] = {}

        if project_path is not None:
            settings_json = Path(project_path) / config.SETTINGS_DIR / config.SETTINGS_FILE
            if settings_json.is_file():
                try:
                    raw = json.loads(settings_json.read_text(encoding="utf-8"))
                except (json.JSONDecodeError, OSError) as exc:
                    raise SettingsError(f"Could not read {settings_json}: {exc}") from exc
                if not isinstance(raw, dict):
                    raise SettingsError(f"{settings_json} must contain a JSON object")
                data.update(raw)

        for env_key, info in _ENV_KEYS.items():
            env_val = os.environ.get(env_key)
            if env_val is not None:
                data[info["field"]] = env_val

        try:
            settings = AnalysisSettings(**data)
        except ValidationError as exc:
            raise SettingsError(str(exc)) from exc

        logger.debug("Loaded settings: capacity=%s W", settings.circuit_capacity_w)
        return settings

    def save(self, settings: AnalysisSettings, project_path: str | Path) -> Path:
        """Write settings to ``.panelwise/settings.json`` and return the path."""
        target_dir = Path(project_path) / config.SETTINGS_DIR
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / config.SETTINGS_FILE
        target.write_text(
            json.dumps(settings.model_dump(mode="json"), indent=2),
            encoding="utf-8",
        )
        return target

    @staticmethod
    def env_keys() -> dict[str, str]:
        """Recognised environment variables and their descriptions."""
        return {k: v["description"] for k, v in _ENV_KEYS.items()}
