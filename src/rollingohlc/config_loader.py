"""Configuration loader with Pydantic validation and environment variable interpolation."""

from __future__ import annotations

import os
import re
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables at module level
load_dotenv(find_dotenv(usecwd=True))

from rollingohlc.constants import (
    DEFAULT_INPUT_PATH,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_WINDOW_SIZE,
    MIN_SAMPLES,
    LogLevel,
    RecordErrorPolicy,
)


def interpolate_env_vars(value: Any) -> Any:
    """
    Interpolate environment variables in string values.

    Supports formats:
    - ${VAR_NAME} - replaced by the variable, or an empty string if unset
    - ${VAR_NAME:default} - optional with default value
    """
    if not isinstance(value, str):
        return value

    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value
        elif default is not None:
            return default
        else:
            return ""

    return re.sub(pattern, replacer, value)


def process_config_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively process config dict to interpolate env vars."""
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = process_config_dict(value)
        elif isinstance(value, list):
            result[key] = [
                process_config_dict(item) if isinstance(item, dict) else interpolate_env_vars(item)
                for item in value
            ]
        else:
            result[key] = interpolate_env_vars(value)
    return result


# ============================================
# Pydantic Configuration Models
# ============================================


class EnvironmentConfig(BaseModel):
    """Runtime settings."""

    log_level: LogLevel = LogLevel.INFO
    log_json: bool = False


class AggregatorConfig(BaseModel):
    """Rolling window settings."""

    window_size: int = DEFAULT_WINDOW_SIZE  # Same unit as the tick T field
    parallelism: int | None = None  # None -> one worker per CPU
    min_samples: int = MIN_SAMPLES

    @field_validator("window_size")
    @classmethod
    def validate_window_size(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"window_size must be non-negative, got: {v}")
        return v

    @field_validator("parallelism", "min_samples")
    @classmethod
    def validate_at_least_one(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError(f"Value must be at least 1, got: {v}")
        return v


class IOConfig(BaseModel):
    """Input/output settings for the file driver."""

    input_path: str = DEFAULT_INPUT_PATH
    output_path: str = DEFAULT_OUTPUT_PATH
    on_invalid_record: RecordErrorPolicy = RecordErrorPolicy.SKIP
    on_invalid_price: RecordErrorPolicy = RecordErrorPolicy.SKIP
    print_bars: bool = True


class SimulationConfig(BaseModel):
    """Synthetic feed settings."""

    symbol: str = "BTCUSDT"
    start_price: Decimal = Decimal("30000.00")
    step: Decimal = Decimal("0.50")
    interval_ms: int = 1000
    seed: int | None = None

    @field_validator("start_price", "step", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Any) -> Decimal:
        """Convert numeric values to Decimal."""
        if isinstance(v, Decimal):
            return v
        return Decimal(str(v))

    @field_validator("start_price", "step")
    @classmethod
    def validate_positive_price(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError(f"Price must be positive, got: {v}")
        return v

    @field_validator("interval_ms")
    @classmethod
    def validate_interval(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"interval_ms must be positive, got: {v}")
        return v


class AppConfig(BaseModel):
    """Root application configuration."""

    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    aggregator: AggregatorConfig = Field(default_factory=AggregatorConfig)
    io: IOConfig = Field(default_factory=IOConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)


# ============================================
# Configuration Loader
# ============================================


class ConfigLoader:
    """Load and validate configuration from YAML files with env var interpolation."""

    def __init__(self, config_path: str | Path) -> None:
        """
        Initialize config loader.

        Args:
            config_path: Path to the YAML configuration file.
        """
        self.config_path = Path(config_path)
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """
        Load and validate configuration.

        Returns:
            Validated AppConfig instance.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            yaml.YAMLError: If YAML is invalid.
            pydantic.ValidationError: If config validation fails.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        processed_config = process_config_dict(raw_config)

        self._config = AppConfig.model_validate(processed_config)

        return self._config

    @property
    def config(self) -> AppConfig:
        """Get loaded config, loading if necessary."""
        if self._config is None:
            return self.load()
        return self._config

    def reload(self) -> AppConfig:
        """Force reload configuration from disk."""
        self._config = None
        return self.load()


def load_config(config_path: str | Path) -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Validated AppConfig instance.
    """
    loader = ConfigLoader(config_path)
    return loader.load()


def load_config_with_overrides(
    config_path: str | Path | None,
    *,
    window_size: int | None = None,
    parallelism: int | None = None,
    input_path: str | None = None,
    output_path: str | None = None,
) -> AppConfig:
    """
    Load configuration with CLI overrides.

    A missing file at `config_path` (or None) falls back to defaults.
    Overrides are re-validated, so an invalid value raises
    pydantic.ValidationError just like a bad config file.
    """
    if config_path is not None and Path(config_path).exists():
        config = load_config(config_path)
    else:
        config = AppConfig()

    aggregator_updates: dict[str, Any] = {}
    if window_size is not None:
        aggregator_updates["window_size"] = window_size
    if parallelism is not None:
        aggregator_updates["parallelism"] = parallelism

    io_updates: dict[str, Any] = {}
    if input_path is not None:
        io_updates["input_path"] = input_path
    if output_path is not None:
        io_updates["output_path"] = output_path

    if not aggregator_updates and not io_updates:
        return config

    data = config.model_dump()
    data["aggregator"].update(aggregator_updates)
    data["io"].update(io_updates)
    return AppConfig.model_validate(data)
