"""
Configuration system for QueryAdvisor.

Environment variables are the primary config source, with an optional
YAML or JSON file for local development.

Usage:
    from queryadvisor.config import get_config

    config = get_config()
    threshold = config.high_cost_threshold
    scan = config.costs.scan
"""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from queryadvisor.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Environment profiles."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """Parse environment from string, defaulting to development."""
        try:
            return cls(value.lower())
        except ValueError:
            return cls.DEVELOPMENT


class OperationCost(BaseModel):
    """Heuristic cost of one plan operation: ``base + randint(0, spread - 1)``."""

    model_config = ConfigDict(frozen=True)

    base: int = Field(..., ge=0, description="Fixed part of the cost")
    spread: int = Field(..., ge=1, description="Number of distinct random increments")

    @property
    def maximum(self) -> int:
        return self.base + self.spread - 1


class CostModel(BaseModel):
    """Cost ranges for each synthetic plan operation."""

    model_config = ConfigDict(frozen=True)

    scan: OperationCost = Field(default=OperationCost(base=30, spread=30))
    join: OperationCost = Field(default=OperationCost(base=20, spread=20))
    filter: OperationCost = Field(default=OperationCost(base=10, spread=10))
    sort: OperationCost = Field(default=OperationCost(base=15, spread=15))


class Config(BaseModel):
    """
    QueryAdvisor configuration.

    Loaded from environment variables and optional config file.
    """

    model_config = ConfigDict(frozen=True)

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current environment (development/staging/production)",
    )

    high_cost_threshold: int = Field(
        default=100,
        ge=0,
        description="Plan cost above which a structural review is recommended",
    )

    random_seed: int | None = Field(
        default=None,
        description="Seed for synthetic costs and statistics (None = unseeded)",
    )

    costs: CostModel = Field(
        default_factory=CostModel,
        description="Cost ranges per plan operation",
    )

    default_registry_file: Path | None = Field(
        default=None,
        description="Index registry file used when none is given explicitly",
    )


def _parse_env_int(name: str, default: int | None) -> int | None:
    """Parse integer from environment variable."""
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Could not parse %s=%s, using %s", name, value, default)
        return default


def _load_cost_model_from_env() -> CostModel:
    defaults = CostModel()
    costs: dict[str, OperationCost] = {}
    for op in ("scan", "join", "filter", "sort"):
        current: OperationCost = getattr(defaults, op)
        prefix = f"QUERYADVISOR_{op.upper()}_COST"
        costs[op] = OperationCost(
            base=_parse_env_int(f"{prefix}_BASE", current.base),
            spread=_parse_env_int(f"{prefix}_SPREAD", current.spread),
        )
    return CostModel(**costs)


def load_config_from_env() -> Config:
    """
    Load configuration from environment variables.

    Examples:
    - QUERYADVISOR_ENVIRONMENT=production
    - QUERYADVISOR_HIGH_COST_THRESHOLD=150
    - QUERYADVISOR_RANDOM_SEED=42
    - QUERYADVISOR_REGISTRY_FILE=indexes.yaml
    - QUERYADVISOR_SCAN_COST_BASE=40
    """
    env_str = os.environ.get("QUERYADVISOR_ENVIRONMENT", "development")
    registry_file = os.environ.get("QUERYADVISOR_REGISTRY_FILE")

    try:
        config_kwargs: dict[str, Any] = {
            "environment": Environment.from_string(env_str),
            "high_cost_threshold": _parse_env_int("QUERYADVISOR_HIGH_COST_THRESHOLD", 100),
            "random_seed": _parse_env_int("QUERYADVISOR_RANDOM_SEED", None),
            "costs": _load_cost_model_from_env(),
            "default_registry_file": Path(registry_file) if registry_file else None,
        }
        return Config(**config_kwargs)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in environment: {e}") from e


def load_config_from_file(path: Path) -> Config:
    """
    Load configuration from a JSON or YAML file.

    Falls back to environment variables when the file does not exist.
    """
    if not path.exists():
        logger.warning("Config file not found: %s, using environment", path)
        return load_config_from_env()

    try:
        with open(path) as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to read config file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping, got {type(data).__name__}"
        )

    try:
        return Config(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e


@lru_cache(maxsize=1)
def get_config() -> Config:
    """
    Get the global configuration instance.

    Loads from:
    1. QUERYADVISOR_CONFIG_FILE environment variable (if set)
    2. Environment variables (default)

    Result is cached for the lifetime of the process.
    """
    config_file = os.environ.get("QUERYADVISOR_CONFIG_FILE")

    if config_file:
        return load_config_from_file(Path(config_file))

    return load_config_from_env()


def reset_config() -> None:
    """Reset the cached configuration (mainly for testing)."""
    get_config.cache_clear()
