"""Shared fixtures for the QueryAdvisor test suite."""

from __future__ import annotations

import os
import random
from pathlib import Path

import pytest

from queryadvisor.config import Config, reset_config
from queryadvisor.engine import AnalysisService
from queryadvisor.registry import IndexRegistrySnapshot

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch):
    """Drop QUERYADVISOR_* variables and the cached config around every test."""
    for name in list(os.environ):
        if name.startswith("QUERYADVISOR_"):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def seeded_config() -> Config:
    return Config(random_seed=42)


@pytest.fixture
def service(seeded_config: Config) -> AnalysisService:
    return AnalysisService(config=seeded_config)


@pytest.fixture
def empty_registry() -> IndexRegistrySnapshot:
    return IndexRegistrySnapshot.empty()


@pytest.fixture
def t1_registry() -> IndexRegistrySnapshot:
    """T1 has one index on column x; T2 has none."""
    return IndexRegistrySnapshot.from_mapping({
        "T1": "CREATE INDEX IX_T1_x ON T1(x);",
    })


@pytest.fixture
def orders_report_sql() -> str:
    """Three tables, two joins, a parenthesized OR and a two-column sort."""
    return (FIXTURES_DIR / "orders_report.sql").read_text()


@pytest.fixture
def registry_yaml() -> Path:
    return FIXTURES_DIR / "indexes.yaml"


@pytest.fixture
def registry_json() -> Path:
    return FIXTURES_DIR / "indexes.json"
