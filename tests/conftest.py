"""Pytest configuration and fixtures for minidb tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from minidb.application import Database, DatabaseEngine, Executor
from minidb.infrastructure.config import Config, StorageConfig
from minidb.infrastructure.metrics import MetricsRegistry
from minidb.ports.outbound import SyncMode


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with temporary directories."""
    return Config(
        storage=StorageConfig(
            data_dir=temp_dir / "data",
            sync_mode="none",  # Faster for tests
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def database(temp_dir: Path, metrics_registry: MetricsRegistry) -> Database:
    """Provide an empty database in a temporary directory."""
    return Database(temp_dir / "data", sync_mode=SyncMode.NONE, metrics=metrics_registry)


@pytest.fixture
def executor(database: Database, metrics_registry: MetricsRegistry) -> Executor:
    """Provide an executor over the temporary database."""
    return Executor(database, metrics=metrics_registry)


@pytest.fixture
def engine(
    test_config: Config, metrics_registry: MetricsRegistry
) -> Generator[DatabaseEngine, None, None]:
    """Provide a started engine over the test configuration."""
    with DatabaseEngine(config=test_config, metrics=metrics_registry) as db:
        yield db


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
