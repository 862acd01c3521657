# tests/conftest.py
"""Shared test fixtures and helpers.

Test doubles live in tests/fixtures/harness.py; this module wires them
up as fixtures and registers the Graphviz skip marker.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterator

import pytest
import structlog
from hypothesis import Verbosity, settings

from dagdemo.core.config import SimNetSettings
from tests.fixtures.harness import InstrumentedFactory

settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("nightly", max_examples=1000, deadline=None)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose, deadline=None)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "ci"))

GRAPHVIZ_AVAILABLE = shutil.which("dot") is not None


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip tests that need the Graphviz executable when it isn't installed."""
    if GRAPHVIZ_AVAILABLE:
        return
    skip = pytest.mark.skip(reason="Graphviz 'dot' executable not on PATH")
    for item in items:
        if "requires_graphviz" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def simnet_settings() -> SimNetSettings:
    """Deterministic, fast simulated network settings."""
    return SimNetSettings(seed=42, max_parents=3, block_interval_ms=0)


@pytest.fixture
def instrumented_factory(simnet_settings: SimNetSettings) -> InstrumentedFactory:
    return InstrumentedFactory(settings=simnet_settings)


@pytest.fixture(autouse=True)
def _clean_dagdemo_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DAGDEMO_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("DAGDEMO_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo configure_logging() so later tests don't write to a closed capture stream."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
