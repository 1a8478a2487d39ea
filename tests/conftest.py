"""Pytest configuration and fixtures for dataforge tests."""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from dataforge import (
    ExtensionManager,
    GenerationContext,
    GeneratorFactory,
    StaticDiscoveryProvider,
    reset_generator_factory,
)


@pytest.fixture(autouse=True)
def clean_slate(monkeypatch):
    """Reset process-wide state and DATAFORGE_ variables around each test."""
    for key in list(os.environ):
        if key.startswith("DATAFORGE_"):
            monkeypatch.delenv(key)
    ExtensionManager.reset_instance()
    reset_generator_factory()
    yield
    ExtensionManager.reset_instance()
    reset_generator_factory()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp)


@pytest.fixture
def factory():
    """Empty generator factory."""
    return GeneratorFactory("test")


@pytest.fixture
def context():
    """Empty generation context."""
    return GenerationContext()


@pytest.fixture
def make_manager(factory):
    """Build a manager over the test factory with the given extension sources."""

    def _make(*sources):
        return ExtensionManager(factory=factory, discovery=StaticDiscoveryProvider(sources))

    return _make
