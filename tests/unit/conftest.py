"""Shared fixtures for the collector unit tests."""

from pathlib import Path

import pytest

from snc_jmx_collector.config import CollectorSettings

from .fakes import JVM_OBJECTS, ObjectTable


@pytest.fixture
def settings(tmp_path: Path) -> CollectorSettings:
    """Return settings pointing at an empty temporary config directory."""
    return CollectorSettings(path=tmp_path, polling_frequency=60, nb_thread=2)


@pytest.fixture
def jvm_objects() -> ObjectTable:
    """Return a copy of the sample JVM object table."""
    return {name: dict(attributes) for name, attributes in JVM_OBJECTS.items()}
