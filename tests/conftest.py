"""Pytest configuration and fixtures for adbackends tests."""

import pytest

from adbackends.modes import _MODE_OVERRIDES


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "mode: differentiation mode resolution")
    config.addinivalue_line("markers", "backends: dense backend descriptors")
    config.addinivalue_line("markers", "pattern: SparsityPattern data structure")
    config.addinivalue_line("markers", "detection: sparsity detectors")
    config.addinivalue_line("markers", "coloring: coloring algorithms")
    config.addinivalue_line("markers", "verify: coloring validity checks")
    config.addinivalue_line("markers", "sparse: AutoSparse composition")
    config.addinivalue_line(
        "markers", "extensions: optional plugins refining mode resolution"
    )


@pytest.fixture(autouse=True)
def clean_mode_registry():
    """Run each test with an empty mode override registry."""
    saved = dict(_MODE_OVERRIDES)
    _MODE_OVERRIDES.clear()
    yield
    _MODE_OVERRIDES.clear()
    _MODE_OVERRIDES.update(saved)
