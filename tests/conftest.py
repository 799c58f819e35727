"""
Pytest configuration and shared fixtures for token vault tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

# Extract factory functions
make_record = _common.make_record
make_records = _common.make_records
make_vault_scenario = _common.make_vault_scenario


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def record():
    """Provide a default OwnershipRecord for tests."""
    return make_record()


@pytest.fixture
def records():
    """Provide five distinct OwnershipRecords."""
    return make_records(5)


@pytest.fixture
def scenario():
    """Provide a deployed vault holding tokens 1-4, delivery opening in 60 days."""
    return make_vault_scenario()


@pytest.fixture
def chain(scenario):
    return scenario.chain


@pytest.fixture
def vault(scenario):
    return scenario.vault


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_event():
    """Helper to assert the last event of a name carries the given args."""
    def _assert(chain, name: str, address: str | None = None, **expected):
        events = chain.events_named(name, address)
        assert events, f"Expected event '{name}' not emitted"
        args = events[-1].args
        for key, value in expected.items():
            assert args.get(key) == value, f"{name}.{key}: expected {value!r}, got {args.get(key)!r}"
        return events[-1]
    return _assert
