"""
Pytest configuration and shared fixtures for merkletree tests.

This conftest.py:
1. Adds project root and tests root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Keeps MERKLETREE_* environment settings from leaking into tests
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

from fixtures import (  # noqa: E402
    ADDRESS_1,
    ADDRESS_2,
    make_address_values,
    make_claim_values,
    make_tree,
)


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from MERKLETREE_* variables and config files in the cwd."""
    import os

    for key in list(os.environ):
        if key.startswith("MERKLETREE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def two_leaf_tree():
    """The two-address example tree."""
    return make_tree([[ADDRESS_1], [ADDRESS_2]])


@pytest.fixture
def address_tree():
    """A seven-leaf address tree (odd count at several levels)."""
    return make_tree(make_address_values(7))


@pytest.fixture
def claim_tree():
    """A five-leaf (address, uint256) tree."""
    return make_tree(make_claim_values(5), ["address", "uint256"])


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
