"""Shared fixtures for the usl test suite."""

import logging
from pathlib import Path

import pytest
import structlog

from usl import get_measurements

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to a captured stream once the test ends."""
    yield
    structlog.reset_defaults()
    logging.getLogger("usl").handlers.clear()


@pytest.fixture
def rel_tol():
    """Relative tolerance for fitted coefficients."""
    return 1e-4


@pytest.fixture
def example_csv():
    return DATA_DIR / "example.csv"


@pytest.fixture
def ramp_measurements():
    return get_measurements("ramp")


@pytest.fixture
def example_measurements():
    return get_measurements("example")


@pytest.fixture
def superlinear_csv(tmp_path):
    """Throughput growing faster than linearly, which fits to kappa < 0."""
    path = tmp_path / "superlinear.csv"
    rows = [f"{n},{100 * n * (1 + 0.002 * n * n)}" for n in range(1, 9)]
    path.write_text("\n".join(rows) + "\n")
    return path
