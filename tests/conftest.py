"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest

from tests.factories import AssignmentFactory, CoilFactory, LineFactory, OrderFactory


# ===================
# FACTORY RESET
# ===================

@pytest.fixture(autouse=True)
def reset_factory_counters():
    """Keep generated ids predictable per test."""
    CoilFactory.reset_counter()
    OrderFactory.reset_counter()
    LineFactory.reset_counter()
    AssignmentFactory.reset_counter()
    yield


# ===================
# SNAPSHOT FIXTURES
# ===================

@pytest.fixture
def standard_line():
    """Line accepting 600-1600 mm, up to 3 mm and 25 t."""
    return LineFactory.create(
        id="line-1",
        min_width=600,
        max_width=1600,
        max_thickness=3.0,
        max_weight=25,
    )


@pytest.fixture
def crca_coil():
    """20 t CRCA cold-rolled coil, 1250 x 2.0 mm."""
    return CoilFactory.create(
        id="coil-1",
        width=1250,
        thickness=2.0,
        weight=20,
        grade="CRCA",
    )


@pytest.fixture
def crca_order():
    """15 t CRCA order, 1200 x 2.0 mm."""
    return OrderFactory.create(
        id="order-1",
        width=1200,
        thickness=2.0,
        weight=15,
        grade="CRCA",
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/optimization/run", json={...})
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
