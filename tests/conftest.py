"""
Shared pytest fixtures for SITEPLAN tests.

Environment variables are set before any api.* import so the cached API
settings pick them up.
"""

import os

import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY api.* imports)
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "warning")

from siteplan.geometry.polygon import LocalPoint  # noqa: E402


# ---------------------------------------------------------------------------
# Section 2: Client fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    """FastAPI TestClient for the SITEPLAN app."""
    from api.main import app

    with TestClient(app) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Section 3: Geometry fixtures
# ---------------------------------------------------------------------------


def rectangle(min_x, min_z, max_x, max_z):
    """Counter-clockwise axis-aligned rectangle."""
    return [
        LocalPoint(min_x, min_z),
        LocalPoint(max_x, min_z),
        LocalPoint(max_x, max_z),
        LocalPoint(min_x, max_z),
    ]


@pytest.fixture
def square_6m():
    """6 m x 6 m square with its south-west corner at the origin."""
    return rectangle(0.0, 0.0, 6.0, 6.0)


@pytest.fixture
def parcel_10x20():
    """10 m wide (x) by 20 m deep (z) parcel."""
    return rectangle(0.0, 0.0, 10.0, 20.0)


@pytest.fixture
def l_shape():
    """Concave L: 10 x 10 square missing its north-east 5 x 5 quadrant."""
    return [
        LocalPoint(0.0, 0.0),
        LocalPoint(10.0, 0.0),
        LocalPoint(10.0, 5.0),
        LocalPoint(5.0, 5.0),
        LocalPoint(5.0, 10.0),
        LocalPoint(0.0, 10.0),
    ]
