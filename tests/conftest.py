"""Pytest configuration and fixtures for surface climate map tests."""
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest
import numpy as np


@pytest.fixture
def small_elevation():
    """
    4x2 X-major elevation grid (resolution 2).

    Columns: x0 at sea level, x1 deep ocean, x2 land, x3 shallow ocean.
    """
    return np.array(
        [
            [0.0, 0.0],
            [-0.2, -0.2],
            [0.1, 0.1],
            [-0.1, -0.1],
        ]
    )


@pytest.fixture
def temperature_ranges():
    """Factory for uniform per-cell temperature ranges in K."""
    from src.surface.ranges import RangeGrid

    def _make(shape, minimum=270.0, maximum=290.0):
        return RangeGrid.from_bounds(np.full(shape, minimum), np.full(shape, maximum))

    return _make


@pytest.fixture
def seasons():
    """Factory for SeasonalPrecipitation with constant grids per season."""
    from src.climate.precipitation import SeasonalGrid, SeasonalPrecipitation

    def _make(shape, precipitation=(0.25, 0.25), snowfall=None):
        if snowfall is None:
            snowfall = [0.01] * len(precipitation)
        return SeasonalPrecipitation(
            [
                SeasonalGrid(np.full(shape, p), np.full(shape, s))
                for p, s in zip(precipitation, snowfall)
            ]
        )

    return _make


@pytest.fixture
def cache_dir(tmp_path):
    """Temporary cache directory for tests."""
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache


@pytest.fixture
def project_root():
    """Get the project root directory."""
    return Path(__file__).parent.parent
