"""
Grid Engine - Test Configuration and Fixtures
Shared grid configurations, tokens and cell maps for pytest.
"""
import pytest
from typing import Dict, Tuple
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from battlegrid.config import get_settings
from battlegrid.core.grid import CellState, GridConfig, GridTokenData, GridType


# ==================== Settings Fixtures ====================

@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings from the environment for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ==================== Grid Fixtures ====================

@pytest.fixture
def grid_config() -> GridConfig:
    """A 20x20 square grid with 50px, 5-foot cells."""
    return GridConfig(
        cell_size=50,
        map_width=1000,
        map_height=1000,
        feet_per_cell=5
    )


@pytest.fixture
def small_grid_config() -> GridConfig:
    """A 5x5 square grid."""
    return GridConfig(
        cell_size=50,
        map_width=250,
        map_height=250,
        feet_per_cell=5
    )


@pytest.fixture
def disabled_config() -> GridConfig:
    """A grid with the overlay turned off."""
    return GridConfig(grid_type=GridType.NONE, feet_per_cell=5)


@pytest.fixture
def open_cells() -> Dict[Tuple[int, int], CellState]:
    """An empty cell state map (every cell free)."""
    return {}


@pytest.fixture
def wall_cells() -> Dict[Tuple[int, int], CellState]:
    """A vertical wall at x=5 from y=0 to y=9."""
    return {(5, y): CellState.BLOCKED for y in range(10)}


# ==================== Token Fixtures ====================

@pytest.fixture
def fighter_token() -> GridTokenData:
    """A medium token at the origin with 30ft of speed."""
    return GridTokenData(id="fighter-1", cell_x=0, cell_y=0, speed_feet=30)


@pytest.fixture
def centered_token() -> GridTokenData:
    """A token in the middle of the 20x20 grid with 30ft of speed."""
    return GridTokenData(id="rogue-1", cell_x=10, cell_y=10, speed_feet=30)
