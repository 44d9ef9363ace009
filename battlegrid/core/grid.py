"""
Grid Model and Coordinate Utilities.

Core types shared by every calculator (grid configuration, cell states,
tokens, areas of effect) and the pure conversions between cell, pixel and
percent coordinates used by the map overlay.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, NamedTuple, Optional, Tuple
import math

from battlegrid.config import get_settings
from battlegrid.core.errors import GridConfigError, InvalidCellKeyError


class GridType(str, Enum):
    """Grid overlay types."""
    SQUARE = "square"
    NONE = "none"  # Grid disabled


class CellState(str, Enum):
    """Terrain state of a single cell."""
    FREE = "free"
    BLOCKED = "blocked"  # Impassable and opaque
    DIFFICULT = "difficult"  # Double movement cost, does not block sight


class CreatureSize(str, Enum):
    """Creature size categories."""
    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"
    GARGANTUAN = "gargantuan"


# Footprint edge length in cells. Tiny creatures still occupy a full cell.
CREATURE_SIZE_CELLS: Dict[CreatureSize, int] = {
    CreatureSize.TINY: 1,
    CreatureSize.SMALL: 1,
    CreatureSize.MEDIUM: 1,
    CreatureSize.LARGE: 2,
    CreatureSize.HUGE: 3,
    CreatureSize.GARGANTUAN: 4,
}


class CellCoordinate(NamedTuple):
    """Integer grid coordinate, usable as a key of the cell state map."""
    x: int
    y: int


CellStateMap = Mapping[Tuple[int, int], CellState]


def _default_feet_per_cell() -> int:
    return get_settings().FEET_PER_CELL


@dataclass
class GridConfig:
    """
    Grid overlay configuration for a map image.

    All pixel values are relative to the map image. A standard tabletop
    grid uses 5-foot cells.
    """
    cell_size: float = 50
    map_width: float = 1000
    map_height: float = 1000
    offset_x: float = 0
    offset_y: float = 0
    grid_type: GridType = GridType.SQUARE
    feet_per_cell: int = field(default_factory=_default_feet_per_cell)

    def __post_init__(self):
        self.grid_type = GridType(self.grid_type)
        if self.feet_per_cell <= 0:
            raise GridConfigError("feet_per_cell", self.feet_per_cell, "must be positive")
        if self.cell_size <= 0:
            raise GridConfigError("cell_size", self.cell_size, "must be positive")

    @property
    def is_enabled(self) -> bool:
        """Whether grid queries produce results at all."""
        return self.grid_type != GridType.NONE

    @property
    def columns(self) -> int:
        """Number of whole cells across the map."""
        return int(self.map_width // self.cell_size)

    @property
    def rows(self) -> int:
        """Number of whole cells down the map."""
        return int(self.map_height // self.cell_size)

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if cell coordinates are on the map."""
        return 0 <= x < self.columns and 0 <= y < self.rows


@dataclass
class GridTokenData:
    """A token as seen by the movement calculator. Never mutated."""
    id: str
    cell_x: int
    cell_y: int
    size_in_cells: int = 1
    speed_feet: int = 30
    movement_remaining: Optional[int] = None  # Budget for this query, defaults to speed

    def __post_init__(self):
        if self.movement_remaining is None:
            self.movement_remaining = self.speed_feet


class AreaShape(str, Enum):
    """Area of effect templates."""
    CONE = "cone"
    LINE = "line"
    SPHERE = "sphere"
    CUBE = "cube"


@dataclass
class AreaOfEffect:
    """
    An area of effect template placed on the grid.

    size_feet is the radius for a sphere, the side for a cube and the length
    for a line or cone. direction is in degrees (0 = +x, 90 = +y) and is
    ignored for spheres.
    """
    shape: AreaShape
    origin_x: int
    origin_y: int
    size_feet: float
    direction: Optional[float] = None

    def __post_init__(self):
        # Unknown shapes are kept as-is and rejected when the area is calculated
        if self.shape in [s.value for s in AreaShape]:
            self.shape = AreaShape(self.shape)


@dataclass
class AffectedCell:
    """A cell covered by an area of effect."""
    x: int
    y: int
    distance_feet: float

    def to_dict(self) -> Dict:
        return {"x": self.x, "y": self.y, "distance_feet": self.distance_feet}


# ============================================================================
# CELL KEYS AND STATE LOOKUP
# ============================================================================

def cell_key(x: int, y: int) -> CellCoordinate:
    """Key for the cell state map."""
    return CellCoordinate(int(x), int(y))


def format_cell_key(x: int, y: int) -> str:
    """Encode a cell as the "x,y" string used by persisted session data."""
    return f"{int(x)},{int(y)}"


def parse_cell_key(key: str) -> CellCoordinate:
    """
    Decode a persisted "x,y" cell key.

    Raises:
        InvalidCellKeyError: If the key is not two comma-separated integers
    """
    parts = key.split(",")
    if len(parts) != 2:
        raise InvalidCellKeyError(key)
    try:
        return CellCoordinate(int(parts[0].strip()), int(parts[1].strip()))
    except ValueError:
        raise InvalidCellKeyError(key) from None


def get_cell_state(x: int, y: int, cell_states: CellStateMap) -> CellState:
    """Get the state of a cell; cells absent from the map are free."""
    return cell_states.get((x, y), CellState.FREE)


def is_cell_walkable(x: int, y: int, cell_states: CellStateMap, config: GridConfig) -> bool:
    """Check if a cell is on the map and not blocked."""
    if not config.in_bounds(x, y):
        return False
    return get_cell_state(x, y, cell_states) != CellState.BLOCKED


def is_cell_difficult(x: int, y: int, cell_states: CellStateMap) -> bool:
    """Check if a cell is difficult terrain."""
    return get_cell_state(x, y, cell_states) == CellState.DIFFICULT


# ============================================================================
# COORDINATE CONVERSION
# ============================================================================

def pixel_to_cell(pixel_x: float, pixel_y: float, config: GridConfig) -> CellCoordinate:
    """Convert a pixel position to the cell containing it."""
    cell_x = math.floor((pixel_x - config.offset_x) / config.cell_size)
    cell_y = math.floor((pixel_y - config.offset_y) / config.cell_size)
    return CellCoordinate(cell_x, cell_y)


def cell_to_pixel(cell_x: int, cell_y: int, config: GridConfig) -> Tuple[float, float]:
    """Convert cell coordinates to the pixel position of the cell center."""
    pixel_x = config.offset_x + (cell_x + 0.5) * config.cell_size
    pixel_y = config.offset_y + (cell_y + 0.5) * config.cell_size
    return pixel_x, pixel_y


def percent_to_cell(percent_x: float, percent_y: float, config: GridConfig) -> CellCoordinate:
    """Convert a position in percent of the map size to cell coordinates."""
    pixel_x = (percent_x / 100) * config.map_width
    pixel_y = (percent_y / 100) * config.map_height
    return pixel_to_cell(pixel_x, pixel_y, config)


def cell_to_percent(cell_x: int, cell_y: int, config: GridConfig) -> Tuple[float, float]:
    """Convert cell coordinates to the cell center in percent of the map size."""
    pixel_x, pixel_y = cell_to_pixel(cell_x, cell_y, config)
    return (pixel_x / config.map_width) * 100, (pixel_y / config.map_height) * 100


def snap_to_grid(percent_x: float, percent_y: float, config: GridConfig) -> Tuple[float, float]:
    """Snap a percent position to the center of the cell containing it."""
    cell_x, cell_y = percent_to_cell(percent_x, percent_y, config)
    return cell_to_percent(cell_x, cell_y, config)
