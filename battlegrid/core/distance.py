"""
Distance Measurement.

Measures distances between cells using the tabletop 5/10/5 diagonal rule,
with Euclidean and Manhattan variants for non-standard uses.
"""
from dataclasses import dataclass
import math

from battlegrid.core.grid import GridConfig


@dataclass
class DistanceResult:
    """A measured distance between two cells."""
    feet: int
    cells: int
    is_diagonal: bool


def _diagonal_cost(diagonal_moves: int) -> int:
    # Odd diagonals (1st, 3rd, ...) cost 5ft, even diagonals cost 10ft
    return (diagonal_moves // 2) * 15 + (diagonal_moves % 2) * 5


def measure_distance(
    from_x: int,
    from_y: int,
    to_x: int,
    to_y: int,
    config: GridConfig
) -> DistanceResult:
    """
    Measure the distance between two cells with the 5/10/5 diagonal rule.

    Diagonal pricing is terrain independent here; this is the measuring
    rule, not the cost of actually moving.

    Args:
        from_x, from_y: Start cell
        to_x, to_y: End cell
        config: Grid configuration

    Returns:
        DistanceResult with feet, cells and whether any diagonal was used
    """
    dx = abs(to_x - from_x)
    dy = abs(to_y - from_y)

    diagonal_moves = min(dx, dy)
    straight_moves = abs(dx - dy)

    feet = _diagonal_cost(diagonal_moves) + straight_moves * config.feet_per_cell
    return DistanceResult(
        feet=feet,
        cells=diagonal_moves + straight_moves,
        is_diagonal=diagonal_moves > 0
    )


def calculate_distance_feet(
    from_x: int,
    from_y: int,
    to_x: int,
    to_y: int,
    config: GridConfig
) -> int:
    """Distance in feet between two cells (5/10/5 diagonal rule)."""
    return measure_distance(from_x, from_y, to_x, to_y, config).feet


def calculate_euclidean_distance(
    from_x: int,
    from_y: int,
    to_x: int,
    to_y: int,
    config: GridConfig
) -> float:
    """Straight-line distance in feet between cell centers."""
    return math.hypot(to_x - from_x, to_y - from_y) * config.feet_per_cell


def calculate_manhattan_distance(
    from_x: int,
    from_y: int,
    to_x: int,
    to_y: int,
    config: GridConfig
) -> int:
    """Distance in feet with no diagonal moves."""
    return (abs(to_x - from_x) + abs(to_y - from_y)) * config.feet_per_cell


def is_within_range(
    from_x: int,
    from_y: int,
    to_x: int,
    to_y: int,
    range_feet: float,
    config: GridConfig
) -> bool:
    """Check if a target cell is within range in feet."""
    return calculate_distance_feet(from_x, from_y, to_x, to_y, config) <= range_feet
