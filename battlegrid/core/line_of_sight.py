"""
Line of Sight.

Traces a Bresenham line between two cells and reports the first blocked
cell in between. Difficult terrain never blocks sight.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional
import logging
import math

from battlegrid.core.cancellation import CancellationToken
from battlegrid.core.grid import (
    CellCoordinate,
    CellState,
    CellStateMap,
    GridConfig,
    get_cell_state,
)

logger = logging.getLogger(__name__)


@dataclass
class LineOfSightResult:
    """
    Result of a line of sight check.

    blocking_cell is set exactly when sight is obstructed, except on a
    disabled grid: there has_line_of_sight is False while path_cells is
    empty and blocking_cell is None. Read has_line_of_sight, not
    blocking_cell, to decide visibility.
    """
    has_line_of_sight: bool
    path_cells: List[CellCoordinate] = field(default_factory=list)  # From origin to target, inclusive
    blocking_cell: Optional[CellCoordinate] = None  # First obstruction, if any

    def to_dict(self) -> Dict:
        return {
            "has_line_of_sight": self.has_line_of_sight,
            "path_cells": [{"x": x, "y": y} for x, y in self.path_cells],
            "blocking_cell": (
                {"x": self.blocking_cell.x, "y": self.blocking_cell.y}
                if self.blocking_cell else None
            ),
        }


def bresenham_line(x1: int, y1: int, x2: int, y2: int) -> Iterator[CellCoordinate]:
    """Cells from (x1, y1) to (x2, y2) inclusive."""
    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = dx - dy

    x, y = x1, y1
    while True:
        yield CellCoordinate(x, y)

        if x == x2 and y == y2:
            break

        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy


def calculate_line_of_sight(
    from_x: int,
    from_y: int,
    to_x: int,
    to_y: int,
    cell_states: CellStateMap,
    config: GridConfig
) -> LineOfSightResult:
    """
    Check line of sight between two cells.

    Only cells strictly between the endpoints can block. The full path is
    always returned; blocking_cell marks where sight stops. A disabled grid
    has no line of sight, no path and no blocking cell.

    Args:
        from_x, from_y: Observer cell
        to_x, to_y: Target cell
        cell_states: Sparse cell state map
        config: Grid configuration

    Returns:
        LineOfSightResult with the traced path and first blocking cell
    """
    if not config.is_enabled:
        return LineOfSightResult(has_line_of_sight=False)

    path_cells = []
    blocking_cell = None
    endpoints = {(from_x, from_y), (to_x, to_y)}

    for cell in bresenham_line(from_x, from_y, to_x, to_y):
        path_cells.append(cell)
        if blocking_cell is not None or cell in endpoints:
            continue
        if get_cell_state(cell.x, cell.y, cell_states) == CellState.BLOCKED:
            blocking_cell = cell

    return LineOfSightResult(
        has_line_of_sight=blocking_cell is None,
        path_cells=path_cells,
        blocking_cell=blocking_cell
    )


def has_line_of_sight(
    from_x: int,
    from_y: int,
    to_x: int,
    to_y: int,
    cell_states: CellStateMap,
    config: GridConfig
) -> bool:
    """Check if line of sight exists between two cells."""
    if not config.is_enabled:
        return False

    endpoints = {(from_x, from_y), (to_x, to_y)}
    for cell in bresenham_line(from_x, from_y, to_x, to_y):
        if cell in endpoints:
            continue
        if get_cell_state(cell.x, cell.y, cell_states) == CellState.BLOCKED:
            return False
    return True


def get_visible_cells(
    origin_x: int,
    origin_y: int,
    range_cells: int,
    cell_states: CellStateMap,
    config: GridConfig,
    cancel_token: Optional[CancellationToken] = None
) -> List[CellCoordinate]:
    """
    Get all cells visible from a position within a circular range.

    Each candidate cell is ray traced independently.

    Args:
        origin_x, origin_y: Observer cell
        range_cells: Maximum range in cells
        cell_states: Sparse cell state map
        config: Grid configuration
        cancel_token: Checked between rows; on cancel the cells found so
            far are returned

    Returns:
        Visible in-bounds cells, including the origin when on the map
    """
    if not config.is_enabled or range_cells < 0:
        return []

    visible = []
    reach = math.floor(range_cells)

    for dx in range(-reach, reach + 1):
        if cancel_token is not None and cancel_token.is_cancelled:
            logger.debug(f"Visibility scan from ({origin_x}, {origin_y}) cancelled")
            break

        for dy in range(-reach, reach + 1):
            target_x, target_y = origin_x + dx, origin_y + dy
            if not config.in_bounds(target_x, target_y):
                continue
            if math.hypot(dx, dy) > range_cells:
                continue
            if has_line_of_sight(origin_x, origin_y, target_x, target_y, cell_states, config):
                visible.append(CellCoordinate(target_x, target_y))

    return visible
