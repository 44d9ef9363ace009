"""
Area of Effect Templates.

Rasterizes tabletop area templates into grid cells:
- Cone: expands from the origin, 90 degrees wide
- Line: 5 feet wide, extends from the origin
- Sphere: radiates from the center of the origin cell
- Cube: the origin is the center of one face

Directions arrive in degrees and are converted to radians once per call.
"""
from typing import Dict, List, Tuple
import logging
import math

from battlegrid.core.errors import UnknownAreaShapeError
from battlegrid.core.grid import AffectedCell, AreaOfEffect, AreaShape, GridConfig

logger = logging.getLogger(__name__)

# Half of the cone's total width
CONE_HALF_ANGLE = math.pi / 4

# Standard line width in feet
LINE_WIDTH_FEET = 5


def _round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def _direction_radians(aoe: AreaOfEffect) -> float:
    if aoe.direction is None:
        logger.warning(f"{aoe.shape.value} area at ({aoe.origin_x}, {aoe.origin_y}) has no direction, using 0")
        return 0.0
    return math.radians(aoe.direction)


def _wrap_angle(angle: float) -> float:
    """Wrap an angle into [-pi, pi]."""
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle < -math.pi:
        angle += 2 * math.pi
    return angle


def calculate_sphere_affected_cells(aoe: AreaOfEffect, config: GridConfig) -> List[AffectedCell]:
    """
    Cells whose center is within the sphere's radius of the origin cell center.

    The origin cell itself is included.
    """
    if not config.is_enabled:
        return []

    affected = []
    max_cells = math.ceil(aoe.size_feet / config.feet_per_cell)

    for dx in range(-max_cells, max_cells + 1):
        for dy in range(-max_cells, max_cells + 1):
            distance_feet = math.hypot(dx, dy) * config.feet_per_cell
            if distance_feet <= aoe.size_feet:
                affected.append(AffectedCell(
                    x=aoe.origin_x + dx,
                    y=aoe.origin_y + dy,
                    distance_feet=_round_half_up(distance_feet)
                ))

    return affected


def calculate_cone_affected_cells(aoe: AreaOfEffect, config: GridConfig) -> List[AffectedCell]:
    """
    Cells inside a 90 degree cone.

    The cone's width at any distance equals that distance, so every cell
    within 45 degrees of the direction and within range is covered. The
    origin cell is not part of the cone.
    """
    if not config.is_enabled:
        return []

    affected = []
    cells_in_radius = math.ceil(aoe.size_feet / config.feet_per_cell)
    direction = _direction_radians(aoe)

    for dx in range(-cells_in_radius, cells_in_radius + 1):
        for dy in range(-cells_in_radius, cells_in_radius + 1):
            if dx == 0 and dy == 0:
                continue

            distance_feet = math.hypot(dx, dy) * config.feet_per_cell
            if distance_feet > aoe.size_feet:
                continue

            angle_diff = _wrap_angle(math.atan2(dy, dx) - direction)
            if abs(angle_diff) <= CONE_HALF_ANGLE:
                affected.append(AffectedCell(
                    x=aoe.origin_x + dx,
                    y=aoe.origin_y + dy,
                    distance_feet=_round_half_up(distance_feet)
                ))

    return affected


def calculate_line_affected_cells(aoe: AreaOfEffect, config: GridConfig) -> List[AffectedCell]:
    """
    Cells along a 5-foot wide line.

    Marches one cell at a time along the direction and samples across the
    line's width in half-cell steps.
    """
    if not config.is_enabled:
        return []

    cells_in_length = math.ceil(aoe.size_feet / config.feet_per_cell)
    direction = _direction_radians(aoe)
    half_width_cells = LINE_WIDTH_FEET / (2 * config.feet_per_cell)

    dir_x, dir_y = math.cos(direction), math.sin(direction)
    perp_x, perp_y = -dir_y, dir_x

    width_steps = int(math.floor(half_width_cells * 2 / 0.5 + 1e-9))
    offsets = [-half_width_cells + i * 0.5 for i in range(width_steps + 1)]

    affected: Dict[Tuple[int, int], AffectedCell] = {}
    for d in range(1, cells_in_length + 1):
        center_x = aoe.origin_x + dir_x * d
        center_y = aoe.origin_y + dir_y * d

        for w in offsets:
            cell = (
                _round_half_up(center_x + perp_x * w),
                _round_half_up(center_y + perp_y * w)
            )
            if cell not in affected:
                affected[cell] = AffectedCell(
                    x=cell[0],
                    y=cell[1],
                    distance_feet=d * config.feet_per_cell
                )

    return list(affected.values())


def calculate_cube_affected_cells(aoe: AreaOfEffect, config: GridConfig) -> List[AffectedCell]:
    """
    Cells inside a cube whose origin is the center of one face.

    The cube extends its full side along the direction and half its side
    to each side of it.
    """
    if not config.is_enabled:
        return []

    side_cells = math.ceil(aoe.size_feet / config.feet_per_cell)
    direction = _direction_radians(aoe)
    half_side = math.floor(side_cells / 2)

    dir_x, dir_y = math.cos(direction), math.sin(direction)
    perp_x, perp_y = -dir_y, dir_x

    affected: Dict[Tuple[int, int], AffectedCell] = {}
    for d in range(side_cells):
        for w in range(-half_side, half_side + 1):
            cell = (
                _round_half_up(aoe.origin_x + dir_x * d + perp_x * w),
                _round_half_up(aoe.origin_y + dir_y * d + perp_y * w)
            )
            if cell not in affected:
                affected[cell] = AffectedCell(
                    x=cell[0],
                    y=cell[1],
                    distance_feet=d * config.feet_per_cell
                )

    return list(affected.values())


_SHAPE_CALCULATORS = {
    AreaShape.CONE: calculate_cone_affected_cells,
    AreaShape.LINE: calculate_line_affected_cells,
    AreaShape.SPHERE: calculate_sphere_affected_cells,
    AreaShape.CUBE: calculate_cube_affected_cells,
}


def calculate_affected_cells(aoe: AreaOfEffect, config: GridConfig) -> List[AffectedCell]:
    """
    Calculate all cells affected by an area of effect.

    Raises:
        UnknownAreaShapeError: If the shape is not a known AreaShape
    """
    calculator = _SHAPE_CALCULATORS.get(aoe.shape)
    if calculator is None:
        raise UnknownAreaShapeError(aoe.shape)
    return calculator(aoe, config)
