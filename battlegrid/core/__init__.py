"""
Grid Engine.

Pure calculations over a square battle grid for tactical combat:
- Movement costs and reachability with the 5/10/5 diagonal rule
- Distance measurement
- Area of effect templates (cone, line, sphere, cube)
- Line of sight and cover
- Persistent zones that outlast a single turn
"""

from .errors import (
    ErrorCode,
    GridEngineError,
    GridConfigError,
    InvalidCellKeyError,
    UnknownAreaShapeError,
)
from .grid import (
    GridType,
    CellState,
    CreatureSize,
    CREATURE_SIZE_CELLS,
    CellCoordinate,
    CellStateMap,
    GridConfig,
    GridTokenData,
    AreaShape,
    AreaOfEffect,
    AffectedCell,
    cell_key,
    format_cell_key,
    parse_cell_key,
    get_cell_state,
    is_cell_walkable,
    is_cell_difficult,
    pixel_to_cell,
    cell_to_pixel,
    percent_to_cell,
    cell_to_percent,
    snap_to_grid,
)
from .cancellation import CancellationToken
from .movement import (
    ReachableCell,
    MoveResult,
    get_diagonal_cost,
    calculate_move_cost,
    calculate_reachable_cells,
    validate_move,
)
from .distance import (
    DistanceResult,
    measure_distance,
    calculate_distance_feet,
    calculate_euclidean_distance,
    calculate_manhattan_distance,
    is_within_range,
)
from .area_of_effect import (
    calculate_affected_cells,
    calculate_cone_affected_cells,
    calculate_line_affected_cells,
    calculate_sphere_affected_cells,
    calculate_cube_affected_cells,
)
from .line_of_sight import (
    LineOfSightResult,
    bresenham_line,
    calculate_line_of_sight,
    has_line_of_sight,
    get_visible_cells,
)
from .cover import (
    CoverLevel,
    CoverResult,
    calculate_cover,
    get_cover_description,
)
from .zones import (
    ZoneTrigger,
    ZoneEffectType,
    DamageType,
    SaveAbility,
    ZoneDamage,
    ZoneSave,
    ZoneEffect,
    PersistentZone,
    TriggeredEffect,
    ZoneRoundResult,
    get_zone_affected_cells,
    is_cell_in_zone_with_effect,
    get_zones_at_cell,
    get_triggered_effects,
    is_cell_difficult_from_zone,
    apply_zone_terrain,
    advance_zone_rounds,
    create_zone,
    create_difficult_terrain_zone,
    create_damage_zone,
    create_save_zone,
)
from .background import ReachabilitySearch, run_in_background

__all__ = [
    "ErrorCode",
    "GridEngineError",
    "GridConfigError",
    "InvalidCellKeyError",
    "UnknownAreaShapeError",
    "GridType",
    "CellState",
    "CreatureSize",
    "CREATURE_SIZE_CELLS",
    "CellCoordinate",
    "CellStateMap",
    "GridConfig",
    "GridTokenData",
    "AreaShape",
    "AreaOfEffect",
    "AffectedCell",
    "cell_key",
    "format_cell_key",
    "parse_cell_key",
    "get_cell_state",
    "is_cell_walkable",
    "is_cell_difficult",
    "pixel_to_cell",
    "cell_to_pixel",
    "percent_to_cell",
    "cell_to_percent",
    "snap_to_grid",
    "CancellationToken",
    "ReachableCell",
    "MoveResult",
    "get_diagonal_cost",
    "calculate_move_cost",
    "calculate_reachable_cells",
    "validate_move",
    "DistanceResult",
    "measure_distance",
    "calculate_distance_feet",
    "calculate_euclidean_distance",
    "calculate_manhattan_distance",
    "is_within_range",
    "calculate_affected_cells",
    "calculate_cone_affected_cells",
    "calculate_line_affected_cells",
    "calculate_sphere_affected_cells",
    "calculate_cube_affected_cells",
    "LineOfSightResult",
    "bresenham_line",
    "calculate_line_of_sight",
    "has_line_of_sight",
    "get_visible_cells",
    "CoverLevel",
    "CoverResult",
    "calculate_cover",
    "get_cover_description",
    "ZoneTrigger",
    "ZoneEffectType",
    "DamageType",
    "SaveAbility",
    "ZoneDamage",
    "ZoneSave",
    "ZoneEffect",
    "PersistentZone",
    "TriggeredEffect",
    "ZoneRoundResult",
    "get_zone_affected_cells",
    "is_cell_in_zone_with_effect",
    "get_zones_at_cell",
    "get_triggered_effects",
    "is_cell_difficult_from_zone",
    "apply_zone_terrain",
    "advance_zone_rounds",
    "create_zone",
    "create_difficult_terrain_zone",
    "create_damage_zone",
    "create_save_zone",
    "ReachabilitySearch",
    "run_in_background",
]
