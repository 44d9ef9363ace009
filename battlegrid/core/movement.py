"""
Movement System.

Handles grid-based movement costs and reachability for tactical combat.

Rules implemented:
- 1 cell = 5 feet of movement
- Diagonal movement alternates 5/10 feet along a path
- Difficult terrain doubles the cost of entering a cell
- No squeezing diagonally past a blocked corner
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import heapq
import itertools
import logging

from battlegrid.core.cancellation import CancellationToken
from battlegrid.core.grid import (
    CellCoordinate,
    CellStateMap,
    GridConfig,
    GridTokenData,
    is_cell_difficult,
    is_cell_walkable,
)
from battlegrid.core.zones import PersistentZone, apply_zone_terrain

logger = logging.getLogger(__name__)

# Search state: (x, y, parity of diagonal steps taken so far)
SearchState = Tuple[int, int, int]

# Cardinal neighbors first, then diagonals; the order is the tie-breaker
# between equal-cost paths.
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int, bool], ...] = (
    (-1, 0, False),
    (1, 0, False),
    (0, -1, False),
    (0, 1, False),
    (-1, -1, True),
    (1, -1, True),
    (-1, 1, True),
    (1, 1, True),
)


@dataclass
class ReachableCell:
    """A cell a token can move to this turn."""
    x: int
    y: int
    cost_feet: int
    path: List[CellCoordinate] = field(default_factory=list)  # Start to this cell, inclusive

    def to_dict(self) -> Dict:
        return {
            "x": self.x,
            "y": self.y,
            "cost_feet": self.cost_feet,
            "path": [{"x": x, "y": y} for x, y in self.path],
        }


@dataclass
class MoveResult:
    """Result of validating a single token move."""
    success: bool
    new_cell_x: Optional[int] = None
    new_cell_y: Optional[int] = None
    cost_feet: Optional[int] = None
    path: List[CellCoordinate] = field(default_factory=list)
    error: Optional[str] = None


def get_diagonal_cost(diagonal_count: int, is_difficult: bool) -> int:
    """
    Get the cost of the next diagonal step (alternating 5/10 rule).

    Args:
        diagonal_count: Number of diagonal steps already taken on this path
        is_difficult: Whether the destination cell is difficult terrain

    Returns:
        Movement cost in feet
    """
    base_cost = 5 if diagonal_count % 2 == 0 else 10
    return base_cost * 2 if is_difficult else base_cost


def get_straight_cost(is_difficult: bool) -> int:
    """Get the cost of a straight (non-diagonal) step in feet."""
    return 10 if is_difficult else 5


def calculate_move_cost(
    from_x: int,
    from_y: int,
    to_x: int,
    to_y: int,
    diagonal_count: int,
    cell_states: CellStateMap
) -> Optional[Tuple[int, int]]:
    """
    Calculate the cost of one step between adjacent cells.

    Args:
        from_x, from_y: Current cell
        to_x, to_y: Destination cell
        diagonal_count: Diagonal steps already taken on this path
        cell_states: Sparse cell state map

    Returns:
        Tuple of (cost_feet, new_diagonal_count), or None if the cells
        are not adjacent
    """
    dx = abs(to_x - from_x)
    dy = abs(to_y - from_y)

    if dx > 1 or dy > 1 or (dx == 0 and dy == 0):
        return None

    is_diagonal = dx == 1 and dy == 1
    is_difficult = is_cell_difficult(to_x, to_y, cell_states)

    if is_diagonal:
        return get_diagonal_cost(diagonal_count, is_difficult), diagonal_count + 1
    return get_straight_cost(is_difficult), diagonal_count


def _can_step(
    x: int,
    y: int,
    nx: int,
    ny: int,
    is_diagonal: bool,
    cell_states: CellStateMap,
    config: GridConfig
) -> bool:
    """Check if a single step is legal."""
    if not is_cell_walkable(nx, ny, cell_states, config):
        return False
    if is_diagonal:
        # Both orthogonal neighbors must be open, no squeezing past corners
        if not is_cell_walkable(x, ny, cell_states, config):
            return False
        if not is_cell_walkable(nx, y, cell_states, config):
            return False
    return True


def _rebuild_path(
    state: SearchState,
    parents: Dict[SearchState, Optional[SearchState]]
) -> List[CellCoordinate]:
    path = []
    current: Optional[SearchState] = state
    while current is not None:
        path.append(CellCoordinate(current[0], current[1]))
        current = parents[current]
    path.reverse()
    return path


def calculate_reachable_cells(
    token: GridTokenData,
    cell_states: CellStateMap,
    config: GridConfig,
    zones: Optional[Sequence[PersistentZone]] = None,
    cancel_token: Optional[CancellationToken] = None
) -> List[ReachableCell]:
    """
    Get all cells reachable with the token's remaining movement.

    Uses Dijkstra's algorithm over the 8-connected grid. Because diagonal
    prices alternate along a path, the search state includes the parity of
    diagonal steps taken so far; each cell reports its cheapest state.

    Args:
        token: The moving token (movement_remaining is the budget)
        cell_states: Sparse cell state map
        config: Grid configuration
        zones: Active persistent zones; difficult terrain zones add to the map
        cancel_token: Checked between expansions; on cancel the cells found
            so far are returned

    Returns:
        Reachable cells in order of increasing cost, excluding the start cell
    """
    if not config.is_enabled or token.movement_remaining <= 0:
        return []

    if zones:
        cell_states = apply_zone_terrain(cell_states, zones, config)

    start = (token.cell_x, token.cell_y)
    max_movement = token.movement_remaining

    sequence = itertools.count()
    start_state: SearchState = (token.cell_x, token.cell_y, 0)
    # Entries: (cost, insertion order, state, parent state)
    queue: List[Tuple[int, int, SearchState, Optional[SearchState]]] = [
        (0, next(sequence), start_state, None)
    ]
    best_known: Dict[SearchState, int] = {start_state: 0}
    parents: Dict[SearchState, Optional[SearchState]] = {}
    reachable: Dict[Tuple[int, int], ReachableCell] = {}

    while queue:
        if cancel_token is not None and cancel_token.is_cancelled:
            logger.debug(
                f"Reachability search for {token.id} cancelled after "
                f"{len(parents)} expansions"
            )
            break

        cost, _, state, parent = heapq.heappop(queue)
        if state in parents:
            continue  # Already settled at a lower or equal cost
        parents[state] = parent

        x, y, parity = state
        if (x, y) != start and (x, y) not in reachable:
            reachable[(x, y)] = ReachableCell(
                x=x,
                y=y,
                cost_feet=cost,
                path=_rebuild_path(state, parents)
            )

        for dx, dy, is_diagonal in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if not _can_step(x, y, nx, ny, is_diagonal, cell_states, config):
                continue

            is_difficult = is_cell_difficult(nx, ny, cell_states)
            if is_diagonal:
                move_cost = get_diagonal_cost(parity, is_difficult)
                next_parity = 1 - parity
            else:
                move_cost = get_straight_cost(is_difficult)
                next_parity = parity

            new_cost = cost + move_cost
            if new_cost > max_movement:
                continue

            next_state = (nx, ny, next_parity)
            if next_state in parents or best_known.get(next_state, new_cost + 1) <= new_cost:
                continue

            best_known[next_state] = new_cost
            heapq.heappush(queue, (new_cost, next(sequence), next_state, state))

    logger.debug(
        f"Reachability for {token.id} from {start}: {len(reachable)} cells "
        f"within {max_movement}ft"
    )
    return list(reachable.values())


def validate_move(
    token: GridTokenData,
    to_x: int,
    to_y: int,
    cell_states: CellStateMap,
    config: GridConfig,
    zones: Optional[Sequence[PersistentZone]] = None
) -> MoveResult:
    """
    Check whether a token can move to a cell with its remaining movement.

    Args:
        token: The moving token
        to_x, to_y: Destination cell
        cell_states: Sparse cell state map
        config: Grid configuration
        zones: Active persistent zones

    Returns:
        MoveResult with the cheapest path if the move is legal
    """
    if not config.is_enabled:
        return MoveResult(success=False, error="Grid is disabled")

    if (to_x, to_y) == (token.cell_x, token.cell_y):
        return MoveResult(
            success=True,
            new_cell_x=to_x,
            new_cell_y=to_y,
            cost_feet=0,
            path=[CellCoordinate(to_x, to_y)]
        )

    if not config.in_bounds(to_x, to_y):
        return MoveResult(success=False, error="Destination is off the map")

    if not is_cell_walkable(to_x, to_y, cell_states, config):
        return MoveResult(success=False, error="Destination is blocked")

    for cell in calculate_reachable_cells(token, cell_states, config, zones=zones):
        if (cell.x, cell.y) == (to_x, to_y):
            return MoveResult(
                success=True,
                new_cell_x=to_x,
                new_cell_y=to_y,
                cost_feet=cell.cost_feet,
                path=cell.path
            )

    return MoveResult(
        success=False,
        error=f"Not enough movement ({token.movement_remaining}ft remaining)"
    )
