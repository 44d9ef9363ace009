"""Tests for line of sight."""
import pytest

from battlegrid.core.cancellation import CancellationToken
from battlegrid.core.grid import CellState, get_cell_state
from battlegrid.core.line_of_sight import (
    bresenham_line,
    calculate_line_of_sight,
    get_visible_cells,
    has_line_of_sight,
)


class TestBresenham:
    """Test line tracing."""

    def test_horizontal(self):
        """A horizontal line visits every cell."""
        assert list(bresenham_line(0, 0, 3, 0)) == [(0, 0), (1, 0), (2, 0), (3, 0)]

    def test_diagonal(self):
        """A 45 degree line steps diagonally."""
        assert list(bresenham_line(0, 0, 2, 2)) == [(0, 0), (1, 1), (2, 2)]

    def test_single_cell(self):
        """A line to the same cell is that cell."""
        assert list(bresenham_line(4, 4, 4, 4)) == [(4, 4)]

    @pytest.mark.parametrize("end", [(7, 3), (-5, 2), (1, -6), (-3, -3)])
    def test_steps_are_adjacent(self, end):
        """Consecutive cells touch and the line ends at the target."""
        cells = list(bresenham_line(0, 0, *end))

        assert cells[0] == (0, 0)
        assert cells[-1] == end
        for (x1, y1), (x2, y2) in zip(cells, cells[1:]):
            assert max(abs(x2 - x1), abs(y2 - y1)) == 1


class TestLineOfSight:
    """Test line of sight checks."""

    def test_open_grid(self, grid_config):
        """Nothing blocks sight on an empty map."""
        result = calculate_line_of_sight(0, 0, 5, 3, {}, grid_config)

        assert result.has_line_of_sight is True
        assert result.blocking_cell is None
        assert result.path_cells[0] == (0, 0)
        assert result.path_cells[-1] == (5, 3)

    def test_wall_blocks(self, grid_config, wall_cells):
        """A wall between the cells blocks sight at the wall."""
        result = calculate_line_of_sight(0, 2, 9, 2, wall_cells, grid_config)

        assert result.has_line_of_sight is False
        assert result.blocking_cell == (5, 2)
        assert result.path_cells[0] == (0, 2)
        assert result.path_cells[-1] == (9, 2)
        assert not has_line_of_sight(0, 2, 9, 2, wall_cells, grid_config)

    def test_difficult_does_not_block(self, grid_config):
        """Difficult terrain never blocks sight."""
        states = {(2, 0): CellState.DIFFICULT}

        assert has_line_of_sight(0, 0, 4, 0, states, grid_config)

    def test_endpoints_do_not_block(self, grid_config):
        """Blocked observer or target cells do not block sight."""
        states = {(0, 0): CellState.BLOCKED, (3, 0): CellState.BLOCKED}

        assert has_line_of_sight(0, 0, 3, 0, states, grid_config)

    def test_same_cell(self, grid_config):
        """A cell always sees itself."""
        result = calculate_line_of_sight(4, 4, 4, 4, {}, grid_config)

        assert result.has_line_of_sight is True
        assert result.path_cells == [(4, 4)]

    def test_result_consistency(self, grid_config, wall_cells):
        """The boolean check agrees with the full result and the blocker is on the path."""
        for target in [(9, 0), (9, 9), (4, 7), (6, 12), (2, 15)]:
            result = calculate_line_of_sight(1, 4, *target, wall_cells, grid_config)

            assert result.has_line_of_sight == has_line_of_sight(1, 4, *target, wall_cells, grid_config)
            assert result.has_line_of_sight == (result.blocking_cell is None)
            if result.blocking_cell is not None:
                assert result.blocking_cell in result.path_cells
                assert get_cell_state(*result.blocking_cell, wall_cells) == CellState.BLOCKED

    def test_to_dict(self, grid_config, wall_cells):
        """Results serialize with plain coordinates."""
        data = calculate_line_of_sight(4, 2, 6, 2, wall_cells, grid_config).to_dict()

        assert data["has_line_of_sight"] is False
        assert data["blocking_cell"] == {"x": 5, "y": 2}
        assert data["path_cells"][0] == {"x": 4, "y": 2}

    def test_disabled_grid(self, disabled_config):
        """A disabled grid has no line of sight."""
        result = calculate_line_of_sight(0, 0, 1, 0, {}, disabled_config)

        assert result.has_line_of_sight is False
        assert result.path_cells == []
        assert result.blocking_cell is None
        assert not has_line_of_sight(0, 0, 1, 0, {}, disabled_config)


class TestVisibleCells:
    """Test visibility scans."""

    def test_range_one(self, small_grid_config):
        """Range 1 sees the origin and its four neighbors."""
        visible = set(get_visible_cells(2, 2, 1, {}, small_grid_config))

        assert visible == {(2, 2), (1, 2), (3, 2), (2, 1), (2, 3)}

    def test_range_zero(self, small_grid_config):
        """Range 0 sees only the origin."""
        assert get_visible_cells(2, 2, 0, {}, small_grid_config) == [(2, 2)]

    def test_clipped_to_map(self, small_grid_config):
        """Cells off the map are not listed."""
        visible = set(get_visible_cells(0, 0, 1, {}, small_grid_config))

        assert visible == {(0, 0), (1, 0), (0, 1)}

    def test_wall_hides(self, grid_config, wall_cells):
        """Cells behind a wall are hidden; the wall itself is seen."""
        visible = set(get_visible_cells(3, 2, 4, wall_cells, grid_config))

        assert (4, 2) in visible
        assert (5, 2) in visible
        assert (6, 2) not in visible

    def test_matches_line_of_sight(self, grid_config, wall_cells):
        """Every visible cell has line of sight from the origin."""
        for x, y in get_visible_cells(3, 4, 5, wall_cells, grid_config):
            assert has_line_of_sight(3, 4, x, y, wall_cells, grid_config)

    def test_cancelled(self, grid_config):
        """A cancelled scan returns what it found, here nothing."""
        cancel_token = CancellationToken()
        cancel_token.cancel()

        assert get_visible_cells(5, 5, 3, {}, grid_config, cancel_token=cancel_token) == []

    def test_disabled_grid(self, disabled_config):
        """A disabled grid shows nothing."""
        assert get_visible_cells(0, 0, 3, {}, disabled_config) == []
