"""Tests for cover calculation."""
import logging
import math

import pytest

from battlegrid.core.errors import ErrorCode, GridConfigError
from battlegrid.core.cover import (
    CoverLevel,
    calculate_cover,
    classify_cover,
    get_cell_corners,
    get_cover_description,
)
from battlegrid.core.grid import CellState

COVER_RANK = {
    CoverLevel.NONE: 0,
    CoverLevel.HALF: 1,
    CoverLevel.THREE_QUARTERS: 2,
    CoverLevel.TOTAL: 3,
}


@pytest.fixture
def full_wall():
    """A wall at x=2 tall enough to hide row 2 completely."""
    return {(2, y): CellState.BLOCKED for y in range(6)}


class TestCoverLevels:
    """Test the blocked-line thresholds."""

    @pytest.mark.parametrize("blocked,expected", [
        (16, CoverLevel.TOTAL),
        (15, CoverLevel.THREE_QUARTERS),
        (12, CoverLevel.THREE_QUARTERS),
        (11, CoverLevel.HALF),
        (8, CoverLevel.HALF),
        (7, CoverLevel.NONE),
        (0, CoverLevel.NONE),
    ])
    def test_classify(self, blocked, expected):
        """Cover tiers at 100%, 75% and 50% of lines blocked."""
        assert classify_cover(blocked, 16) == expected

    def test_no_lines(self):
        """No lines means no cover."""
        assert classify_cover(0, 0) == CoverLevel.NONE

    def test_descriptions(self):
        """Levels have display labels."""
        assert get_cover_description(CoverLevel.HALF) == "Half Cover (+2 AC/DEX)"
        assert get_cover_description("three-quarters") == "Three-Quarters Cover (+5 AC/DEX)"

    def test_cell_corners(self):
        """A cell has four unit-square corners."""
        assert set(get_cell_corners(2, 3)) == {(2, 3), (3, 3), (2, 4), (3, 4)}


class TestCalculateCover:
    """Test cover between cells."""

    def test_same_cell(self, grid_config, full_wall):
        """A creature has no cover from its own cell."""
        result = calculate_cover(2, 2, 2, 2, full_wall, grid_config)

        assert result.level == CoverLevel.NONE
        assert result.can_be_targeted is True
        assert result.total_lines == 0
        assert result.blocked_lines == 0

    def test_open_ground(self, grid_config):
        """Nothing in between means no cover."""
        result = calculate_cover(0, 0, 5, 0, {}, grid_config)

        assert result.level == CoverLevel.NONE
        assert result.total_lines == 16
        assert result.blocked_lines == 0
        assert result.ac_bonus == 0

    def test_total_cover(self, grid_config, full_wall):
        """A solid wall gives total cover."""
        result = calculate_cover(0, 2, 4, 2, full_wall, grid_config)

        assert result.level == CoverLevel.TOTAL
        assert result.blocked_lines == 16
        assert result.can_be_targeted is False
        assert math.isinf(result.ac_bonus)
        assert math.isinf(result.dex_save_bonus)

    def test_difficult_gives_no_cover(self, grid_config):
        """Difficult terrain does not provide cover."""
        states = {(2, y): CellState.DIFFICULT for y in range(6)}

        assert calculate_cover(0, 2, 4, 2, states, grid_config).level == CoverLevel.NONE

    def test_more_walls_never_less_cover(self, grid_config):
        """Adding blocked cells never lowers cover."""
        layouts = [
            {},
            {(2, 2): CellState.BLOCKED},
            {(2, 2): CellState.BLOCKED, (2, 3): CellState.BLOCKED},
            {(2, y): CellState.BLOCKED for y in range(1, 4)},
            {(2, y): CellState.BLOCKED for y in range(6)},
        ]
        results = [calculate_cover(0, 2, 4, 2, states, grid_config) for states in layouts]

        for before, after in zip(results, results[1:]):
            assert after.blocked_lines >= before.blocked_lines
            assert COVER_RANK[after.level] >= COVER_RANK[before.level]

    def test_three_quarters_cover(self, grid_config):
        """A single block beside the target row hides all but the top edge lines."""
        states = {(2, 0): CellState.BLOCKED}

        result = calculate_cover(0, 0, 4, 0, states, grid_config)

        assert result.blocked_lines == 12
        assert result.level == CoverLevel.THREE_QUARTERS
        assert result.ac_bonus == 5
        assert result.can_be_targeted is True

    def test_half_cover(self, grid_config):
        """A low wall hides the lines leaving the attacker's lower edge."""
        states = {(1, 0): CellState.BLOCKED, (2, 0): CellState.BLOCKED}

        result = calculate_cover(0, 0, 4, 1, states, grid_config)

        assert result.blocked_lines == 8
        assert result.level == CoverLevel.HALF
        assert result.ac_bonus == 2
        assert result.dex_save_bonus == 2

    def test_samples_from_settings(self, grid_config, full_wall, monkeypatch):
        """The configured division count is used by default."""
        monkeypatch.setenv("BATTLEGRID_COVER_SAMPLES", "40")

        default = calculate_cover(0, 2, 4, 2, full_wall, grid_config)

        assert default == calculate_cover(0, 2, 4, 2, full_wall, grid_config, samples=40)
        assert default.level == CoverLevel.TOTAL

    @pytest.mark.parametrize("samples", ["0", "1", "-5"])
    def test_settings_reject_too_few_samples(self, grid_config, full_wall, monkeypatch, samples):
        """Fewer than two divisions is a configuration error."""
        monkeypatch.setenv("BATTLEGRID_COVER_SAMPLES", samples)

        with pytest.raises(GridConfigError) as exc_info:
            calculate_cover(0, 2, 4, 2, full_wall, grid_config)

        assert exc_info.value.code == ErrorCode.GRID_INVALID_CONFIG
        assert exc_info.value.details["field"] == "BATTLEGRID_COVER_SAMPLES"

    @pytest.mark.parametrize("samples", [0, 1, -3])
    def test_too_few_samples_raised_to_minimum(self, grid_config, samples, caplog):
        """An explicit count below two is raised to two instead of failing."""
        states = {(1, 0): CellState.BLOCKED}

        with caplog.at_level(logging.WARNING, logger="battlegrid"):
            result = calculate_cover(0, 0, 3, 0, states, grid_config, samples=samples)

        assert result == calculate_cover(0, 0, 3, 0, states, grid_config, samples=2)
        assert result.total_lines == 16
        assert "too low" in caplog.text

    def test_disabled_grid(self, disabled_config, full_wall):
        """A disabled grid gives no cover."""
        result = calculate_cover(0, 2, 4, 2, full_wall, disabled_config)

        assert result.level == CoverLevel.NONE
        assert result.can_be_targeted is True

    def test_to_dict(self, grid_config, full_wall):
        """Results serialize the level by value."""
        data = calculate_cover(0, 2, 4, 2, full_wall, grid_config).to_dict()

        assert data["level"] == "total"
        assert data["can_be_targeted"] is False
