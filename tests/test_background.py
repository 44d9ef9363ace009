"""Tests for background grid queries and cancellation."""
import asyncio
import threading

import pytest

from battlegrid.core.background import ReachabilitySearch, run_in_background
from battlegrid.core.cancellation import CancellationToken
from battlegrid.core.grid import GridConfig, GridTokenData
from battlegrid.core.line_of_sight import get_visible_cells
from battlegrid.core.movement import calculate_reachable_cells


class TestCancellationToken:
    """Test the cancellation flag."""

    def test_starts_uncancelled(self):
        """New tokens are not cancelled."""
        assert CancellationToken().is_cancelled is False

    def test_cancel(self):
        """Cancelling is sticky."""
        token = CancellationToken()
        token.cancel()
        token.cancel()

        assert token.is_cancelled is True


class TestRunInBackground:
    """Test running queries in the executor."""

    @pytest.mark.asyncio
    async def test_same_result_as_direct_call(self, grid_config):
        """A background query returns what a direct call returns."""
        result = await run_in_background(get_visible_cells, 5, 5, 3, {}, grid_config)

        assert result == get_visible_cells(5, 5, 3, {}, grid_config)

    @pytest.mark.asyncio
    async def test_runs_off_loop_thread(self):
        """Queries run on an executor thread."""
        loop_thread = threading.get_ident()

        worker_thread = await run_in_background(threading.get_ident)

        assert worker_thread != loop_thread


class TestReachabilitySearch:
    """Test superseding searches per token."""

    @pytest.mark.asyncio
    async def test_completed_search(self, grid_config, fighter_token):
        """An uncontested search completes with the full result."""
        search = ReachabilitySearch()

        cells, completed = await search.submit(fighter_token, {}, grid_config)

        assert completed is True
        assert cells == calculate_reachable_cells(fighter_token, {}, grid_config)
        assert not search.is_searching(fighter_token.id)

    @pytest.mark.asyncio
    async def test_new_search_supersedes_old(self):
        """A second search for the same token cancels the first."""
        big_grid = GridConfig(cell_size=1, map_width=400, map_height=400, feet_per_cell=5)
        token = GridTokenData(id="wizard-1", cell_x=200, cell_y=200, speed_feet=2000)
        moved = GridTokenData(id="wizard-1", cell_x=201, cell_y=200, speed_feet=5)
        search = ReachabilitySearch()

        first = asyncio.ensure_future(search.submit(token, {}, big_grid))
        await asyncio.sleep(0)
        second_cells, second_completed = await search.submit(moved, {}, big_grid)
        _, first_completed = await first

        assert first_completed is False
        assert second_completed is True
        assert len(second_cells) == 8
        assert not search.is_searching("wizard-1")

    @pytest.mark.asyncio
    async def test_cancel(self, grid_config, fighter_token):
        """Cancelling an idle token reports nothing to cancel."""
        search = ReachabilitySearch()

        assert search.cancel(fighter_token.id) is False
