"""
Background execution for expensive grid queries.

Reachability, visibility and cover queries are pure but can be slow for
large budgets. They accept a CancellationToken that is checked between
frontier expansions, and can be run on the default executor so an
interactive caller is never blocked.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple
import asyncio
import functools
import logging
import threading

from battlegrid.core.cancellation import CancellationToken
from battlegrid.core.grid import CellStateMap, GridConfig, GridTokenData
from battlegrid.core.movement import ReachableCell, calculate_reachable_cells

logger = logging.getLogger(__name__)


async def run_in_background(func: Callable[..., Any], *args, **kwargs) -> Any:
    """Run a pure grid query in the default executor."""
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


class ReachabilitySearch:
    """
    Runs reachability searches off the caller's thread.

    Only one search per token id is considered current: submitting a new
    search for a token that is still being searched cancels the previous one,
    whose (partial) result the caller should discard.
    """

    def __init__(self):
        self._in_flight: Dict[str, CancellationToken] = {}
        self._lock = threading.Lock()

    def cancel(self, token_id: str) -> bool:
        """Cancel the current search for a token, if any."""
        with self._lock:
            cancel_token = self._in_flight.pop(token_id, None)
        if cancel_token is None:
            return False
        cancel_token.cancel()
        logger.debug(f"Cancelled reachability search for token {token_id}")
        return True

    def is_searching(self, token_id: str) -> bool:
        with self._lock:
            return token_id in self._in_flight

    async def submit(
        self,
        token: GridTokenData,
        cell_states: CellStateMap,
        config: GridConfig,
        **kwargs
    ) -> Tuple[List[ReachableCell], bool]:
        """
        Search reachable cells for a token in the background.

        Args:
            token: The moving token
            cell_states: Snapshot of the cell state map
            config: Grid configuration
            **kwargs: Extra arguments for calculate_reachable_cells

        Returns:
            Tuple of (reachable_cells, completed). completed is False when the
            search was superseded or cancelled before it finished.
        """
        cancel_token = CancellationToken()
        with self._lock:
            previous: Optional[CancellationToken] = self._in_flight.get(token.id)
            self._in_flight[token.id] = cancel_token
        if previous is not None:
            previous.cancel()
            logger.debug(f"Superseded reachability search for token {token.id}")

        try:
            result = await run_in_background(
                calculate_reachable_cells,
                token,
                cell_states,
                config,
                cancel_token=cancel_token,
                **kwargs
            )
        finally:
            with self._lock:
                if self._in_flight.get(token.id) is cancel_token:
                    del self._in_flight[token.id]

        return result, not cancel_token.is_cancelled
