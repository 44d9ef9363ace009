"""Cooperative cancellation for long-running grid queries."""
import threading


class CancellationToken:
    """Cancellation flag shared between a caller and a running search."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Ask the search to stop at its next checkpoint."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()
