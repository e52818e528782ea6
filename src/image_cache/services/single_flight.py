"""Per-key request coalescing.

Concurrent callers asking for the same key share one execution of the
expensive work. The work runs in a task owned by the registry, so the
caller that started it has no special role: its timeout or cancellation
only ends its own wait. The work is cancelled once every caller waiting
on it has gone. The key is released as soon as the result (or error) is
published, so the next caller after that starts fresh.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Flight:
    """One shared execution and the number of callers awaiting it."""

    __slots__ = ("task", "waiters")

    def __init__(self, task: "asyncio.Task[Any]") -> None:
        self.task = task
        self.waiters = 0


class SingleFlight:
    """Registry of in-flight work keyed by string.

    Example:
        ```python
        flights = SingleFlight()
        result = await flights.do(cache_key, lambda: fetch_and_transform(request))
        ```
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, _Flight] = {}

    async def do(self, key: str, work: Callable[[], Awaitable[T]]) -> T:
        """Run ``work`` unless another caller is already running it for ``key``.

        Args:
            key: Coalescing key
            work: Zero-argument coroutine factory producing the result

        Returns:
            The result of the (possibly shared) execution

        Raises:
            Whatever ``work`` raised, in every caller sharing it
        """
        flight = self._in_flight.get(key)
        if flight is None:
            flight = _Flight(asyncio.ensure_future(work()))
            self._in_flight[key] = flight
            flight.task.add_done_callback(lambda task: self._release(key, flight))
        else:
            logger.debug(f"[SingleFlight] Joining in-flight work: {key}")

        flight.waiters += 1
        try:
            # Cancelling one caller must not cancel the shared task
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                logger.debug(f"[SingleFlight] All callers left, cancelling: {key}")
                self._forget(key, flight)
                flight.task.cancel()

    def _release(self, key: str, flight: _Flight) -> None:
        self._forget(key, flight)
        # Mark retrieved so an abandoned failure does not log "exception never retrieved"
        if not flight.task.cancelled():
            flight.task.exception()

    def _forget(self, key: str, flight: _Flight) -> None:
        if self._in_flight.get(key) is flight:
            del self._in_flight[key]

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)
