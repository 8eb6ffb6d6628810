"""Fire-and-forget storage writes.

The repository never awaits persistence. Each write is a side-effect only:
failures are logged and reported on the event bus, never propagated, and the
in-memory mutation that triggered the write is never rolled back.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from timeflow.core.events.events import StorageWriteFailedEvent

if TYPE_CHECKING:
    from timeflow.core.events.event_bus import EventBus

LOGGER = logging.getLogger(__name__)


class StorageWriter:
    """Schedules storage coroutines without awaiting them.

    - With a running event loop: the write becomes a task on that loop and is
      tracked until done (``drain()`` awaits the outstanding ones). Each task
      waits for the previously submitted one, so writes reach storage in
      submission order even when the backend hands them to worker threads.
    - Without a running loop: the write runs to completion on a private loop
      before ``submit()`` returns.
    """

    def __init__(self, event_bus: EventBus) -> None:
        self._event_bus = event_bus
        self._pending: set[asyncio.Task[None]] = set()
        self._tail: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(
        self,
        operation: str,
        activity_id: str | None,
        write: Callable[[], Awaitable[None]],
    ) -> None:
        """Run ``write()`` best-effort, labelled for logging."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._guarded(operation, activity_id, write))
            return

        previous = self._tail
        if previous is not None and (previous.done() or previous.get_loop() is not loop):
            previous = None

        task = loop.create_task(self._after(previous, operation, activity_id, write))
        self._tail = task
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every write scheduled on the running loop."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def _after(
        self,
        previous: asyncio.Task[None] | None,
        operation: str,
        activity_id: str | None,
        write: Callable[[], Awaitable[None]],
    ) -> None:
        if previous is not None:
            await asyncio.wait([previous])
        await self._guarded(operation, activity_id, write)

    async def _guarded(
        self,
        operation: str,
        activity_id: str | None,
        write: Callable[[], Awaitable[None]],
    ) -> None:
        try:
            await write()
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Storage %s failed (activity_id=%s)", operation, activity_id)
            self._event_bus.emit(
                StorageWriteFailedEvent(
                    operation=operation,
                    activity_id=activity_id,
                    error=repr(exc),
                )
            )
