"""Periodic liveness signal for an active test run."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

log = logging.getLogger(__name__)

# Seconds between two heartbeats
HEARTBEAT_INTERVAL = 5.0


class HeartbeatSender(Protocol):
    """Anything able to send a heartbeat for a test run."""

    async def send_sdk_heartbeat(self, test_run_id: int) -> None:
        """Send one heartbeat."""


@dataclass(kw_only=True)
class TestRunHeartbeatService:
    """Sends heartbeats for a test run until ended.

    At most one heartbeat is scheduled or in flight at any time. The next one
    is armed only after the previous one was sent and only while enabled.
    A failed heartbeat halts the schedule; the failure is logged and handed
    to ``on_error``.
    """

    __test__ = False

    test_run_id: int
    auto_api: HeartbeatSender
    interval: float = HEARTBEAT_INTERVAL
    on_error: Callable[[Exception], None] | None = None
    sleep: Callable[[float], Awaitable[None]] = field(
        default=asyncio.sleep, repr=False
    )
    _enabled: bool = field(default=False, init=False)
    _next_heartbeat: asyncio.Task[None] | None = field(
        default=None, init=False, repr=False
    )

    async def start(self) -> None:
        """Start sending heartbeats, replacing any previous schedule."""
        await self.end()

        self._enabled = True
        self._schedule_next_heartbeat()

    def is_enabled(self) -> bool:
        """Check whether heartbeats are currently being scheduled."""
        return self._enabled

    async def end(self) -> None:
        """Stop scheduling heartbeats.

        Waits for the currently scheduled heartbeat, so no heartbeat is sent
        once this returns.
        """
        self._enabled = False
        if self._next_heartbeat is not None:
            log.debug("Ending Applause SDK Heartbeat")
            await self._next_heartbeat
            log.debug("Applause SDK Heartbeat Ended Successfully")
        self._next_heartbeat = None

    def _schedule_next_heartbeat(self) -> None:
        if not self._enabled:
            return
        self._next_heartbeat = asyncio.create_task(self._heartbeat_after_delay())

    async def _heartbeat_after_delay(self) -> None:
        await self.sleep(self.interval)
        await self._send_heartbeat()

    async def _send_heartbeat(self) -> None:
        log.debug("Sending heartbeat")
        try:
            await self.auto_api.send_sdk_heartbeat(self.test_run_id)
        except Exception as exc:
            log.warning(
                "Heartbeat for test run %s failed, no further heartbeats will be sent",
                self.test_run_id,
                exc_info=exc,
            )
            self._enabled = False
            if self.on_error is not None:
                self.on_error(exc)
            return
        log.debug("Heartbeat sent")
        self._schedule_next_heartbeat()
