"""Periodic retrieval of the remote configuration document."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import StrEnum

from liveconf._constants import DEFAULT_POLL_INTERVAL, DEFAULT_REQUEST_TIMEOUT
from liveconf._transport import Transport
from liveconf.exceptions import ConfigParseError, ConfigTransportError
from liveconf.store import ConfigStore, LoadReport

_logger = logging.getLogger(__name__)


class PollState(StrEnum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    IN_FLIGHT = "in_flight"
    TERMINAL = "terminal"
    CLOSED = "closed"


class PollLoop:
    """Fetch the remote document every *interval* seconds and merge it.

    The next fetch is scheduled only after the previous one completes, so
    at most one request is ever outstanding. Transport and parse failures
    are logged and the loop carries on. Without a remote URL the loop
    never fetches anything.

    Usage::

        loop = PollLoop(store, transport, "http://192.168.1.10:8000/config.json")
        loop.connect()  # inside a running event loop
    """

    def __init__(
        self,
        store: ConfigStore,
        transport: Transport,
        remote_url: str | None,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._store = store
        self._transport = transport
        self._remote_url = remote_url
        self._interval = interval
        self._timeout = timeout
        self._state = PollState.IDLE
        self._loop: asyncio.AbstractEventLoop | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None
        self._fetch_count = 0

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def fetch_count(self) -> int:
        """Number of fetch attempts started so far."""
        return self._fetch_count

    @property
    def remote_url(self) -> str | None:
        return self._remote_url

    def connect(self) -> None:
        """Start polling. Calling it again is a no-op.

        Must be called from a running event loop unless no remote URL is
        configured, in which case the loop becomes terminal immediately.
        """
        if self._state is not PollState.IDLE:
            return
        if self._remote_url is None:
            _logger.warning("Remote URL not available; live configuration updates disabled")
            self._state = PollState.TERMINAL
            return
        self._loop = asyncio.get_running_loop()
        self._schedule()

    def close(self) -> None:
        """Cancel the pending timer and any in-flight fetch."""
        self._state = PollState.CLOSED
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def aclose(self) -> None:
        """Like :meth:`close`, but also wait for the in-flight fetch to unwind."""
        task = self._task
        self.close()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def poll_once(self) -> LoadReport | None:
        """Perform a single fetch and merge.

        Returns the :class:`LoadReport`, or ``None`` when the fetch or the
        parse failed (both are logged, never raised).
        """
        if self._remote_url is None:
            return None
        self._fetch_count += 1
        try:
            data = await self._transport.fetch(self._remote_url, timeout=self._timeout)
        except ConfigTransportError as exc:
            _logger.warning("Config fetch failed: %s", exc)
            return None

        try:
            return self._store.load(data)
        except ConfigParseError as exc:
            _logger.warning("Ignoring remote config document: %s", exc)
            return None

    def _schedule(self) -> None:
        assert self._loop is not None  # noqa: S101
        self._state = PollState.SCHEDULED
        self._timer = self._loop.call_later(self._interval, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if self._state is not PollState.SCHEDULED:
            return
        assert self._loop is not None  # noqa: S101
        self._state = PollState.IN_FLIGHT
        self._task = self._loop.create_task(self._run_tick())

    async def _run_tick(self) -> None:
        try:
            await self.poll_once()
        except Exception:
            _logger.warning("Unexpected error during config poll", exc_info=True)
        finally:
            self._task = None
            if self._state is PollState.IN_FLIGHT:
                self._schedule()
