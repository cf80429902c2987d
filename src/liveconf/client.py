"""High-level async client for live configuration."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from liveconf._transport import HttpTransport, Transport
from liveconf.bootstrap import load_local_document
from liveconf.command_server import CommandHandler, CommandServer
from liveconf.config import LiveConfConfig
from liveconf.exceptions import ConfigParseError, LiveConfError
from liveconf.poller import PollLoop
from liveconf.store import ConfigStore
from liveconf.subscriptions import RefreshListener, Subscription, SubscriptionManager, ValueListener

_logger = logging.getLogger(__name__)


class LiveConfClient:
    """Keeps a typed configuration in sync with a remote JSON endpoint.

    The bootstrap document is read when the client is constructed; a read
    failure raises :class:`~liveconf.exceptions.ConfigBootstrapError`. Once
    connected, the remote endpoint is polled and listeners are told about
    every value that changes.

    Usage::

        client = LiveConfClient(LiveConfConfig(local_url="config.json", remote_url=url))
        subscription = client.on_value_changed(lambda key, value: print(key, value.value))

        async with client:
            client.connect()
            ...
    """

    def __init__(
        self,
        config: LiveConfConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._subscriptions = SubscriptionManager()
        self._store = ConfigStore(self._subscriptions, notify_new_keys=config.notify_new_keys)
        self._poller: PollLoop | None = None
        self._command_server = CommandServer(
            path=config.command_path,
            ack=config.command_ack,
            interface=config.interface,
        )

        data = load_local_document(config.local_url)
        try:
            self._store.load(data)
        except ConfigParseError as exc:
            _logger.warning("Bootstrap document ignored, starting empty: %s", exc)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LiveConfClient:
        transport = self._transport
        if transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = HttpTransport(self._http_session)
        self._poller = PollLoop(
            self._store,
            transport,
            self._config.remote_url,
            interval=self._config.poll_interval,
            timeout=self._config.request_timeout,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._poller is not None:
            await self._poller.aclose()
            self._poller = None
        self.stop_command_server()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Start polling the remote endpoint.

        Without a configured remote URL this logs once and never fetches.
        """
        self._require_poller().connect()

    @property
    def poller(self) -> PollLoop | None:
        return self._poller

    def _require_poller(self) -> PollLoop:
        if self._poller is None:
            raise LiveConfError("Client not initialized. Use 'async with LiveConfClient(...) as client:'")
        return self._poller

    # ------------------------------------------------------------------
    # Values and listeners
    # ------------------------------------------------------------------

    @property
    def config(self) -> LiveConfConfig:
        return self._config

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def subscriptions(self) -> SubscriptionManager:
        return self._subscriptions

    @property
    def values(self) -> dict[str, Any]:
        """Snapshot of all current values as plain Python objects."""
        return self._store.as_dict()

    def on_value_changed(self, callback: ValueListener, *, keep: bool = False) -> Subscription:
        """Register *callback* for changed keys.

        The listener stays registered while the returned token is referenced,
        or until removed when *keep* is true.
        """
        return self._subscriptions.add_listener(callback, keep=keep)

    def on_refresh_with_changes(self, callback: RefreshListener, *, keep: bool = False) -> Subscription:
        return self._subscriptions.add_refresh_listener(callback, keep=keep)

    def remove_listener(self, subscription: Subscription) -> None:
        self._subscriptions.remove_listener(subscription)

    # ------------------------------------------------------------------
    # Command channel
    # ------------------------------------------------------------------

    @property
    def command_server(self) -> CommandServer:
        return self._command_server

    def start_command_server(
        self,
        on_command: CommandHandler,
        *,
        port: int | None = None,
        host: str | None = None,
    ) -> str | None:
        """Start the local command server and return its URL.

        Raises
        ------
        NoLocalAddressError
            If no local network address is available.
        CommandServerBindError
            If the server cannot listen.
        """
        self._command_server.start(
            self._config.command_port if port is None else port,
            on_command,
            host=host,
        )
        return self._command_server.url

    def stop_command_server(self) -> None:
        self._command_server.stop()
