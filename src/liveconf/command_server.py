"""Local HTTP command channel.

External tooling pushes one-shot commands into a running application by
POSTing to a single route, ``/command`` by default. The server runs on a
dedicated thread with its own event loop, so slow command handlers never
stall configuration polling and vice versa.
"""

from __future__ import annotations

import asyncio
import json
import logging
import socket
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from aiohttp import web

from liveconf._constants import DEFAULT_COMMAND_ACK, DEFAULT_COMMAND_PATH
from liveconf.address import resolve_local_address
from liveconf.exceptions import CommandServerBindError, NoLocalAddressError


@dataclass(frozen=True)
class CommandRequest:
    """A command received on the command route."""

    method: str
    path: str
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    remote: str | None = None

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)


CommandHandler = Callable[[CommandRequest], Any]


def _bind_socket(host: str, port: int) -> socket.socket:
    family, type_, proto, _canon, sockaddr = socket.getaddrinfo(
        host,
        port,
        type=socket.SOCK_STREAM,
        flags=socket.AI_PASSIVE,
    )[0]
    sock = socket.socket(family, type_, proto)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(sockaddr)
        sock.listen(128)
        sock.setblocking(False)
    except OSError:
        sock.close()
        raise
    return sock


def _format_host(host: str) -> str:
    return f"[{host}]" if ":" in host else host


class CommandServer:
    """Single-route HTTP server that forwards requests to a handler.

    Every request to the command route calls ``on_command`` with a
    :class:`CommandRequest` on the server thread, then answers with the
    fixed acknowledgement text. What the handler returns or raises is
    never surfaced to the sender.
    """

    def __init__(
        self,
        *,
        path: str = DEFAULT_COMMAND_PATH,
        ack: str = DEFAULT_COMMAND_ACK,
        interface: str | None = None,
        start_timeout: float = 10.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._path = path
        self._ack = ack
        self._interface = interface
        self._start_timeout = start_timeout
        self._logger = logger or logging.getLogger(__name__)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._runner: web.AppRunner | None = None
        self._address: tuple[str, int] | None = None

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    @property
    def address(self) -> tuple[str, int] | None:
        """``(host, port)`` the server is bound to, once started."""
        return self._address

    @property
    def url(self) -> str | None:
        """Advertisable URL of the command route."""
        if self._address is None:
            return None
        host, port = self._address
        return f"http://{_format_host(host)}:{port}{self._path}"

    def start(self, port: int, on_command: CommandHandler, *, host: str | None = None) -> None:
        """Bind and start serving.

        The local network address is resolved unless *host* is given.
        Restarts the server if it is already running.

        Raises
        ------
        NoLocalAddressError
            If no local network address could be found.
        CommandServerBindError
            If the socket cannot be bound or the server fails to start.
        """
        self.stop()

        bind_host = host or resolve_local_address(self._interface)
        if bind_host is None:
            raise NoLocalAddressError("No local network address found for the command server")

        try:
            sock = _bind_socket(bind_host, port)
        except OSError as exc:
            raise CommandServerBindError(
                f"Cannot listen on {bind_host}:{port}: {exc}",
                host=bind_host,
                port=port,
            ) from exc
        bound_port = int(sock.getsockname()[1])

        loop = asyncio.new_event_loop()
        thread = threading.Thread(
            target=self._run_loop,
            args=(loop,),
            name="liveconf-command-server",
            daemon=True,
        )
        thread.start()

        future = asyncio.run_coroutine_threadsafe(self._serve(sock, on_command), loop)
        try:
            runner = future.result(timeout=self._start_timeout)
        except Exception as exc:
            future.cancel()
            self._shutdown(loop, thread, None)
            sock.close()
            raise CommandServerBindError(
                f"Command server failed to start on {bind_host}:{bound_port}: {exc}",
                host=bind_host,
                port=bound_port,
            ) from exc

        self._loop = loop
        self._thread = thread
        self._runner = runner
        self._address = (bind_host.split("%", 1)[0], bound_port)
        self._logger.info("Command server started at %s", self.url)

    def stop(self) -> None:
        """Stop serving and release the socket. No-op when not started."""
        loop, thread, runner = self._loop, self._thread, self._runner
        self._loop = None
        self._thread = None
        self._runner = None
        self._address = None
        if loop is None or thread is None:
            return
        self._shutdown(loop, thread, runner)
        self._logger.debug("Command server stopped")

    # ------------------------------------------------------------------
    # Server thread
    # ------------------------------------------------------------------

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    async def _serve(self, sock: socket.socket, on_command: CommandHandler) -> web.AppRunner:
        async def handle(request: web.Request) -> web.Response:
            command = CommandRequest(
                method=request.method,
                path=request.path,
                body=await request.read(),
                headers=dict(request.headers),
                query=dict(request.query),
                remote=request.remote,
            )
            self._logger.debug("Command received from %s (%d bytes)", command.remote, len(command.body))
            try:
                on_command(command)
            except Exception:
                self._logger.warning("Command handler failed", exc_info=True)
            return web.Response(text=self._ack)

        app = web.Application()
        app.router.add_post(self._path, handle)

        runner = web.AppRunner(app)
        await runner.setup()
        try:
            site = web.SockSite(runner, sock)
            await site.start()
        except BaseException:
            # Also reached when start() gives up waiting and cancels us.
            await runner.cleanup()
            raise
        return runner

    @staticmethod
    async def _cancel_pending() -> None:
        current = asyncio.current_task()
        tasks = [task for task in asyncio.all_tasks() if task is not current]
        for task in tasks:
            # Tasks already being cancelled may be cleaning up.
            if not task.cancelling():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _shutdown(
        self,
        loop: asyncio.AbstractEventLoop,
        thread: threading.Thread,
        runner: web.AppRunner | None,
    ) -> None:
        try:
            if runner is not None:
                asyncio.run_coroutine_threadsafe(runner.cleanup(), loop).result(timeout=self._start_timeout)
            asyncio.run_coroutine_threadsafe(self._cancel_pending(), loop).result(timeout=self._start_timeout)
        except TimeoutError:
            self._logger.warning("Command server did not shut down cleanly in time")
        finally:
            loop.call_soon_threadsafe(loop.stop)
            thread.join(timeout=self._start_timeout)
            if thread.is_alive():
                self._logger.warning("Command server thread did not exit in time")
            else:
                loop.close()
