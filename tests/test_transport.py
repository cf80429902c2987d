from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from liveconf._transport import HttpTransport
from liveconf.exceptions import ConfigTransportError

_SEEN_HEADERS = web.AppKey("seen_headers", list)


@pytest_asyncio.fixture
async def server() -> AsyncIterator[test_utils.TestServer]:
    seen_headers: list[dict[str, str]] = []

    async def config(request: web.Request) -> web.Response:
        seen_headers.append(dict(request.headers))
        return web.json_response({"Int:a": 1})

    async def empty(_request: web.Request) -> web.Response:
        return web.Response(body=b"")

    async def broken(_request: web.Request) -> web.Response:
        return web.Response(status=503, text="maintenance")

    async def slow(_request: web.Request) -> web.Response:
        await asyncio.sleep(1.0)
        return web.json_response({})

    app = web.Application()
    app[_SEEN_HEADERS] = seen_headers
    app.router.add_get("/config.json", config)
    app.router.add_get("/empty", empty)
    app.router.add_get("/broken", broken)
    app.router.add_get("/slow", slow)

    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    try:
        yield test_server
    finally:
        await test_server.close()


@pytest_asyncio.fixture
async def transport() -> AsyncIterator[HttpTransport]:
    async with aiohttp.ClientSession() as session:
        yield HttpTransport(session)


@pytest.mark.asyncio
async def test_fetch_returns_body_and_bypasses_cache(server: test_utils.TestServer, transport: HttpTransport) -> None:
    body = await transport.fetch(str(server.make_url("/config.json")), timeout=10.0)

    assert body == b'{"Int:a": 1}'
    headers = server.app[_SEEN_HEADERS][0]
    assert headers["Cache-Control"] == "no-cache"
    assert headers["Pragma"] == "no-cache"


@pytest.mark.asyncio
async def test_empty_body_is_a_transport_error(server: test_utils.TestServer, transport: HttpTransport) -> None:
    with pytest.raises(ConfigTransportError, match="Empty response body"):
        await transport.fetch(str(server.make_url("/empty")), timeout=10.0)


@pytest.mark.asyncio
async def test_non_2xx_is_a_transport_error(server: test_utils.TestServer, transport: HttpTransport) -> None:
    url = str(server.make_url("/broken"))
    with pytest.raises(ConfigTransportError) as exc_info:
        await transport.fetch(url, timeout=10.0)

    assert exc_info.value.status_code == 503
    assert exc_info.value.url == url


@pytest.mark.asyncio
async def test_timeout_is_a_transport_error(server: test_utils.TestServer, transport: HttpTransport) -> None:
    with pytest.raises(ConfigTransportError, match="timed out"):
        await transport.fetch(str(server.make_url("/slow")), timeout=0.1)


@pytest.mark.asyncio
async def test_connection_failure_is_a_transport_error(transport: HttpTransport) -> None:
    # Port 9 (discard) is essentially never listening on loopback.
    with pytest.raises(ConfigTransportError, match="failed"):
        await transport.fetch("http://127.0.0.1:9/config.json", timeout=2.0)
