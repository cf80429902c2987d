"""HTTP transport for fetching the remote configuration document."""

from __future__ import annotations

import logging
from typing import Protocol

import aiohttp

from liveconf._constants import CACHE_BYPASS_HEADERS, USER_AGENT
from liveconf.exceptions import ConfigTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the poll loop.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def fetch(self, url: str, *, timeout: float) -> bytes:
        ...


class HttpTransport:
    """GETs the configuration document, bypassing any caches."""

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session

    async def fetch(self, url: str, *, timeout: float) -> bytes:
        """Return the response body of a ``GET`` to *url*.

        Raises
        ------
        ConfigTransportError
            On network failure, timeout, a non-2xx status, or an empty body.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
            **CACHE_BYPASS_HEADERS,
        }

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                body = await resp.read()
                if not 200 <= resp.status < 300:
                    raise ConfigTransportError(
                        f"HTTP {resp.status} from {url}: {body[:200]!r}",
                        status_code=resp.status,
                        url=url,
                    )
        except ConfigTransportError:
            raise
        except TimeoutError as exc:
            raise ConfigTransportError(f"Request to {url} timed out after {timeout}s", url=url) from exc
        except aiohttp.ClientError as exc:
            raise ConfigTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        if not body:
            raise ConfigTransportError(f"Empty response body from {url}", status_code=resp.status, url=url)
        return body
