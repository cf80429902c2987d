"""Discovery of the machine's advertisable local network address."""

from __future__ import annotations

import logging
import socket
import sys

import psutil

from liveconf._constants import PRIMARY_INTERFACES

_logger = logging.getLogger(__name__)

_FAMILIES = (socket.AF_INET, socket.AF_INET6)


def primary_interface_name(platform: str | None = None) -> str:
    """Conventional name of the primary network interface on *platform*."""
    platform = platform or sys.platform
    for prefix, name in PRIMARY_INTERFACES.items():
        if platform.startswith(prefix):
            return name
    return PRIMARY_INTERFACES["linux"]


def resolve_local_address(
    interface: str | None = None,
    *,
    family: socket.AddressFamily | None = None,
) -> str | None:
    """Return the first IPv4 or IPv6 address bound to *interface*.

    *interface* defaults to :func:`primary_interface_name`. Pass *family*
    to accept only ``AF_INET`` or ``AF_INET6`` addresses. IPv6 link-local
    addresses keep their ``%scope`` suffix so they can be bound.

    This is a one-shot query; it does not watch for network changes.
    """
    name = interface or primary_interface_name()
    addresses = psutil.net_if_addrs().get(name)
    if not addresses:
        _logger.warning("Network interface %s not found", name)
        return None

    families = (family,) if family is not None else _FAMILIES
    for entry in addresses:
        if entry.family in families and entry.address:
            return str(entry.address)

    _logger.warning("No IP address bound to network interface %s", name)
    return None
