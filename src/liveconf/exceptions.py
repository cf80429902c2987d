"""Custom exception hierarchy for liveconf."""

from __future__ import annotations


class LiveConfError(Exception):
    """Base exception for all liveconf errors."""


class LiveConfConfigError(LiveConfError):
    """Invalid or missing configuration."""


class ConfigBootstrapError(LiveConfError):
    """The local bootstrap document could not be read.

    Raised while constructing a client; there is no retry.
    """

    def __init__(self, message: str, *, uri: str = "") -> None:
        self.uri = uri
        super().__init__(message)


class ConfigParseError(LiveConfError):
    """A configuration document is not valid JSON or not a JSON object."""


class KeyTypeMismatchError(LiveConfError):
    """A value's JSON type does not match the type tag of its key."""

    def __init__(self, key: str, *, expected: str, actual: str) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(f"{key}: expected {expected}, got {actual}")


class ConfigTransportError(LiveConfError):
    """HTTP-level failure (network, timeout, non-2xx, empty body)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class CommandServerError(LiveConfError):
    """The command server could not be started."""


class NoLocalAddressError(CommandServerError):
    """No address is bound to the primary network interface."""


class CommandServerBindError(CommandServerError):
    """Binding or listening on the command server socket failed.

    The underlying ``OSError`` is available as ``__cause__``.
    """

    def __init__(self, message: str, *, host: str = "", port: int | None = None) -> None:
        self.host = host
        self.port = port
        super().__init__(message)
