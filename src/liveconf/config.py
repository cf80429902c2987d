"""Client configuration for liveconf."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from liveconf._constants import (
    DEFAULT_COMMAND_ACK,
    DEFAULT_COMMAND_PATH,
    DEFAULT_COMMAND_PORT,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
)
from liveconf.exceptions import LiveConfConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise LiveConfConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class LiveConfConfig:
    """Client configuration.

    Parameters
    ----------
    local_url : str or Path
        Path or ``file://`` URI of the bootstrap document, read once at
        client construction.
    remote_url : str or None
        Full URL of the endpoint that returns the configuration document.
        ``None`` disables polling permanently.
    poll_interval : float
        Seconds to wait after each fetch before starting the next one.
    request_timeout : float
        Hard timeout in seconds for a single fetch.
    notify_new_keys : bool
        Report keys that first appear after the bootstrap document as
        changes. By default new keys are stored silently.
    command_port : int
        Port for the local command server.
    command_path : str
        Route of the command server.
    command_ack : str
        Fixed text returned for every command.
    interface : str or None
        Network interface whose address the command server binds to.
        Defaults to the platform's primary interface (``en0``, ``eth0``...).
    """

    local_url: str | Path
    remote_url: str | None = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    notify_new_keys: bool = False
    command_port: int = DEFAULT_COMMAND_PORT
    command_path: str = DEFAULT_COMMAND_PATH
    command_ack: str = DEFAULT_COMMAND_ACK
    interface: str | None = None

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise LiveConfConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.request_timeout <= 0:
            raise LiveConfConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if not self.command_path.startswith("/"):
            raise LiveConfConfigError(f"command_path must start with '/', got {self.command_path!r}")

    @classmethod
    def from_env(cls, **overrides: Any) -> LiveConfConfig:
        """Create configuration from ``LIVECONF_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        LiveConfConfigError
            If a numeric variable cannot be parsed, or no bootstrap
            document is configured.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "LIVECONF_LOCAL_URL": "local_url",
            "LIVECONF_REMOTE_URL": "remote_url",
            "LIVECONF_COMMAND_PATH": "command_path",
            "LIVECONF_COMMAND_ACK": "command_ack",
            "LIVECONF_INTERFACE": "interface",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "LIVECONF_POLL_INTERVAL": ("poll_interval", float),
            "LIVECONF_REQUEST_TIMEOUT": ("request_timeout", float),
            "LIVECONF_COMMAND_PORT": ("command_port", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        if "notify_new_keys" not in overrides:
            config_kwargs["notify_new_keys"] = _env_bool(env.get("LIVECONF_NOTIFY_NEW_KEYS"), False)

        config_kwargs.update(overrides)

        if "local_url" not in config_kwargs:
            raise LiveConfConfigError("LIVECONF_LOCAL_URL is not set")
        return cls(**config_kwargs)
