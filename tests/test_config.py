from __future__ import annotations

import pytest

from liveconf.config import LiveConfConfig
from liveconf.exceptions import LiveConfConfigError


def test_defaults() -> None:
    config = LiveConfConfig(local_url="config.json")

    assert config.remote_url is None
    assert config.poll_interval == 1.0
    assert config.request_timeout == 10.0
    assert config.command_path == "/command"
    assert config.command_ack == "OK"
    assert config.notify_new_keys is False


def test_from_env_reads_liveconf_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIVECONF_LOCAL_URL", "/tmp/config.json")
    monkeypatch.setenv("LIVECONF_REMOTE_URL", "http://10.0.0.2:8000/config.json")
    monkeypatch.setenv("LIVECONF_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("LIVECONF_COMMAND_PORT", "9001")
    monkeypatch.setenv("LIVECONF_NOTIFY_NEW_KEYS", "yes")
    monkeypatch.setenv("LIVECONF_INTERFACE", "wlan0")

    config = LiveConfConfig.from_env()

    assert config.local_url == "/tmp/config.json"
    assert config.remote_url == "http://10.0.0.2:8000/config.json"
    assert config.poll_interval == 0.5
    assert config.command_port == 9001
    assert config.notify_new_keys is True
    assert config.interface == "wlan0"


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIVECONF_LOCAL_URL", "/tmp/config.json")
    monkeypatch.setenv("LIVECONF_POLL_INTERVAL", "not-a-number")
    monkeypatch.setenv("LIVECONF_NOTIFY_NEW_KEYS", "true")

    config = LiveConfConfig.from_env(poll_interval=2.0, notify_new_keys=False, local_url="other.json")

    assert config.poll_interval == 2.0
    assert config.notify_new_keys is False
    assert config.local_url == "other.json"


def test_from_env_rejects_bad_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIVECONF_LOCAL_URL", "/tmp/config.json")
    monkeypatch.setenv("LIVECONF_COMMAND_PORT", "eighty")

    with pytest.raises(LiveConfConfigError, match="LIVECONF_COMMAND_PORT"):
        LiveConfConfig.from_env()


def test_from_env_requires_local_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LIVECONF_LOCAL_URL", raising=False)

    with pytest.raises(LiveConfConfigError):
        LiveConfConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [{"poll_interval": 0}, {"request_timeout": -1.0}, {"command_path": "command"}],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(LiveConfConfigError):
        LiveConfConfig(local_url="config.json", **kwargs)  # type: ignore[arg-type]
