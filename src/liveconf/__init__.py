"""liveconf - Live configuration client with change notifications."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("liveconf")
except PackageNotFoundError:
    __version__ = "0+local"
from liveconf.address import primary_interface_name, resolve_local_address
from liveconf.client import LiveConfClient
from liveconf.command_server import CommandRequest, CommandServer
from liveconf.config import LiveConfConfig
from liveconf.exceptions import (
    CommandServerBindError,
    CommandServerError,
    ConfigBootstrapError,
    ConfigParseError,
    ConfigTransportError,
    KeyTypeMismatchError,
    LiveConfConfigError,
    LiveConfError,
    NoLocalAddressError,
)
from liveconf.models import (
    BoolValue,
    ConfigKey,
    DoubleArrayValue,
    DoubleValue,
    IntValue,
    StringValue,
    TypedValue,
    ValueType,
)
from liveconf.poller import PollLoop, PollState
from liveconf.store import ConfigStore, LoadReport
from liveconf.subscriptions import Subscription, SubscriptionManager

__all__ = [
    "__version__",
    "BoolValue",
    "CommandRequest",
    "CommandServer",
    "CommandServerBindError",
    "CommandServerError",
    "ConfigBootstrapError",
    "ConfigKey",
    "ConfigParseError",
    "ConfigStore",
    "ConfigTransportError",
    "DoubleArrayValue",
    "DoubleValue",
    "IntValue",
    "KeyTypeMismatchError",
    "LiveConfClient",
    "LiveConfConfig",
    "LiveConfConfigError",
    "LiveConfError",
    "LoadReport",
    "NoLocalAddressError",
    "PollLoop",
    "PollState",
    "StringValue",
    "Subscription",
    "SubscriptionManager",
    "TypedValue",
    "ValueType",
    "primary_interface_name",
    "resolve_local_address",
]
