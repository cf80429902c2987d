"""Internal constants shared across the library."""

USER_AGENT = "liveconf"

#: Seconds between the end of one poll and the start of the next.
DEFAULT_POLL_INTERVAL: float = 1.0
#: Hard timeout for a single remote fetch, in seconds.
DEFAULT_REQUEST_TIMEOUT: float = 10.0

DEFAULT_COMMAND_PORT = 8080
DEFAULT_COMMAND_PATH = "/command"
DEFAULT_COMMAND_ACK = "OK"

# Headers that make intermediaries and the server skip cached copies.
CACHE_BYPASS_HEADERS: dict[str, str] = {
    "cache-control": "no-cache",
    "pragma": "no-cache",
}

# Conventional primary interface per ``sys.platform`` prefix.
PRIMARY_INTERFACES: dict[str, str] = {
    "darwin": "en0",
    "linux": "eth0",
    "win32": "Ethernet",
}
