#!/usr/bin/env python3
"""Watch a live configuration endpoint and print every change.

Loads the bootstrap document, polls the remote endpoint and prints each
changed key. Optionally starts the local command server and prints the
commands it receives.

Examples::

    python scripts/watch_config.py config.json --remote http://192.168.1.10:8000/config.json
    python scripts/watch_config.py config.json --remote http://localhost:8000/config.json \
        --command-port 8080 --host 127.0.0.1
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from liveconf import (  # noqa: E402
    CommandRequest,
    CommandServerError,
    LiveConfClient,
    LiveConfConfig,
    LiveConfError,
    TypedValue,
)

_LOG = logging.getLogger("watch_config")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("bootstrap", help="Path or file:// URI of the bootstrap JSON document")
    parser.add_argument("--remote", default=None, help="URL of the remote configuration endpoint")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between polls (default: 1.0)")
    parser.add_argument("--timeout", type=float, default=10.0, help="Request timeout in seconds (default: 10)")
    parser.add_argument("--notify-new-keys", action="store_true", help="Report keys added after bootstrap")
    parser.add_argument("--command-port", type=int, default=None, help="Start the command server on this port")
    parser.add_argument("--host", default=None, help="Bind the command server to this host instead of en0/eth0")
    parser.add_argument("--interface", default=None, help="Network interface for the command server address")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _print_change(key: str, value: TypedValue) -> None:
    print(f"{key} = {value.value!r}", flush=True)


def _print_command(command: CommandRequest) -> None:
    print(f"command from {command.remote}: {command.text()}", flush=True)


async def _run(args: argparse.Namespace) -> int:
    config = LiveConfConfig(
        local_url=args.bootstrap,
        remote_url=args.remote,
        poll_interval=args.interval,
        request_timeout=args.timeout,
        notify_new_keys=args.notify_new_keys,
        interface=args.interface,
    )
    client = LiveConfClient(config)
    client.on_value_changed(_print_change, keep=True)
    client.on_refresh_with_changes(lambda: _LOG.debug("refresh with changes"), keep=True)

    for key, value in sorted(client.values.items()):
        print(f"{key} = {value!r}")

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    async with client:
        if args.command_port is not None:
            try:
                url = client.start_command_server(_print_command, port=args.command_port, host=args.host)
            except CommandServerError as exc:
                _LOG.error("Command server not started: %s", exc)
                return 1
            print(f"command server: {url}")
        client.connect()
        await stop.wait()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except LiveConfError as exc:
        _LOG.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
