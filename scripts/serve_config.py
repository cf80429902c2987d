#!/usr/bin/env python3
"""Serve a JSON file as a live configuration endpoint.

The file is re-read on every request, so editing and saving it is enough
for watching clients to pick up the change.

Example::

    python scripts/serve_config.py config.json --port 8000
    # clients poll http://<this-host>:8000/config.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from aiohttp import web

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from liveconf import ConfigParseError, resolve_local_address  # noqa: E402
from liveconf.store import decode_document  # noqa: E402

_LOG = logging.getLogger("serve_config")
_DOCUMENT = web.AppKey("document", Path)


async def _serve_document(request: web.Request) -> web.Response:
    path = request.app[_DOCUMENT]
    try:
        data = path.read_bytes()
    except OSError as exc:
        _LOG.warning("Cannot read %s: %s", path, exc)
        return web.Response(status=503, text=str(exc))

    # Served as-is; a bad edit is flagged here but left for clients to reject.
    try:
        decode_document(data)
    except ConfigParseError as exc:
        _LOG.warning("%s: %s", path.name, exc)

    return web.Response(
        body=data,
        content_type="application/json",
        headers={"cache-control": "no-store"},
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("document", type=Path, help="JSON document to serve")
    parser.add_argument("--host", default="0.0.0.0", help="Listen address (default: all interfaces)")
    parser.add_argument("--port", type=int, default=8000, help="Listen port (default: 8000)")
    parser.add_argument("--route", default="/config.json", help="URL path of the document")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if not args.document.is_file():
        _LOG.error("%s does not exist", args.document)
        return 1

    app = web.Application()
    app[_DOCUMENT] = args.document.resolve()
    app.router.add_get(args.route, _serve_document)

    advertised = resolve_local_address() or args.host
    _LOG.info("Serving %s at http://%s:%d%s", args.document, advertised, args.port, args.route)
    web.run_app(app, host=args.host, port=args.port, print=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
