"""Loading of the local bootstrap document."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlparse

from liveconf.exceptions import ConfigBootstrapError


def _to_path(uri: str | Path) -> Path:
    if isinstance(uri, Path):
        return uri
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    # Single letters are Windows drive names, not schemes.
    if parsed.scheme and len(parsed.scheme) > 1:
        raise ConfigBootstrapError(f"Unsupported bootstrap URI scheme: {parsed.scheme}", uri=uri)
    return Path(uri)


def load_local_document(uri: str | Path) -> bytes:
    """Read the bootstrap document at *uri*.

    *uri* may be a filesystem path or a ``file://`` URI.

    Raises
    ------
    ConfigBootstrapError
        If the document cannot be read.
    """
    path = _to_path(uri)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ConfigBootstrapError(f"Cannot read bootstrap document {path}: {exc}", uri=str(uri)) from exc
