# src/extractors/identity_extractor.py

"""Derive a stable listing identity from the page's navigation path."""

import re
from urllib.parse import urlparse

# /vente/<category>/<slug>/id-<digits>  ->  <slug>/id-<digits>
_IDENTITY_RE = re.compile(
    r"/vente/[^/]+/([^/]+/id-\d+)", re.IGNORECASE
)


def extract_identity(path: str | None) -> str | None:
    """Return the ``<slug>/id-<digits>`` part of a listing path.

    A path that does not look like a listing is a normal ``None``
    result, never an error.
    """
    if not path or not isinstance(path, str):
        return None
    match = _IDENTITY_RE.search(path)
    return match.group(1) if match else None


def identity_from_url(url: str | None) -> str | None:
    """Same as :func:`extract_identity`, starting from a full URL."""
    if not url or not isinstance(url, str):
        return None
    return extract_identity(urlparse(url).path)
