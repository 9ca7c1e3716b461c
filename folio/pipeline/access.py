"""Turn manifest URLs into fetchable references and check they can be read."""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import requests

from folio.utils.log_utils import logger


NETWORK_SCHEMES = frozenset({"http", "https"})
# Servers that refuse HEAD get one streamed GET instead.
_HEAD_UNSUPPORTED = frozenset({405, 501})


def is_network_url(url: str) -> bool:
    return urlparse(url).scheme.lower() in NETWORK_SCHEMES


def resolve_fetchable_url(url: str, asset_root: Path) -> str:
    """Network and `file://` URLs pass through; anything else is a path under `asset_root`."""
    scheme = urlparse(url).scheme.lower()
    if scheme in NETWORK_SCHEMES or scheme == "file":
        return url
    return (asset_root / url.lstrip("/")).resolve().as_uri()


def local_path_from_file_url(url: str) -> Path:
    parsed = urlparse(url)
    return Path(url2pathname(unquote(parsed.path)))


class AccessibilityProbe:
    """Checks that a fetchable URL points at something readable."""

    def __init__(self, session: requests.Session | None = None, *, timeout: float = 10.0) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def check(self, url: str) -> str | None:
        """Return None when `url` is readable, otherwise a short reason."""
        if urlparse(url).scheme.lower() == "file":
            path = local_path_from_file_url(url)
            if not path.is_file():
                return f"file not found: {path}"
            if not os.access(path, os.R_OK):
                return f"file not readable: {path}"
            return None
        if is_network_url(url):
            return self._check_remote(url)
        return f"unsupported URL scheme: {url}"

    def _check_remote(self, url: str) -> str | None:
        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
            if response.status_code in _HEAD_UNSUPPORTED:
                logger.debug(f"HEAD not supported by {url}; retrying with GET")
                response = self.session.get(
                    url, timeout=self.timeout, allow_redirects=True, stream=True
                )
                response.close()
        except requests.RequestException as exc:
            return f"request failed: {exc}"
        if not 200 <= response.status_code < 300:
            return f"HTTP {response.status_code}"
        return None
