"""
Time-limited signed URLs for objects held in the external object store.

- sign_locator(locator, expires, secret): HMAC-SHA256 hex digest over "locator|expires".
- HmacUrlSigner: ObjectStore implementation producing
  "{base_url}/{locator}?expires=<epoch>&signature=<hex>" and verifying such URLs.

The core never reads file bytes; it only turns opaque storage locators into URLs.

Notes:
- Hex digests are lowercase.
- Verification is constant-time and rejects expired links.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Callable, Optional
from urllib.parse import parse_qs, quote, unquote, urlsplit

__all__ = ["sign_locator", "HmacUrlSigner"]


def sign_locator(locator: str, expires: int, secret: str) -> str:
    """
    Compute the HMAC-SHA256 hex digest binding a locator to its expiry.

    Args:
        locator: Opaque storage path of the object.
        expires: Expiry as seconds since the epoch.
        secret: Signing secret shared with the object store.
    """
    if not isinstance(locator, str) or not locator.strip():
        raise ValueError("locator must be a non-empty string")
    msg = f"{locator}|{int(expires)}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), msg, hashlib.sha256).hexdigest()


class HmacUrlSigner:
    """ObjectStore that signs retrieval URLs with a shared HMAC secret."""

    def __init__(
        self,
        base_url: str,
        secret: str,
        *,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if not secret:
            raise ValueError("secret must be a non-empty string")
        self.base_url = base_url.rstrip("/")
        self._secret = secret
        self._clock = clock or time.time

    def signed_url(self, locator: str, expires_in: int) -> str:
        """Return a URL for `locator` valid for `expires_in` seconds."""
        if expires_in <= 0:
            raise ValueError("expires_in must be positive")
        locator = locator.lstrip("/")
        expires = int(self._clock()) + int(expires_in)
        signature = sign_locator(locator, expires, self._secret)
        path = quote(locator, safe="/")
        return f"{self.base_url}/{path}?expires={expires}&signature={signature}"

    def verify(self, url: str) -> bool:
        """Check that `url` was produced by this signer and has not expired."""
        parts = urlsplit(url)
        prefix = urlsplit(self.base_url).path.rstrip("/") + "/"
        if not parts.path.startswith(prefix):
            return False
        locator = unquote(parts.path[len(prefix):])
        query = parse_qs(parts.query)
        try:
            expires = int(query["expires"][0])
            signature = query["signature"][0]
        except (KeyError, IndexError, ValueError):
            return False
        if expires < int(self._clock()):
            return False
        expected = sign_locator(locator, expires, self._secret)
        return hmac.compare_digest(expected, signature.lower())
