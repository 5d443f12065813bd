"""
Signing keys published by a Cognito user pool.

Cognito exposes the pool's RSA keys at ``<issuer>/.well-known/jwks.json``;
each token names its key in the ``kid`` header. The document is parsed once
into a ``kid -> PyJWK`` index and reloaded when the TTL lapses, or when a
token names a ``kid`` the index does not hold (key rotation).
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

import jwt
import requests
from jwt import PyJWK

logger = logging.getLogger(__name__)


def _index_keys(document: Any) -> dict[str, PyJWK]:
    if not isinstance(document, dict):
        raise ValueError("JWKS document is not a JSON object")

    index: dict[str, PyJWK] = {}
    for entry in document.get("keys") or []:
        kid = entry.get("kid") if isinstance(entry, dict) else None
        if not kid or entry.get("use", "sig") != "sig":
            continue
        try:
            index[kid] = PyJWK.from_dict(entry)
        except jwt.PyJWTError:
            logger.warning("Ignoring unusable pool key kid=%s", kid)
    return index


class PoolSigningKeys:
    """Thread-safe ``kid`` lookup over one pool's key set."""

    def __init__(self, jwks_uri: str, ttl_seconds: int, timeout_seconds: int = 10) -> None:
        self.jwks_uri = jwks_uri
        self._ttl = ttl_seconds
        self._timeout = timeout_seconds
        self._keys: dict[str, PyJWK] = {}
        self._loaded_at: float | None = None
        self._lock = threading.Lock()

    def _download(self) -> Any:
        resp = requests.get(self.jwks_uri, timeout=self._timeout)
        resp.raise_for_status()
        return resp.json()

    def _load(self) -> None:
        self._keys = _index_keys(self._download())
        self._loaded_at = time.monotonic()
        logger.debug("Loaded %d pool signing keys", len(self._keys))

    def _stale(self) -> bool:
        return self._loaded_at is None or time.monotonic() - self._loaded_at >= self._ttl

    def lookup(self, kid: str) -> PyJWK | None:
        """
        Return the key for ``kid``, or None if the pool does not publish it.

        Raises ``requests.RequestException`` or ``ValueError`` when the key
        set cannot be downloaded or parsed.
        """
        with self._lock:
            if self._stale():
                self._load()
            elif kid not in self._keys:
                logger.info("Unknown kid; reloading pool signing keys")
                self._load()
            return self._keys.get(kid)
