# COMPONENT: UPSTREAM TOKEN CACHE
# REQUIREMENTS SATISFIED: cached OAuth client-credentials token for the /token proxy
"""
door_catalog/services/token_cache.py

Expiry-gated cache around an OAuth client-credentials token request.

The cached token is served until `expires_in - refresh_margin` seconds
after it was fetched; after that the next get() fetches a new one. The
clock and the fetch function are injectable so the cache can be driven
by a fake clock and a fake upstream.
"""
from __future__ import annotations
import threading
import time
from typing import Any, Callable, Dict, Optional

import requests

from door_catalog.config import AuthConfig
from door_catalog.errors import UpstreamError
from door_catalog.utils.logging import get_logger

logger = get_logger("token_cache")

DEFAULT_TIMEOUT_S = 10


def fetch_token(config: AuthConfig) -> Dict[str, Any]:
    """POST the client-credentials grant to the auth endpoint."""
    resp = requests.post(
        config.auth_url,
        data={"grant_type": config.grant_type, "scope": config.scope},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        auth=(config.client_id, config.client_secret),
        timeout=DEFAULT_TIMEOUT_S,
    )
    resp.raise_for_status()
    return resp.json()


class TokenCache:
    def __init__(
        self,
        config: AuthConfig,
        fetch: Optional[Callable[[AuthConfig], Dict[str, Any]]] = None,
        clock: Callable[[], float] = time.monotonic,
        refresh_margin: float = 60,
    ):
        self._config = config
        self._fetch = fetch or fetch_token
        self._clock = clock
        self._refresh_margin = refresh_margin
        self._token: Optional[Dict[str, Any]] = None
        self._expiry: float = 0.0
        self._lock = threading.Lock()

    def _fresh(self) -> bool:
        return self._token is not None and self._clock() < self._expiry

    def get(self) -> Dict[str, Any]:
        with self._lock:
            if self._fresh():
                return self._token

            now = self._clock()
            try:
                token = self._fetch(self._config)
            except requests.RequestException as e:
                status = getattr(e.response, "status_code", None)
                logger.error("Token fetch failed: status=%s error=%s", status, e)
                raise UpstreamError("Failed to get token", details=str(e), upstreamStatus=status) from e
            except ValueError as e:
                logger.error("Token endpoint returned invalid JSON: %s", e)
                raise UpstreamError("Failed to get token", details=str(e)) from e
            if not isinstance(token, dict):
                raise UpstreamError("Failed to get token", details="token response is not a JSON object")

            try:
                expires_in = float(token.get("expires_in"))
            except (TypeError, ValueError):
                logger.warning("Token response has no usable expires_in, not caching")
                expires_in = self._refresh_margin

            self._token = token
            self._expiry = now + expires_in - self._refresh_margin
            logger.info("Fetched new upstream token, valid for %.0fs", max(expires_in - self._refresh_margin, 0))
            return token
