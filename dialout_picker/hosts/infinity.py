"""Dial-out host backed by the Pexip Infinity client REST API."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from ..models import DialRequest
from .base import DialRejectedError

LOGGER = logging.getLogger(__name__)


@dataclass
class InfinityConfig:
    """Configuration parameters for :class:`InfinityDialer`."""

    node: str = ""
    conference: str = ""
    pin: Optional[str] = None
    display_name: str = "Dial-out picker"
    request_timeout_seconds: float = 10.0
    verify_tls: bool = True


class InfinityDialer:
    """Place dial-outs through a chair participant token on an Infinity node."""

    name = "infinity"
    API_PREFIX = "/api/client/v2/conferences"

    def __init__(
        self,
        config: Optional[InfinityConfig] = None,
        *,
        session: Optional[requests.Session] = None,
        **options: Any,
    ) -> None:
        self.config = config or InfinityConfig(**options)
        if not self.config.node or not self.config.conference:
            raise ValueError("InfinityDialer requires both 'node' and 'conference'")
        self._session = session or requests.Session()
        self._session.verify = self.config.verify_tls
        self._token: Optional[str] = None
        self._refresh_at = 0.0
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def __enter__(self) -> "InfinityDialer":
        return self

    def __exit__(self, exc_type, exc, exc_tb) -> None:
        self.close()

    @property
    def base_url(self) -> str:
        node = self.config.node.rstrip("/")
        if "://" not in node:
            node = f"https://{node}"
        return f"{node}{self.API_PREFIX}/{quote(self.config.conference, safe='')}"

    def dial_out(self, request: DialRequest) -> Dict[str, Any]:
        token = self._ensure_token()
        LOGGER.debug("Requesting dial-out to %s", request.destination)
        response = self._session.post(
            f"{self.base_url}/dial",
            headers={"token": token},
            json=request.as_payload(),
            timeout=self.config.request_timeout_seconds,
        )
        return self._check(response)

    def close(self) -> None:
        with self._lock:
            token, self._token = self._token, None
        if token is not None:
            LOGGER.debug("Releasing Infinity token")
            try:
                self._session.post(
                    f"{self.base_url}/release_token",
                    headers={"token": token},
                    timeout=self.config.request_timeout_seconds,
                )
            except requests.RequestException:
                LOGGER.warning("Failed to release Infinity token", exc_info=True)
        self._session.close()

    # ------------------------------------------------------------------
    def _ensure_token(self) -> str:
        with self._lock:
            now = time.monotonic()
            if self._token is not None and now >= self._expires_at:
                LOGGER.debug("Infinity token expired; requesting a new one")
                self._token = None
            if self._token is not None and now < self._refresh_at:
                return self._token
            if self._token is not None:
                try:
                    return self._store_token(
                        self._session.post(
                            f"{self.base_url}/refresh_token",
                            headers={"token": self._token},
                            timeout=self.config.request_timeout_seconds,
                        )
                    )
                except DialRejectedError as exc:
                    LOGGER.warning("Infinity token refresh failed (%s); requesting a new one", exc)
                    self._token = None
            headers = {"pin": self.config.pin} if self.config.pin else {}
            return self._store_token(
                self._session.post(
                    f"{self.base_url}/request_token",
                    headers=headers,
                    json={"display_name": self.config.display_name},
                    timeout=self.config.request_timeout_seconds,
                )
            )

    def _store_token(self, response: requests.Response) -> str:
        result = self._check(response).get("result") or {}
        token = result.get("token")
        if not token:
            raise DialRejectedError("Infinity did not return a participant token")
        expires = float(result.get("expires") or 120)
        now = time.monotonic()
        # Tokens are refreshed at half their lifetime.
        self._refresh_at = now + expires / 2
        self._expires_at = now + expires
        self._token = token
        return token

    @staticmethod
    def _check(response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        if response.ok and data.get("status") == "success":
            return data
        detail = data.get("result")
        if not isinstance(detail, str) or not detail:
            detail = f"HTTP {response.status_code}"
        raise DialRejectedError(detail)
