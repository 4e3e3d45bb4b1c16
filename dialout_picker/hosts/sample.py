"""Example host implementation that operates locally."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, List

from ..models import DialRequest
from .base import DialRejectedError

LOGGER = logging.getLogger(__name__)


class EchoDialer:
    """Dialer that records every request and reports success without dialing."""

    name = "echo"

    def __init__(self, fail_destinations: Iterable[str] = (), delay_seconds: float = 0.0) -> None:
        self._fail_destinations = set(fail_destinations)
        self._delay_seconds = delay_seconds
        self.requests: List[DialRequest] = []

    def dial_out(self, request: DialRequest) -> Dict[str, Any]:
        LOGGER.info("Dial-out requested: %s", request.as_payload())
        if self._delay_seconds > 0:
            time.sleep(self._delay_seconds)
        if request.destination in self._fail_destinations:
            raise DialRejectedError(f"Destination {request.destination} rejected by echo dialer")
        self.requests.append(request)
        return {"status": "success", "result": [request.destination]}
