"""Utilities for pacing and bounding host dial-out calls."""
from __future__ import annotations

import itertools
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

T = TypeVar("T")

DEFAULT_DIAL_TIMEOUT_SECONDS = 12.0
DEFAULT_GAP_SECONDS = 0.35

_worker_ids = itertools.count(1)


class DialTimeoutError(TimeoutError):
    """Raised when a host call does not settle within its time bound."""


@dataclass
class DelayPolicy:
    """Simple policy describing the pause between consecutive dial attempts."""

    delay_seconds: float = DEFAULT_GAP_SECONDS

    def pause(self) -> None:
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)


def call_with_timeout(
    func: Callable[..., T],
    *args: Any,
    timeout: float = DEFAULT_DIAL_TIMEOUT_SECONDS,
    label: str = "operation",
) -> T:
    """Run ``func`` on a daemon thread and wait at most ``timeout`` seconds.

    Whichever settles first wins. A call that loses the race is left to finish
    in the background and never holds up interpreter exit.
    """

    future: "Future[T]" = Future()

    def run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = func(*args)
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)

    worker = threading.Thread(target=run, name=f"dial-out-{next(_worker_ids)}", daemon=True)
    worker.start()
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as exc:
        if future.done():
            return future.result()
        raise DialTimeoutError(f"{label} timed out after {int(round(timeout * 1000))}ms") from exc


__all__ = [
    "DEFAULT_DIAL_TIMEOUT_SECONDS",
    "DEFAULT_GAP_SECONDS",
    "DelayPolicy",
    "DialTimeoutError",
    "call_with_timeout",
]
