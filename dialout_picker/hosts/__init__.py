"""Host collaborators able to place dial-out calls into a conference."""

from .base import DialOutHost, DialRejectedError  # noqa: F401
from .infinity import InfinityConfig, InfinityDialer  # noqa: F401
from .sample import EchoDialer  # noqa: F401

__all__ = [
    "DialOutHost",
    "DialRejectedError",
    "EchoDialer",
    "InfinityConfig",
    "InfinityDialer",
]
