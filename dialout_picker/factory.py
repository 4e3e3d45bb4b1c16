"""Factory helpers for constructing dialers and dispatchers from configuration."""
from __future__ import annotations

import importlib
import logging
from typing import Any, Dict, Mapping

from .config import ConfigurationError, PickerSettings
from .dispatch import BatchDispatcher
from .hosts import DialOutHost, EchoDialer
from .pacing import DelayPolicy

LOGGER = logging.getLogger(__name__)


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid dialer class path '{path}'")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def build_dialer(dialer_cfg: Mapping[str, Any]) -> DialOutHost:
    """Instantiate the dialer class named in the configuration."""

    class_path = dialer_cfg.get("class")
    if not class_path:
        LOGGER.warning("No dialer configured - falling back to EchoDialer")
        return EchoDialer()

    raw_options = dialer_cfg.get("options") or {}
    if not isinstance(raw_options, Mapping):
        raise ConfigurationError(f"Options for dialer '{class_path}' must be a mapping")
    options: Dict[str, Any] = dict(raw_options)
    dialer_cls = _load_class(str(class_path))
    try:
        return dialer_cls(**options)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Could not construct dialer '{class_path}': {exc}") from exc


def build_dispatcher(settings: PickerSettings, host: DialOutHost | None = None) -> BatchDispatcher:
    """Create a dispatcher using the timing values from ``settings``."""

    return BatchDispatcher(
        host if host is not None else build_dialer(settings.dialer),
        dial_timeout=settings.dial_timeout_seconds,
        delay_policy=DelayPolicy(delay_seconds=settings.gap_seconds),
    )
