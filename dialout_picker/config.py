"""Configuration helpers for the dial-out picker."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .catalog import FALLBACK_TARGETS
from .ingestion import targets_from_records
from .models import CallTarget
from .pacing import DEFAULT_DIAL_TIMEOUT_SECONDS, DEFAULT_GAP_SECONDS
from .sources import DEFAULT_SOURCE, is_url

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DIALOUT_PICKER_CONFIG"


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' is malformed: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping")
    return data


def load_settings(path: str | Path | None = None) -> "PickerSettings":
    """Build settings from the file at ``path``, or defaults when ``path`` is empty.

    A relative ``source`` in the file is taken relative to the file itself.
    """

    if not path:
        return PickerSettings()
    file_path = Path(path)
    return PickerSettings.from_mapping(load_configuration(file_path), base_dir=file_path.parent)


def load_settings_from_env() -> "PickerSettings":
    """Load the file named by ``DIALOUT_PICKER_CONFIG``, or defaults."""

    return load_settings(os.environ.get(CONFIG_ENV_VAR))


@dataclass
class PickerSettings:
    """Runtime settings resolved from a configuration mapping."""

    source: str = DEFAULT_SOURCE
    dial_timeout_seconds: float = DEFAULT_DIAL_TIMEOUT_SECONDS
    gap_seconds: float = DEFAULT_GAP_SECONDS
    fetch_timeout_seconds: float = 10.0
    fallback_targets: List[CallTarget] = field(default_factory=lambda: list(FALLBACK_TARGETS))
    dialer: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls,
        config: Optional[Mapping[str, Any]],
        *,
        base_dir: str | Path | None = None,
    ) -> "PickerSettings":
        config = dict(config or {})
        settings = cls()
        if config.get("source"):
            settings.source = _resolve_source(str(config["source"]), base_dir)
        settings.dial_timeout_seconds = _seconds(config, "dial_timeout_seconds", settings.dial_timeout_seconds)
        settings.gap_seconds = _seconds(config, "gap_seconds", settings.gap_seconds)
        settings.fetch_timeout_seconds = _seconds(config, "fetch_timeout_seconds", settings.fetch_timeout_seconds)

        records = config.get("fallback_targets")
        if records:
            if not isinstance(records, list):
                raise ConfigurationError("'fallback_targets' must be a list of target mappings")
            fallback = targets_from_records(record for record in records if isinstance(record, Mapping))
            if not fallback:
                raise ConfigurationError("'fallback_targets' does not contain any valid targets")
            settings.fallback_targets = fallback

        dialer = config.get("dialer") or {}
        if not isinstance(dialer, Mapping):
            raise ConfigurationError("'dialer' must be a mapping")
        if not isinstance(dialer.get("options") or {}, Mapping):
            raise ConfigurationError("'dialer.options' must be a mapping")
        settings.dialer = dict(dialer)
        return settings


def _resolve_source(source: str, base_dir: str | Path | None) -> str:
    if base_dir is None or is_url(source) or Path(source).is_absolute():
        return source
    return str(Path(base_dir) / source)


def _seconds(config: Mapping[str, Any], key: str, default: float) -> float:
    value = config.get(key)
    if value is None:
        return default
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"'{key}' must be a number of seconds, got {value!r}") from exc
    if seconds < 0:
        raise ConfigurationError(f"'{key}' must not be negative")
    return seconds
