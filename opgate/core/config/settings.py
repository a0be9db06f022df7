"""
Settings
========

• `Settings` is the finished, immutable settings object the gateway receives.
• `load_settings()` builds one for the command line adapter.

Resolution order (later wins)
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
1. Defaults declared on `Settings`
2. YAML file: explicit `path`, else $OPGATE_CONFIG, else ./opgate.yaml if present
3. Environment variables  OPGATE_<FIELD>  (e.g. OPGATE_TIMEOUT_MS)
4. Explicit `overrides` mapping

Object references (`executor`, `validator`, `identity`) are
"package.module:attribute" strings; see `resolve_object`.
"""

from __future__ import annotations

import importlib
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from opgate.core.exceptions import SettingsError

DEFAULT_CONFIG_FILE = "opgate.yaml"
ENV_PREFIX = "OPGATE_"

MIN_TIMEOUT_MS = 1_000
MAX_TIMEOUT_MS = 120_000
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class Settings:
    remote_base_url:     str = "http://localhost:7990"
    remote_name:         str = "Bitbucket"
    timeout_ms:          int = 60_000
    cancel_on_timeout:   bool = False
    log_level:           str = "INFO"
    critical_components: Tuple[str, ...] = ("RemoteExecutor", "IdentityProvider")
    operations_file:     Optional[str] = None
    executor:            Optional[str] = None       # "module:attr"
    validator:           Optional[str] = None       # "module:attr"
    identity:            Optional[str] = None       # "module:attr"

    def with_overrides(self, **kwargs) -> "Settings":
        return replace(self, **kwargs)


_FIELD_NAMES = tuple(f.name for f in fields(Settings))


# ─────────────────────────────────────────────────────────── coercion
def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _as_tuple(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return tuple(v.strip() for v in value.split(",") if v.strip())
    return tuple(str(v) for v in value)


_COERCE = {
    "timeout_ms":          int,
    "cancel_on_timeout":   _as_bool,
    "critical_components": _as_tuple,
    "log_level":           lambda v: str(v).upper(),
}


def _coerce(raw: Mapping[str, Any], source: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in _FIELD_NAMES:
            raise SettingsError(f"Unknown setting '{key}' in {source}")
        try:
            out[key] = _COERCE.get(key, lambda v: v)(value) if value is not None else None
        except (TypeError, ValueError) as exc:
            raise SettingsError(f"Invalid value for '{key}' in {source}: {exc}") from exc
    return out


# ─────────────────────────────────────────────────────────── sources
def _file_layer(path: Optional[str | Path], environ: Mapping[str, str]) -> Dict[str, Any]:
    if path is None:
        env_path = environ.get(ENV_PREFIX + "CONFIG")
        if env_path:
            path = env_path
        elif Path(DEFAULT_CONFIG_FILE).exists():
            path = DEFAULT_CONFIG_FILE
        else:
            return {}

    conf_file = Path(path)
    if not conf_file.exists():
        raise SettingsError(f"Settings file {conf_file} not found")
    try:
        with open(conf_file, "r") as fp:
            data = yaml.safe_load(fp) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"Settings file {conf_file} is not valid YAML: {exc}") from exc
    if not isinstance(data, Mapping):
        raise SettingsError(f"Settings file {conf_file} must contain a mapping")
    return _coerce(data, str(conf_file))


def _env_layer(environ: Mapping[str, str]) -> Dict[str, Any]:
    raw = {
        name: environ[ENV_PREFIX + name.upper()]
        for name in _FIELD_NAMES
        if ENV_PREFIX + name.upper() in environ
    }
    return _coerce(raw, "environment")


def _validate(settings: Settings) -> Settings:
    if not MIN_TIMEOUT_MS <= settings.timeout_ms <= MAX_TIMEOUT_MS:
        raise SettingsError(
            f"timeout_ms must be between {MIN_TIMEOUT_MS} and {MAX_TIMEOUT_MS}, "
            f"got {settings.timeout_ms}"
        )
    if settings.log_level not in LOG_LEVELS:
        raise SettingsError(f"log_level must be one of {LOG_LEVELS}, got {settings.log_level}")
    if not settings.remote_base_url.startswith(("http://", "https://")):
        raise SettingsError(f"remote_base_url must be an HTTP(S) URL, got {settings.remote_base_url}")
    return settings


# ─────────────────────────────────────────────────────────── public API
def load_settings(
    path: Optional[str | Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Settings:
    environ = os.environ if environ is None else environ
    merged: Dict[str, Any] = {}
    merged.update(_file_layer(path, environ))
    merged.update(_env_layer(environ))
    merged.update(_coerce(overrides or {}, "overrides"))
    merged = {k: v for k, v in merged.items() if v is not None}
    return _validate(Settings(**merged))


def resolve_object(ref: str) -> Any:
    """
    Import "package.module:attribute". Classes are instantiated without
    arguments; anything else is returned as-is.
    """
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise SettingsError(f"Object reference must look like 'module:attribute', got {ref!r}")
    try:
        obj = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as exc:
        raise SettingsError(f"Cannot resolve {ref!r}: {exc}") from exc
    return obj() if isinstance(obj, type) else obj
