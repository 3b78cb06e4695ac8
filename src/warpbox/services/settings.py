from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from warpbox.config import const

_log = logging.getLogger("warpbox.settings")

__all__ = ["Settings", "SettingsError"]


class SettingsError(ValueError):
    """Raised when a configuration source holds an unusable value."""


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _as_bool(value: Any, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise SettingsError(f"{key}: expected a boolean, got {value!r}")


@dataclass(slots=True)
class Settings:
    """Runtime configuration for the WARP account tooling.

    Precedence (lowest to highest): built-in defaults from
    :mod:`warpbox.config.const`, ``warpbox.yaml`` in the base directory,
    ``WARPBOX_*`` environment variables, explicit overrides.
    """

    base_dir: Path = Path(const.BASE_DIR)
    api_base: str = const.API_BASE
    client_version: str = const.CLIENT_VERSION
    user_agent: str = const.USER_AGENT
    timeout: float = const.HTTP_TIMEOUT
    platform_label: str = const.PLATFORM_LABEL
    dns: str = const.PROFILE_DNS
    mtu: int = const.PROFILE_MTU
    strict_reserved: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_sources(
        cls,
        *,
        base_dir: str | Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> "Settings":
        environ = os.environ if env is None else env
        resolved_base = Path(base_dir or environ.get("WARPBOX_BASE_DIR") or const.BASE_DIR).expanduser()

        values: dict[str, Any] = {}
        values.update(_read_yaml(resolved_base / const.CONFIG_FILENAME))
        for f in fields(cls):
            raw = environ.get(f"WARPBOX_{f.name.upper()}")
            if raw is not None and f.name != "base_dir":
                values[f.name] = raw
        values.pop("base_dir", None)
        return cls(base_dir=resolved_base).with_overrides(**values)

    def with_overrides(self, **overrides: Any) -> "Settings":
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise SettingsError(f"unknown settings: {', '.join(sorted(unknown))}")
        coerced: dict[str, Any] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            coerced[key] = _coerce(key, value)
        return replace(self, **coerced)


def _coerce(key: str, value: Any) -> Any:
    try:
        if key == "base_dir":
            return Path(value).expanduser()
        if key == "timeout":
            result = float(value)
            if result <= 0:
                raise SettingsError(f"{key}: must be positive")
            return result
        if key == "mtu":
            return int(value)
        if key == "strict_reserved":
            return _as_bool(value, key=key)
        if key == "log_level":
            return str(value).upper()
    except (TypeError, ValueError) as exc:
        if isinstance(exc, SettingsError):
            raise
        raise SettingsError(f"{key}: invalid value {value!r}") from exc
    return str(value)


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"failed to parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"{path}: expected a mapping at top level")
    _log.debug("loaded settings file %s", path)
    return dict(data)
