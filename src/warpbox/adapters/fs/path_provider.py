# src/warpbox/adapters/fs/path_provider.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from warpbox.config import const
from warpbox.services.settings import Settings


@dataclass(slots=True, frozen=True)
class PathProvider:
    """Single source of truth for on-disk locations. Always works with pathlib.Path."""

    base: Path

    @classmethod
    def from_settings(cls, settings: Settings) -> "PathProvider":
        return cls(base=Path(settings.base_dir).expanduser().resolve())

    def base_dir(self) -> Path:
        return self.base

    def ensure_base(self) -> Path:
        self.base.mkdir(parents=True, exist_ok=True)
        return self.base

    def config_file(self) -> Path:
        return self.base / const.CONFIG_FILENAME

    def account_file(self) -> Path:
        return self.base / const.ACCOUNT_FILENAME

    def warp_config_file(self) -> Path:
        return self.base / const.WARP_CONFIG_FILENAME

    def profile_file(self) -> Path:
        return self.base / const.PROFILE_FILENAME


__all__ = ["PathProvider"]
