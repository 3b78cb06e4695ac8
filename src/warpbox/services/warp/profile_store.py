"""Rendering and persistence of the WireGuard profile and warp-config record."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from warpbox.adapters.fs.atomic import atomic_write_text
from warpbox.adapters.fs.path_provider import PathProvider
from warpbox.config import const

from .errors import ProfileWriteError
from .models import ProfileConfig

_log = logging.getLogger("warpbox.warp.profile_store")

__all__ = ["ProfileStore", "render_profile"]


def render_profile(config: ProfileConfig, *, dns: str = const.PROFILE_DNS, mtu: int = const.PROFILE_MTU) -> str:
    lines: List[str] = []
    lines.extend(_render_interface_block(config, dns=dns, mtu=mtu))
    lines.append("")
    lines.extend(_render_peer_block(config))
    return "\n".join(lines) + "\n"


def _render_interface_block(config: ProfileConfig, *, dns: str, mtu: int) -> List[str]:
    lines = [
        "[Interface]",
        f"PrivateKey = {config.private_key}",
    ]
    if config.addr_v4:
        lines.append(f"Address = {config.addr_v4}/32")
    if config.addr_v6:
        lines.append(f"Address = {config.addr_v6}/128")
    if dns:
        lines.append(f"DNS = {dns}")
    if mtu:
        lines.append(f"MTU = {mtu}")
    return lines


def _render_peer_block(config: ProfileConfig) -> List[str]:
    lines = [
        "[Peer]",
        f"PublicKey = {config.public_key}",
        "AllowedIPs = 0.0.0.0/0",
        "AllowedIPs = ::/0",
        f"Endpoint = {config.endpoint}",
    ]
    if config.reserved:
        lines.append(f"Reserved = {', '.join(str(b) for b in config.reserved)}")
    return lines


class ProfileStore:
    """Writes ``wgcf-profile.conf`` and ``wgcf-config.json``."""

    def __init__(self, paths: PathProvider, *, dns: str = const.PROFILE_DNS, mtu: int = const.PROFILE_MTU):
        self._profile_path = paths.profile_file()
        self._config_path = paths.warp_config_file()
        self._dns = dns
        self._mtu = mtu

    @property
    def profile_path(self) -> Path:
        return self._profile_path

    @property
    def config_path(self) -> Path:
        return self._config_path

    def render(self, config: ProfileConfig) -> str:
        return render_profile(config, dns=self._dns, mtu=self._mtu)

    def save_profile(self, config: ProfileConfig) -> Path:
        try:
            atomic_write_text(self._profile_path, self.render(config), mode=0o600)
        except OSError as exc:
            raise ProfileWriteError(f"failed to write profile {self._profile_path}: {exc}") from exc
        _log.debug("profile written to %s", self._profile_path)
        return self._profile_path

    def save_config(self, config: ProfileConfig) -> Path:
        text = json.dumps(config.as_json(), ensure_ascii=False, indent=2) + "\n"
        try:
            atomic_write_text(self._config_path, text, mode=0o600)
        except OSError as exc:
            raise ProfileWriteError(f"failed to write warp config {self._config_path}: {exc}") from exc
        _log.debug("warp config written to %s", self._config_path)
        return self._config_path

    def load_config(self) -> ProfileConfig | None:
        if not self._config_path.exists():
            return None
        try:
            data = json.loads(self._config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            _log.warning("warp config %s is unreadable: %s", self._config_path, exc)
            return None
        if not isinstance(data, dict):
            return None
        return ProfileConfig(
            private_key=str(data.get("private_key", "")),
            addr_v4=str(data.get("addr_v4", "")),
            addr_v6=str(data.get("addr_v6", "")),
            public_key=str(data.get("public_key", "")),
            endpoint=str(data.get("endpoint", "")),
            client_id=str(data.get("client_id", "")),
            reserved=[int(b) for b in data.get("reserved") or []],
        )
