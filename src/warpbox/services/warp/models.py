"""Dataclasses for the local account record and the remote registration payloads."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Mapping

__all__ = [
    "AccountState",
    "AccountRecord",
    "ConnectionContext",
    "RemoteAccount",
    "RemoteDevice",
    "RemoteBoundDevice",
    "ProfileConfig",
    "DeviceStatus",
    "GenerateResult",
]


class AccountState(str, Enum):
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    RECONCILED = "reconciled"
    ACTIVATED = "activated"

    def __str__(self) -> str:  # pragma: no cover - convenience for logging only
        return str(self.value)


def _section(data: Mapping[str, Any] | None, key: str) -> Mapping[str, Any]:
    value = (data or {}).get(key)
    return value if isinstance(value, Mapping) else {}


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _int(data: Mapping[str, Any], key: str) -> int:
    try:
        return int(data.get(key) or 0)
    except (TypeError, ValueError):
        return 0


@dataclass(slots=True)
class AccountRecord:
    """Local credentials binding this machine to a remote device."""

    private_key: str = ""
    device_id: str = ""
    access_token: str = ""
    license_key: str = ""

    @property
    def is_valid(self) -> bool:
        # license_key may legitimately be empty before reconciliation
        return bool(self.device_id and self.access_token and self.private_key)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AccountRecord":
        return cls(
            private_key=_text(data, "private_key"),
            device_id=_text(data, "device_id"),
            access_token=_text(data, "access_token"),
            license_key=_text(data, "license_key"),
        )

    def as_json(self) -> dict[str, Any]:
        return asdict(self)

    def context(self) -> "ConnectionContext":
        return ConnectionContext(
            device_id=self.device_id,
            access_token=self.access_token,
            license_key=self.license_key,
        )


@dataclass(slots=True, frozen=True)
class ConnectionContext:
    """Authentication context for calls made on behalf of a registered device."""

    device_id: str
    access_token: str
    license_key: str = ""


@dataclass(slots=True)
class RemoteAccount:
    license: str
    account_type: str = ""
    premium_data: int = 0
    quota: int = 0
    warp_plus: bool = False
    role: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any] | None) -> "RemoteAccount":
        data = data or {}
        return cls(
            license=_text(data, "license"),
            account_type=_text(data, "account_type"),
            premium_data=_int(data, "premium_data"),
            quota=_int(data, "quota"),
            warp_plus=bool(data.get("warp_plus")),
            role=_text(data, "role"),
        )


@dataclass(slots=True)
class RemoteDevice:
    id: str
    public_key: str
    interface_address_v4: str
    interface_address_v6: str
    peer_public_key: str
    peer_endpoint_host: str
    client_id: str
    account: RemoteAccount
    token: str = ""
    model: str = ""
    name: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "RemoteDevice":
        config = _section(data, "config")
        addresses = _section(_section(config, "interface"), "addresses")
        peers = config.get("peers") or []
        peer: Mapping[str, Any] = peers[0] if peers and isinstance(peers[0], Mapping) else {}
        endpoint = _section(peer, "endpoint")
        return cls(
            id=_text(data, "id"),
            public_key=_text(data, "key"),
            interface_address_v4=_text(addresses, "v4"),
            interface_address_v6=_text(addresses, "v6"),
            peer_public_key=_text(peer, "public_key"),
            peer_endpoint_host=_text(endpoint, "host"),
            client_id=_text(config, "client_id"),
            account=RemoteAccount.from_api(_section(data, "account")),
            token=_text(data, "token"),
            model=_text(data, "model"),
            name=_text(data, "name"),
        )


@dataclass(slots=True)
class RemoteBoundDevice:
    id: str
    active: bool
    name: str | None = None
    model: str = ""
    role: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "RemoteBoundDevice":
        name = data.get("name")
        return cls(
            id=_text(data, "id"),
            active=bool(data.get("active")),
            name=None if name is None else str(name),
            model=_text(data, "model"),
            role=_text(data, "role"),
        )


@dataclass(slots=True)
class ProfileConfig:
    """Everything needed to render a tunnel profile; rebuilt on every generate."""

    private_key: str
    addr_v4: str
    addr_v6: str
    public_key: str
    endpoint: str
    client_id: str
    reserved: list[int] = field(default_factory=list)

    def as_json(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class DeviceStatus:
    device: RemoteDevice
    bound_device: RemoteBoundDevice


@dataclass(slots=True)
class GenerateResult:
    profile: ProfileConfig
    status: DeviceStatus
