from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from warpbox.adapters.fs.path_provider import PathProvider
from warpbox.services.settings import Settings
from warpbox.services.warp import (
    AccountOrchestrator,
    AccountStore,
    ConnectionContext,
    ProfileStore,
    RemoteAccount,
    RemoteBoundDevice,
    RemoteDevice,
    RemoteServiceError,
)


@dataclass
class _ServerDevice:
    id: str
    token: str
    key: str
    license: str
    model: str
    name: str | None = None
    active: bool = False


@dataclass
class FakeRegistrationClient:
    """In-memory stand-in for the WARP registration API."""

    client_id: str = "AAEC"
    activation_sticks: bool = True
    accept_new_key: bool = True
    license_override: str | None = None
    devices: dict[str, _ServerDevice] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    def _device(self, ctx: ConnectionContext) -> _ServerDevice:
        device = self.devices.get(ctx.device_id)
        if device is None or device.token != ctx.access_token:
            raise RemoteServiceError("Unauthorized", status_code=401)
        return device

    def _account(self, device: _ServerDevice) -> RemoteAccount:
        return RemoteAccount(license=device.license, account_type="free", premium_data=0, quota=0)

    def _remote(self, device: _ServerDevice, *, with_token: bool = False) -> RemoteDevice:
        return RemoteDevice(
            id=device.id,
            public_key=device.key,
            interface_address_v4="172.16.0.2",
            interface_address_v6="2606:4700:110:8a36::2",
            peer_public_key="bmXOC+F1FxEMF9dyiK2H5/1SUtzH0JuVo51h2wPfgyo=",
            peer_endpoint_host="engage.cloudflareclient.com:2408",
            client_id=self.client_id,
            account=self._account(device),
            token=device.token if with_token else "",
            model=device.model,
        )

    def _bound(self, device: _ServerDevice) -> RemoteBoundDevice:
        return RemoteBoundDevice(id=device.id, active=device.active, name=device.name, model=device.model, role="parent")

    def register(self, public_key: str, platform_label: str) -> RemoteDevice:
        self.calls.append("register")
        n = next(self._ids)
        device = _ServerDevice(
            id=f"device-{n}",
            token=f"token-{n}",
            key=public_key,
            license=f"license-{n}",
            model=platform_label,
        )
        self.devices[device.id] = device
        return self._remote(device, with_token=True)

    def get_device(self, ctx: ConnectionContext) -> RemoteDevice:
        self.calls.append("get_device")
        return self._remote(self._device(ctx))

    def get_bound_device(self, ctx: ConnectionContext) -> RemoteBoundDevice:
        self.calls.append("get_bound_device")
        return self._bound(self._device(ctx))

    def set_device_name(self, ctx: ConnectionContext, name: str) -> RemoteBoundDevice:
        self.calls.append("set_device_name")
        device = self._device(ctx)
        device.name = name
        return self._bound(device)

    def activate_bound_device(self, ctx: ConnectionContext, active: bool) -> RemoteBoundDevice:
        self.calls.append("activate_bound_device")
        device = self._device(ctx)
        device.active = active and self.activation_sticks
        return self._bound(device)

    def rotate_license_key(self, ctx: ConnectionContext, new_public_key: str) -> None:
        self.calls.append("rotate_license_key")
        device = self._device(ctx)
        device.license = self.license_override or ctx.license_key
        if self.accept_new_key:
            device.key = new_public_key

    def get_account(self, ctx: ConnectionContext) -> RemoteAccount:
        self.calls.append("get_account")
        return self._account(self._device(ctx))


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings.from_sources(base_dir=tmp_path / "warpbox", env={})


@pytest.fixture()
def paths(settings: Settings) -> PathProvider:
    return PathProvider.from_settings(settings)


@pytest.fixture()
def fake_client() -> FakeRegistrationClient:
    return FakeRegistrationClient()


@pytest.fixture()
def account_store(paths: PathProvider) -> AccountStore:
    return AccountStore(paths)


@pytest.fixture()
def profile_store(paths: PathProvider) -> ProfileStore:
    return ProfileStore(paths)


@pytest.fixture()
def make_orchestrator(fake_client, account_store, profile_store):
    def factory(**kwargs) -> AccountOrchestrator:
        return AccountOrchestrator(
            client=kwargs.pop("client", fake_client),
            accounts=kwargs.pop("accounts", account_store),
            profiles=kwargs.pop("profiles", profile_store),
            **kwargs,
        )

    return factory
