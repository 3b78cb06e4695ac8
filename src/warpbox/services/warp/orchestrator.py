"""Account lifecycle for a WARP device: register, update, generate, status.

The orchestrator owns the in-memory :class:`AccountRecord` for the duration
of an operation and persists it through :class:`AccountStore` after every
mutation. Remote calls go through a :class:`DeviceRegistrationClient`, so a
test double can stand in for the real API.

State progression::

    UNREGISTERED -> REGISTERED -> RECONCILED -> ACTIVATED

Errors are raised as soon as they occur. Whatever was persisted before the
failure stays on disk; already successful remote calls are not rolled back.
"""
from __future__ import annotations

import logging
from typing import Callable

from warpbox.config import const

from .account_store import AccountStore
from .client import DeviceRegistrationClient
from .errors import (
    ActivationFailedError,
    ClientIdDecodeError,
    InvalidAccountError,
    KeyRotationVerificationError,
    LicenseKeyMismatchError,
)
from .keys import KeyPair, generate_keypair
from .models import (
    AccountRecord,
    AccountState,
    ConnectionContext,
    DeviceStatus,
    GenerateResult,
    ProfileConfig,
    RemoteAccount,
    RemoteDevice,
)
from .profile_store import ProfileStore
from .reserved import parse_reserved

_log = logging.getLogger("warpbox.warp.orchestrator")

__all__ = ["AccountOrchestrator"]


class AccountOrchestrator:
    def __init__(
        self,
        *,
        client: DeviceRegistrationClient,
        accounts: AccountStore,
        profiles: ProfileStore,
        keygen: Callable[[], KeyPair] = generate_keypair,
        platform_label: str = const.PLATFORM_LABEL,
        strict_reserved: bool = True,
    ):
        self._client = client
        self._accounts = accounts
        self._profiles = profiles
        self._keygen = keygen
        self._platform_label = platform_label
        self._strict_reserved = strict_reserved
        self._record = accounts.load()
        self._state = AccountState.REGISTERED if self._record.is_valid else AccountState.UNREGISTERED

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------
    @property
    def record(self) -> AccountRecord:
        return self._record

    @property
    def state(self) -> AccountState:
        return self._state

    def is_account_valid(self) -> bool:
        if not self._record.is_valid:
            _log.warning("no valid account detected in %s", self._accounts.path)
            return False
        return True

    def _require_account(self) -> ConnectionContext:
        if not self.is_account_valid():
            raise InvalidAccountError()
        return self._record.context()

    def _persist(self) -> None:
        self._accounts.save(self._record)

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------
    def register(self) -> DeviceStatus | None:
        """Create a device on the remote service unless a valid account exists."""
        if self._record.is_valid:
            _log.info("warp account already exists: %s", self._accounts.path)
            return None

        pair = self._keygen()
        device = self._client.register(pair.public_key, self._platform_label)
        self._record = AccountRecord(
            private_key=pair.private_key,
            device_id=device.id,
            access_token=device.token,
            license_key=device.account.license,
        )
        self._persist()
        self._state = AccountState.REGISTERED
        _log.info("registered device %s", device.id)

        ctx = self._record.context()
        self._client.set_device_name(ctx, "")
        device = self._client.get_device(ctx)
        bound = self._client.activate_bound_device(ctx, True)
        if not bound.active:
            raise ActivationFailedError(f"failed to activate device {device.id}")
        self._state = AccountState.ACTIVATED
        _log.info("successfully created warp account")
        return DeviceStatus(device=device, bound_device=bound)

    def update(self, license_key: str, device_name: str = "") -> DeviceStatus | None:
        """Bind the device to ``license_key`` and make sure it is named and active.

        An empty ``license_key`` is a skipped update, not an error.
        """
        self._require_account()
        if not license_key:
            _log.warning("empty license key, skipping update")
            return None

        self._record.license_key = license_key
        self._persist()
        ctx = self._record.context()

        device = self._client.get_device(ctx)
        device = self._ensure_license_key_up_to_date(ctx, device)
        self._state = AccountState.RECONCILED

        bound = self._client.get_bound_device(ctx)
        if bound.name is None or (device_name and device_name != bound.name):
            _log.info("setting device name to %r", device_name)
            self._client.set_device_name(ctx, device_name)

        bound = self._client.activate_bound_device(ctx, True)
        if not bound.active:
            raise ActivationFailedError(f"failed to activate device {device.id}")
        self._state = AccountState.ACTIVATED
        _log.info("successfully updated warp account")
        return DeviceStatus(device=device, bound_device=bound)

    def _ensure_license_key_up_to_date(self, ctx: ConnectionContext, device: RemoteDevice) -> RemoteDevice:
        if device.account.license == ctx.license_key:
            return device
        _log.info("updated license key detected, re-binding device to new account")
        _, device = self._rotate_license_key(ctx)
        return device

    def _rotate_license_key(self, ctx: ConnectionContext) -> tuple[RemoteAccount, RemoteDevice]:
        pair = self._keygen()
        self._client.rotate_license_key(ctx, pair.public_key)

        self._record.private_key = pair.private_key
        self._persist()

        account = self._client.get_account(ctx)
        device = self._client.get_device(ctx)
        if account.license != self._record.license_key:
            raise LicenseKeyMismatchError(
                f"remote license {account.license!r} does not match {self._record.license_key!r}"
            )
        if device.public_key != pair.public_key:
            raise KeyRotationVerificationError(f"remote device {device.id} did not accept the new public key")
        return account, device

    def generate(self) -> GenerateResult:
        """Render the tunnel profile and warp-config record from the remote device."""
        ctx = self._require_account()
        device = self._client.get_device(ctx)
        bound = self._client.get_bound_device(ctx)

        profile = ProfileConfig(
            private_key=self._record.private_key,
            addr_v4=device.interface_address_v4,
            addr_v6=device.interface_address_v6,
            public_key=device.peer_public_key,
            endpoint=device.peer_endpoint_host,
            client_id=device.client_id,
        )
        profile.reserved = self._reserved_for(profile.client_id)

        self._profiles.save_profile(profile)
        self._profiles.save_config(profile)
        _log.info("generated wireguard profile in %s", self._profiles.profile_path.parent)
        return GenerateResult(profile=profile, status=DeviceStatus(device=device, bound_device=bound))

    def _reserved_for(self, client_id: str) -> list[int]:
        try:
            return parse_reserved(client_id)
        except ClientIdDecodeError:
            if self._strict_reserved:
                raise
            _log.warning("client id %r is not valid base64, writing profile without reserved bytes", client_id)
            return []

    def status(self) -> DeviceStatus:
        ctx = self._require_account()
        device = self._client.get_device(ctx)
        bound = self._client.get_bound_device(ctx)
        return DeviceStatus(device=device, bound_device=bound)

    def run(self, license_key: str) -> GenerateResult:
        """Register when needed, apply ``license_key`` and write the profile."""
        if not self.is_account_valid():
            self.register()
        self.update(license_key)
        return self.generate()
