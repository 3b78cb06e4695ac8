"""WARP device registration, license reconciliation and profile generation."""
from __future__ import annotations

from warpbox.adapters.fs.path_provider import PathProvider
from warpbox.services.settings import Settings

from .account_store import AccountStore
from .client import DeviceRegistrationClient, WarpHttpClient
from .errors import (
    ActivationFailedError,
    ClientIdDecodeError,
    InvalidAccountError,
    KeyGenerationError,
    KeyRotationVerificationError,
    LicenseKeyMismatchError,
    ProfileWriteError,
    RemoteServiceError,
    WarpError,
)
from .keys import KeyPair, generate_keypair, public_key_from_private
from .models import (
    AccountRecord,
    AccountState,
    ConnectionContext,
    DeviceStatus,
    GenerateResult,
    ProfileConfig,
    RemoteAccount,
    RemoteBoundDevice,
    RemoteDevice,
)
from .orchestrator import AccountOrchestrator
from .profile_store import ProfileStore, render_profile
from .reserved import parse_reserved


def build_orchestrator(
    settings: Settings,
    *,
    client: DeviceRegistrationClient | None = None,
) -> AccountOrchestrator:
    """Wire stores and the HTTP client from ``settings``; the caller owns the result."""
    paths = PathProvider.from_settings(settings)
    return AccountOrchestrator(
        client=client or WarpHttpClient.from_settings(settings),
        accounts=AccountStore(paths),
        profiles=ProfileStore(paths, dns=settings.dns, mtu=settings.mtu),
        platform_label=settings.platform_label,
        strict_reserved=settings.strict_reserved,
    )


__all__ = [
    "AccountOrchestrator",
    "AccountRecord",
    "AccountState",
    "AccountStore",
    "ActivationFailedError",
    "ClientIdDecodeError",
    "ConnectionContext",
    "DeviceRegistrationClient",
    "DeviceStatus",
    "GenerateResult",
    "InvalidAccountError",
    "KeyGenerationError",
    "KeyPair",
    "KeyRotationVerificationError",
    "LicenseKeyMismatchError",
    "ProfileConfig",
    "ProfileStore",
    "ProfileWriteError",
    "RemoteAccount",
    "RemoteBoundDevice",
    "RemoteDevice",
    "RemoteServiceError",
    "WarpError",
    "WarpHttpClient",
    "build_orchestrator",
    "generate_keypair",
    "parse_reserved",
    "public_key_from_private",
    "render_profile",
]
