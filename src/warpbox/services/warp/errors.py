"""Error taxonomy for the WARP account lifecycle."""
from __future__ import annotations

from typing import Any

__all__ = [
    "WarpError",
    "InvalidAccountError",
    "RemoteServiceError",
    "ActivationFailedError",
    "LicenseKeyMismatchError",
    "KeyRotationVerificationError",
    "KeyGenerationError",
    "ClientIdDecodeError",
    "ProfileWriteError",
]


class WarpError(RuntimeError):
    """Base class for every failure surfaced by :mod:`warpbox.services.warp`."""


class InvalidAccountError(WarpError):
    """No usable local account; run ``register`` first."""

    def __init__(self, message: str = "invalid account: run 'register' first"):
        super().__init__(message)


class RemoteServiceError(WarpError):
    """Raised when the registration API fails or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        payload: Any | None = None,
        retryable: bool | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
        # transport failures and 5xx/429 are worth another attempt by the caller
        if retryable is None:
            retryable = status_code == 0 or status_code == 429 or status_code >= 500
        self.retryable = retryable


class ActivationFailedError(WarpError):
    """The remote service did not report the bound device as active."""


class LicenseKeyMismatchError(WarpError):
    """After rotation the remote account license differs from the local one."""


class KeyRotationVerificationError(WarpError):
    """After rotation the remote device does not carry the new public key."""


class KeyGenerationError(WarpError):
    """Key material could not be produced or parsed."""


class ClientIdDecodeError(WarpError):
    """The remote client id is not valid base64."""


class ProfileWriteError(WarpError):
    """The tunnel profile or warp-config record could not be written."""
