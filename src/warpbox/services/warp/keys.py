from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from .errors import KeyGenerationError

__all__ = ["KeyPair", "generate_keypair", "public_key_from_private"]

_KEY_LEN = 32


@dataclass(slots=True, frozen=True)
class KeyPair:
    """Curve25519 keypair in WireGuard's base64 text form."""

    private_key: str
    public_key: str


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _public_b64(key: X25519PrivateKey) -> str:
    raw = key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return _b64(raw)


def generate_keypair() -> KeyPair:
    try:
        key = X25519PrivateKey.generate()
        private_raw = key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
    except (UnsupportedAlgorithm, OSError) as exc:
        raise KeyGenerationError(f"failed to generate X25519 keypair: {exc}") from exc
    return KeyPair(private_key=_b64(private_raw), public_key=_public_b64(key))


def public_key_from_private(private_key: str) -> str:
    """Derive the base64 public key for a stored base64 private key."""
    try:
        raw = base64.b64decode(private_key, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise KeyGenerationError("private key is not valid base64") from exc
    if len(raw) != _KEY_LEN:
        raise KeyGenerationError(f"private key must be {_KEY_LEN} bytes, got {len(raw)}")
    try:
        key = X25519PrivateKey.from_private_bytes(raw)
    except (UnsupportedAlgorithm, ValueError) as exc:
        raise KeyGenerationError(f"unusable private key: {exc}") from exc
    return _public_b64(key)
