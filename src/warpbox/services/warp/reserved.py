from __future__ import annotations

import base64
import binascii

from .errors import ClientIdDecodeError

__all__ = ["parse_reserved"]


def parse_reserved(client_id: str) -> list[int]:
    """Decode the WARP ``client_id`` into the per-connection "reserved" bytes.

    Each decoded byte becomes its unsigned value (0..255), order preserved.
    """
    try:
        decoded = base64.b64decode(client_id, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ClientIdDecodeError(f"client id {client_id!r} is not valid base64") from exc
    return list(decoded)
