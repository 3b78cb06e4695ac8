"""Persistence of the local WARP account credentials."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from warpbox.adapters.fs.atomic import atomic_write_text
from warpbox.adapters.fs.path_provider import PathProvider

from .models import AccountRecord

_log = logging.getLogger("warpbox.warp.account_store")

__all__ = ["AccountStore"]


def _utcnow() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


class AccountStore:
    """Reads and atomically rewrites ``wgcf-account.json``.

    The store does not validate the record; that is the orchestrator's job.
    """

    def __init__(self, paths: PathProvider):
        self._path = paths.account_file()

    @property
    def path(self) -> Path:
        return self._path

    def _read_raw(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as exc:
            _log.warning("account file %s is unreadable, treating as empty: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            _log.warning("account file %s does not hold an object, treating as empty", self._path)
            return {}
        return data

    def load(self) -> AccountRecord:
        return AccountRecord.from_mapping(self._read_raw())

    def save(self, record: AccountRecord) -> Path:
        previous = self._read_raw()
        now = _utcnow()
        payload = record.as_json()
        payload["created_at"] = str(previous.get("created_at") or now)
        payload["updated_at"] = now
        atomic_write_text(self._path, json.dumps(payload, ensure_ascii=False, indent=2) + "\n", mode=0o600)
        _log.debug("account saved to %s", self._path)
        return self._path
