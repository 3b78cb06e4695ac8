# src/warpbox/services/warp/client.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, MutableMapping, Protocol, runtime_checkable

import httpx

from warpbox.config import const

from .errors import RemoteServiceError
from .models import ConnectionContext, RemoteAccount, RemoteBoundDevice, RemoteDevice

_log = logging.getLogger("warpbox.warp.client")

__all__ = ["DeviceRegistrationClient", "WarpHttpClient"]


@runtime_checkable
class DeviceRegistrationClient(Protocol):
    """Every remote call the account lifecycle needs from the registration service."""

    def register(self, public_key: str, platform_label: str) -> RemoteDevice: ...

    def get_device(self, ctx: ConnectionContext) -> RemoteDevice: ...

    def get_bound_device(self, ctx: ConnectionContext) -> RemoteBoundDevice: ...

    def set_device_name(self, ctx: ConnectionContext, name: str) -> RemoteBoundDevice: ...

    def activate_bound_device(self, ctx: ConnectionContext, active: bool) -> RemoteBoundDevice: ...

    def rotate_license_key(self, ctx: ConnectionContext, new_public_key: str) -> None: ...

    def get_account(self, ctx: ConnectionContext) -> RemoteAccount: ...


def _tos_timestamp() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(slots=True)
class WarpHttpClient:
    """HTTP client for the WARP device registration API."""

    base_url: str = const.API_BASE
    timeout: float = const.HTTP_TIMEOUT
    user_agent: str = const.USER_AGENT
    client_version: str = const.CLIENT_VERSION
    locale: str = "en_US"
    # default headers applied to every request (can be overridden/extended)
    default_headers: dict[str, str] = field(default_factory=dict)
    transport: httpx.BaseTransport | None = None

    # ---------- public helpers ------------------------------------------------
    @classmethod
    def from_settings(cls, settings: Any, *, transport: httpx.BaseTransport | None = None) -> "WarpHttpClient":
        return cls(
            base_url=getattr(settings, "api_base", None) or const.API_BASE,
            timeout=float(getattr(settings, "timeout", None) or const.HTTP_TIMEOUT),
            user_agent=getattr(settings, "user_agent", None) or const.USER_AGENT,
            client_version=getattr(settings, "client_version", None) or const.CLIENT_VERSION,
            transport=transport,
        )

    def _base_headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "CF-Client-Version": self.client_version,
            "Accept": "application/json",
        }
        headers.update(self.default_headers)
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Mapping[str, Any] | None = None,
        ctx: ConnectionContext | None = None,
        timeout: float | None = None,
    ) -> Any:
        headers: MutableMapping[str, str] = self._base_headers()
        if ctx is not None:
            headers["Authorization"] = f"Bearer {ctx.access_token}"
        _log.debug("%s %s", method, path)
        try:
            with httpx.Client(
                base_url=self.base_url,
                timeout=timeout or self.timeout,
                transport=self.transport,
            ) as client:
                response = client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as exc:
            raise RemoteServiceError(f"{method} {path} timed out: {exc}", status_code=0) from exc
        except httpx.RequestError as exc:  # pragma: no cover - network errors are environment specific
            raise RemoteServiceError(f"{method} {path} failed: {exc}", status_code=0) from exc

        content: Any | None = None
        if response.content:
            try:
                content = response.json()
            except ValueError:
                content = response.text

        if response.status_code >= 400:
            message = response.text or f"HTTP {response.status_code}"
            if isinstance(content, Mapping):
                errors = content.get("errors")
                if isinstance(errors, list) and errors and isinstance(errors[0], Mapping):
                    detail = errors[0].get("message")
                    if isinstance(detail, str):
                        message = detail
                else:
                    detail = content.get("detail") or content.get("message") or content.get("error")
                    if isinstance(detail, str):
                        message = detail
            raise RemoteServiceError(
                f"{method} {path}: {message}",
                status_code=response.status_code,
                payload=content,
            )

        return content if content is not None else {}

    def _mapping(self, result: Any, what: str) -> Mapping[str, Any]:
        if not isinstance(result, Mapping):
            raise RemoteServiceError(f"unexpected {what} payload: {result!r}", status_code=200, payload=result, retryable=False)
        return result

    def _pick_bound_device(self, result: Any, ctx: ConnectionContext) -> RemoteBoundDevice:
        if not isinstance(result, list):
            raise RemoteServiceError(f"unexpected bound devices payload: {result!r}", status_code=200, payload=result, retryable=False)
        for item in result:
            if isinstance(item, Mapping) and item.get("id") == ctx.device_id:
                return RemoteBoundDevice.from_api(item)
        raise RemoteServiceError(
            f"device {ctx.device_id} is not bound to the account",
            status_code=404,
            payload=result,
            retryable=False,
        )

    def _device_path(self, ctx: ConnectionContext) -> str:
        return f"/reg/{ctx.device_id}"

    def _bound_device_path(self, ctx: ConnectionContext) -> str:
        return f"/reg/{ctx.device_id}/account/reg/{ctx.device_id}"

    # ------------------------------------------------------------------
    # Registration endpoints
    # ------------------------------------------------------------------
    def register(self, public_key: str, platform_label: str) -> RemoteDevice:
        payload = {
            "key": public_key,
            "install_id": "",
            "fcm_token": "",
            "tos": _tos_timestamp(),
            "model": platform_label,
            "type": "Android",
            "locale": self.locale,
        }
        result = self._request("POST", "/reg", json=payload)
        return RemoteDevice.from_api(self._mapping(result, "registration"))

    def get_device(self, ctx: ConnectionContext) -> RemoteDevice:
        result = self._request("GET", self._device_path(ctx), ctx=ctx)
        return RemoteDevice.from_api(self._mapping(result, "device"))

    def get_account(self, ctx: ConnectionContext) -> RemoteAccount:
        result = self._request("GET", f"{self._device_path(ctx)}/account", ctx=ctx)
        return RemoteAccount.from_api(self._mapping(result, "account"))

    # Bound devices -----------------------------------------------------
    def get_bound_device(self, ctx: ConnectionContext) -> RemoteBoundDevice:
        result = self._request("GET", f"{self._device_path(ctx)}/account/devices", ctx=ctx)
        return self._pick_bound_device(result, ctx)

    def set_device_name(self, ctx: ConnectionContext, name: str) -> RemoteBoundDevice:
        result = self._request("PATCH", self._bound_device_path(ctx), json={"name": name}, ctx=ctx)
        return self._pick_bound_device(result, ctx)

    def activate_bound_device(self, ctx: ConnectionContext, active: bool) -> RemoteBoundDevice:
        result = self._request("PATCH", self._bound_device_path(ctx), json={"active": active}, ctx=ctx)
        return self._pick_bound_device(result, ctx)

    # License -----------------------------------------------------------
    def rotate_license_key(self, ctx: ConnectionContext, new_public_key: str) -> None:
        # binds the device to the account owning ctx.license_key, then swaps the key
        self._request("PUT", f"{self._device_path(ctx)}/account", json={"license": ctx.license_key}, ctx=ctx)
        self._request("PATCH", self._device_path(ctx), json={"key": new_public_key}, ctx=ctx)
