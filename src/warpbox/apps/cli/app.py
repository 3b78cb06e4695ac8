"""WARP account CLI commands."""

from __future__ import annotations

import os
import traceback
from functools import wraps
from pathlib import Path
from typing import Optional

import typer

from warpbox.services.logging import setup_logging
from warpbox.services.settings import Settings, SettingsError
from warpbox.services.warp import (
    AccountOrchestrator,
    DeviceStatus,
    GenerateResult,
    RemoteServiceError,
    WarpError,
    build_orchestrator,
)

app = typer.Typer(help="Register a WARP device and generate a WireGuard profile.", no_args_is_help=True)


def _run_safe(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except WarpError as exc:
            if os.getenv("WARPBOX_CLI_DEBUG") == "1":
                traceback.print_exc()
            typer.secho(f"error: {exc}", fg=typer.colors.RED, err=True)
            if isinstance(exc, RemoteServiceError) and exc.retryable:
                typer.echo("the registration service may be temporarily unavailable; try again later", err=True)
            raise typer.Exit(1)

    return wrapper


def _settings(ctx: typer.Context) -> Settings:
    return ctx.ensure_object(dict)["settings"]


def _orchestrator(ctx: typer.Context) -> AccountOrchestrator:
    return build_orchestrator(_settings(ctx))


def _print_status(status: DeviceStatus) -> None:
    device = status.device
    bound = status.bound_device
    account = device.account
    typer.echo("=" * 40)
    typer.echo(f"{'Device name':<16}: {bound.name or '-'}")
    typer.echo(f"{'Device id':<16}: {device.id}")
    typer.echo(f"{'Device model':<16}: {bound.model or device.model or '-'}")
    typer.echo(f"{'Device active':<16}: {bound.active}")
    typer.echo(f"{'Account type':<16}: {account.account_type or '-'}")
    typer.echo(f"{'Role':<16}: {bound.role or account.role or '-'}")
    typer.echo(f"{'Premium data':<16}: {_format_bytes(account.premium_data)}")
    typer.echo(f"{'Quota':<16}: {_format_bytes(account.quota)}")
    typer.echo("=" * 40)


def _format_bytes(value: int) -> str:
    size = float(value)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024 or unit == "TB":
            return f"{size:.2f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{value} B"


def _print_generated(result: GenerateResult, ctx: typer.Context) -> None:
    _print_status(result.status)
    base = Path(_settings(ctx).base_dir).expanduser()
    typer.echo(f"Reserved: {result.profile.reserved}")
    typer.secho(f"Successfully generated WireGuard profile in: {base}", fg=typer.colors.GREEN)


@app.callback()
def main(
    ctx: typer.Context,
    base_dir: Optional[Path] = typer.Option(None, "--base-dir", "-d", help="Directory holding account and profile files"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
):
    try:
        settings = Settings.from_sources(base_dir=base_dir)
    except SettingsError as exc:
        typer.secho(f"error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)
    if verbose:
        settings = settings.with_overrides(log_level="DEBUG")
    setup_logging(settings.log_level, json_format=json_logs)
    ctx.ensure_object(dict)["settings"] = settings


@app.command("register")
@_run_safe
def cmd_register(ctx: typer.Context):
    """Create a new WARP device and account unless one already exists."""
    orchestrator = _orchestrator(ctx)
    status = orchestrator.register()
    if status is None:
        typer.echo(f"warp account already exists: {orchestrator.record.device_id}")
        return
    _print_status(status)
    typer.secho("Successfully created WARP account", fg=typer.colors.GREEN)


@app.command("update")
@_run_safe
def cmd_update(
    ctx: typer.Context,
    license_key: str = typer.Argument(..., help="License key to bind the device to"),
    device_name: str = typer.Argument("", help="Optional device name"),
):
    """Bind the device to LICENSE_KEY, rotating keys when the account changes."""
    status = _orchestrator(ctx).update(license_key, device_name)
    if status is None:
        typer.echo("license key is empty, nothing to update")
        return
    _print_status(status)
    typer.secho("Successfully updated WARP account", fg=typer.colors.GREEN)


@app.command("generate")
@_run_safe
def cmd_generate(ctx: typer.Context):
    """Write the WireGuard profile for the registered device."""
    result = _orchestrator(ctx).generate()
    _print_generated(result, ctx)


@app.command("status")
@_run_safe
def cmd_status(ctx: typer.Context):
    """Show the remote device and account state."""
    _print_status(_orchestrator(ctx).status())


@app.command("run")
@_run_safe
def cmd_run(
    ctx: typer.Context,
    license_key: str = typer.Argument(..., help="License key to bind the device to"),
):
    """Register if needed, apply LICENSE_KEY and generate the profile."""
    result = _orchestrator(ctx).run(license_key)
    _print_generated(result, ctx)


if __name__ == "__main__":  # pragma: no cover
    app()
