"""Tests covering path resolution for account and profile files."""

from __future__ import annotations

from pathlib import Path

from warpbox.adapters.fs.path_provider import PathProvider
from warpbox.services.settings import Settings


def test_path_provider_file_layout(tmp_path):
    settings = Settings.from_sources(base_dir=tmp_path / "warpbox-test", env={})
    provider = PathProvider.from_settings(settings)

    base = Path(settings.base_dir).expanduser().resolve()
    assert provider.base_dir() == base
    assert provider.account_file() == base / "wgcf-account.json"
    assert provider.warp_config_file() == base / "wgcf-config.json"
    assert provider.profile_file() == base / "wgcf-profile.conf"
    assert provider.config_file() == base / "warpbox.yaml"


def test_ensure_base_creates_directory(tmp_path):
    provider = PathProvider(base=tmp_path / "nested" / "dir")
    assert not provider.base_dir().exists()
    provider.ensure_base()
    assert provider.base_dir().is_dir()
