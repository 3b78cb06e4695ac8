from __future__ import annotations

from pathlib import Path

import pytest

from warpbox.config import const
from warpbox.services.settings import Settings, SettingsError


def test_defaults(tmp_path):
    settings = Settings.from_sources(base_dir=tmp_path, env={})
    assert settings.base_dir == tmp_path
    assert settings.api_base == const.API_BASE
    assert settings.timeout == const.HTTP_TIMEOUT
    assert settings.strict_reserved is True


def test_base_dir_from_environment(tmp_path):
    settings = Settings.from_sources(env={"WARPBOX_BASE_DIR": str(tmp_path / "env")})
    assert settings.base_dir == tmp_path / "env"


def test_yaml_then_environment_precedence(tmp_path):
    (tmp_path / "warpbox.yaml").write_text(
        "api_base: https://yaml.test\ntimeout: 5\nmtu: 1420\nstrict_reserved: false\n",
        encoding="utf-8",
    )
    settings = Settings.from_sources(base_dir=tmp_path, env={"WARPBOX_TIMEOUT": "7.5"})

    assert settings.api_base == "https://yaml.test"
    assert settings.timeout == 7.5
    assert settings.mtu == 1420
    assert settings.strict_reserved is False


def test_yaml_cannot_move_base_dir(tmp_path):
    (tmp_path / "warpbox.yaml").write_text("base_dir: /elsewhere\n", encoding="utf-8")
    assert Settings.from_sources(base_dir=tmp_path, env={}).base_dir == tmp_path


@pytest.mark.parametrize(
    ("content", "env"),
    [
        ("- a list\n", {}),
        ("unknown_key: 1\n", {}),
        ("timeout: [\n", {}),
        ("", {"WARPBOX_TIMEOUT": "-1"}),
        ("", {"WARPBOX_STRICT_RESERVED": "maybe"}),
        ("", {"WARPBOX_MTU": "big"}),
    ],
)
def test_invalid_sources(tmp_path, content, env):
    (tmp_path / "warpbox.yaml").write_text(content, encoding="utf-8")
    with pytest.raises(SettingsError):
        Settings.from_sources(base_dir=tmp_path, env=env)


def test_with_overrides_returns_copy():
    base = Settings(base_dir=Path("/tmp/x"))
    changed = base.with_overrides(log_level="debug", timeout=None)
    assert changed.log_level == "DEBUG"
    assert base.log_level == "INFO"
    assert changed.timeout == base.timeout
