from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from src.config_loader import resolve_config
from src.datatypes import SysfetchConfig


@pytest.fixture(autouse=True)
def isolated_config_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point HOME and XDG_CONFIG_HOME at a throwaway directory and clear colour overrides."""

    home = tmp_path / "home"
    config_home = home / ".config"
    config_home.mkdir(parents=True)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("NO_COLOR", raising=False)
    return config_home


@pytest.fixture
def app_dir(isolated_config_home: Path) -> Path:
    """Return the sysfetch config directory inside the isolated home, created."""

    path = isolated_config_home / "sysfetch"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def default_config() -> SysfetchConfig:
    """Return the configuration built from the defaults alone."""

    return resolve_config(ignore_file=True)


@pytest.fixture
def make_config(tmp_path: Path):
    """Build a configuration from TOML text layered over the defaults."""

    def _make(text: str = "", module_override: str | None = None) -> SysfetchConfig:
        path = tmp_path / "fixture-config.toml"
        path.write_text(text, encoding="utf-8")
        return resolve_config(location_override=str(path), module_override=module_override)

    return _make


@pytest.fixture
def runner() -> CliRunner:
    """Provide a Click runner configured for CLI smoke tests."""

    return CliRunner()
