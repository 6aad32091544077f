"""Tests for configuration loading and rule file discovery."""

from __future__ import annotations

from pathlib import Path

from secscan.config import DEFAULT_RULES_FILENAME, ScannerConfig


def test_defaults_use_xdg(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.delenv("SECSCAN_RULES", raising=False)
    monkeypatch.delenv("SECSCAN_WORKERS", raising=False)
    config = ScannerConfig.load()
    assert config.config_dir == tmp_path / "secscan"
    assert config.rules_path is None
    assert config.workers is None


def test_env_overrides(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("SECSCAN_RULES", str(tmp_path / "custom.yaml"))
    monkeypatch.setenv("SECSCAN_WORKERS", "3")
    config = ScannerConfig.load()
    assert config.rules_path == tmp_path / "custom.yaml"
    assert config.workers == 3


class TestResolveRulesPath:
    def test_explicit_wins(self, tmp_path: Path):
        config = ScannerConfig(config_dir=tmp_path, rules_path=tmp_path / "env.json")
        assert config.resolve_rules_path("cli.json", cwd=tmp_path) == Path("cli.json")

    def test_env_path_returned_even_if_missing(self, tmp_path: Path):
        config = ScannerConfig(config_dir=tmp_path, rules_path=tmp_path / "missing.json")
        assert config.resolve_rules_path(cwd=tmp_path) == tmp_path / "missing.json"

    def test_discovers_cwd_then_config_dir(self, tmp_path: Path):
        cwd = tmp_path / "project"
        config_dir = tmp_path / "config"
        cwd.mkdir()
        config_dir.mkdir()
        config = ScannerConfig(config_dir=config_dir)

        assert config.resolve_rules_path(cwd=cwd) is None

        (config_dir / DEFAULT_RULES_FILENAME).write_text("{}")
        assert config.resolve_rules_path(cwd=cwd) == config_dir / DEFAULT_RULES_FILENAME

        (cwd / DEFAULT_RULES_FILENAME).write_text("{}")
        assert config.resolve_rules_path(cwd=cwd) == cwd / DEFAULT_RULES_FILENAME
