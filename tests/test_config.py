"""Tests for osiris/config.py - config file loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from osiris.config import Config, load_config, parse_refresh_interval, resolve_config_path
from osiris.constants import CONFIG_ENV_VAR, DEFAULT_REFRESH_INTERVAL_S
from osiris.exceptions import ConfigError


class TestResolveConfigPath:
    """Tests for resolve_config_path lookup order."""

    def test_explicit_path_wins(self, monkeypatch, tmp_dir: Path):
        """An explicit path beats the environment variable."""
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_dir / "env-config"))
        assert resolve_config_path(tmp_dir / "cli-config") == tmp_dir / "cli-config"

    def test_env_var(self, monkeypatch, tmp_dir: Path):
        """OSIRIS_CONFIG is used when no path is given."""
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_dir / "env-config"))
        assert resolve_config_path() == tmp_dir / "env-config"

    def test_default_under_home(self, monkeypatch, tmp_dir: Path):
        """Falls back to ~/.osiris/config."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.setenv("HOME", str(tmp_dir))
        assert resolve_config_path() == tmp_dir / ".osiris" / "config"


class TestParseRefreshInterval:
    """Tests for parse_refresh_interval."""

    def test_valid(self):
        assert parse_refresh_interval("45") == 45

    def test_zero_rejected(self):
        assert parse_refresh_interval("0") is None

    def test_negative_rejected(self):
        assert parse_refresh_interval("-5") is None

    def test_non_numeric_rejected(self):
        assert parse_refresh_interval("soon") is None


class TestLoadConfig:
    """Tests for load_config."""

    def test_reads_all_keys(self, tmp_dir: Path):
        """Every supported key is read; comments and blanks are skipped."""
        path = tmp_dir / "config"
        path.write_text(
            "# credentials\n"
            "api_key=NRAK-abc=def\n"
            "\n"
            "account_id = 42\n"
            "refresh_interval=10\n"
            "ssh_user=ops\n"
            "rdp_user=Administrator\n"
        )

        cfg = load_config(path)

        assert cfg.api_key == "NRAK-abc=def"
        assert cfg.account_id == "42"
        assert cfg.refresh_interval == 10
        assert cfg.ssh_user == "ops"
        assert cfg.rdp_user == "Administrator"
        assert cfg.has_credentials

    def test_missing_file_returns_defaults(self, tmp_dir: Path):
        """A missing file is not an error."""
        cfg = load_config(tmp_dir / "nope")
        assert cfg == Config()
        assert cfg.refresh_interval == DEFAULT_REFRESH_INTERVAL_S
        assert not cfg.has_credentials

    def test_invalid_interval_ignored(self, tmp_dir: Path, caplog):
        """A bad refresh_interval keeps the default and logs a warning."""
        path = tmp_dir / "config"
        path.write_text("api_key=k\naccount_id=1\nrefresh_interval=0\n")

        with caplog.at_level("WARNING", logger="osiris"):
            cfg = load_config(path)

        assert cfg.refresh_interval == DEFAULT_REFRESH_INTERVAL_S
        assert "refresh_interval" in caplog.text

    def test_api_key_never_logged(self, tmp_dir: Path, caplog):
        """Only whether the key is set reaches the log."""
        path = tmp_dir / "config"
        path.write_text("api_key=NRAK-SECRET\naccount_id=1\n")

        with caplog.at_level("DEBUG", logger="osiris"):
            load_config(path)

        assert "NRAK-SECRET" not in caplog.text
        assert "API key set: True" in caplog.text

    def test_unreadable_file_raises(self, tmp_dir: Path):
        """A directory in place of the file raises ConfigError."""
        path = tmp_dir / "config"
        path.mkdir()
        with pytest.raises(ConfigError):
            load_config(path)

    def test_blank_user_keeps_default(self, tmp_dir: Path):
        path = tmp_dir / "config"
        path.write_text("ssh_user=\n")
        assert load_config(path).ssh_user == "admin"
