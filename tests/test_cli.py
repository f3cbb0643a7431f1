"""Tests for osiris/cli.py - CLI integration tests using Click's CliRunner."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner
from osiris import cli as cli_module
from osiris.cli import cli, main, setup_logging
from osiris.cli_types import ConsoleArgs, ListArgs
from osiris.exceptions import CommandFailureError, OsirisError, UserError


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


class TestCliHelp:
    """Tests for CLI help output."""

    def test_main_help(self, runner: CliRunner):
        """Main --help shows all commands."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "console" in result.output
        assert "list" in result.output

    def test_main_help_shows_description(self, runner: CliRunner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Osiris" in result.output

    def test_console_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["console", "--help"])
        assert result.exit_code == 0
        assert "--config" in result.output
        assert "--refresh-interval" in result.output

    def test_list_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["list", "-h"])
        assert result.exit_code == 0
        assert "--json" in result.output
        assert "--no-correlate" in result.output


class TestCliVersion:
    """Tests for CLI version output."""

    def test_version_flag(self, runner: CliRunner):
        """--version shows version information."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "osiris" in result.output.lower()
        assert "0." in result.output or "1." in result.output


class TestCliDispatch:
    """Commands build their Args objects from options."""

    def test_console_args(self, runner: CliRunner, mocker, tmp_dir: Path):
        cmd = mocker.patch.object(cli_module, "cmd_console")
        config_path = str(tmp_dir / "config")

        result = runner.invoke(
            cli, ["console", "--config", config_path, "--refresh-interval", "7"]
        )

        assert result.exit_code == 0
        cmd.assert_called_once_with(ConsoleArgs(config=config_path, refresh_interval=7))

    def test_list_args(self, runner: CliRunner, mocker):
        cmd = mocker.patch.object(cli_module, "cmd_list")

        result = runner.invoke(cli, ["list", "--json", "--no-correlate"])

        assert result.exit_code == 0
        cmd.assert_called_once_with(ListArgs(config=None, json=True, no_correlate=True))

    def test_debug_flag_accepted(self, runner: CliRunner, mocker):
        mocker.patch.object(cli_module, "cmd_list")
        result = runner.invoke(cli, ["--debug", "list"])
        assert result.exit_code == 0

    def test_list_offline_end_to_end(self, runner: CliRunner, tmp_dir: Path):
        """Without credentials, list prints the offline sample hosts."""
        result = runner.invoke(cli, ["list", "--config", str(tmp_dir / "missing")])
        assert result.exit_code == 0
        assert "server-1" in result.output
        assert "API key or account ID not configured" in result.output


class TestMain:
    """Tests for main() exit-code mapping."""

    @pytest.mark.parametrize(
        ("error", "rc", "message"),
        [
            (UserError("bad input"), 2, "ERROR: bad input"),
            (UserError("custom", rc=5), 5, "ERROR: custom"),
            (OsirisError("broken"), 2, "ERROR: broken"),
            (KeyboardInterrupt(), 130, "ERROR: Interrupted"),
        ],
    )
    def test_error_mapping(self, mocker, capsys, error, rc, message):
        mocker.patch.object(cli_module, "cli", side_effect=error)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == rc
        assert message in capsys.readouterr().err

    def test_command_failure_silent(self, mocker, capsys):
        mocker.patch.object(cli_module, "cli", side_effect=CommandFailureError(rc=3))
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 3
        assert capsys.readouterr().err == ""


class TestCliLogging:
    """Tests for logging setup behavior."""

    def test_setup_logging_no_duplicate_handlers(self):
        """Repeated setup_logging calls do not add duplicate stderr handlers."""
        logger = logging.getLogger("osiris")
        original_handlers = list(logger.handlers)
        try:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)

            setup_logging(debug=False)
            setup_logging(debug=True)

            stderr_handlers = [
                h
                for h in logger.handlers
                if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
            ]
            assert len(stderr_handlers) == 1
            assert logger.level == logging.DEBUG
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
            for handler in original_handlers:
                logger.addHandler(handler)
