"""Tests for the matchup CLI."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from matchup.cli.main import cli
from matchup.cli.serve_cmd import default_config_path


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "databaseUrl": f"sqlite:///{tmp_path / 'user.db'}",
                "ports": {"service": 8080},
            }
        )
    )
    return path


class TestServe:
    def test_runs_uvicorn_with_configured_port(self, runner, config_file):
        with patch("uvicorn.run") as run:
            result = runner.invoke(cli, ["serve", "user", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        app = run.call_args.args[0]
        assert app.state.service_name == "user"
        assert run.call_args.kwargs["port"] == 8080
        assert run.call_args.kwargs["host"] == "0.0.0.0"
        assert run.call_args.kwargs["log_level"] == "info"

    def test_port_and_log_level_options(self, runner, config_file):
        with patch("uvicorn.run") as run:
            result = runner.invoke(
                cli,
                ["serve", "user", "--config", str(config_file), "--port", "9999", "--log-level", "DEBUG"],
            )

        assert result.exit_code == 0, result.output
        assert run.call_args.kwargs["port"] == 9999
        assert run.call_args.kwargs["log_level"] == "debug"

    def test_log_level_from_env(self, runner, config_file):
        with patch("uvicorn.run") as run:
            result = runner.invoke(
                cli,
                ["serve", "user", "--config", str(config_file)],
                env={"MATCHUP_LOG_LEVEL": "warning"},
            )

        assert result.exit_code == 0, result.output
        assert run.call_args.kwargs["log_level"] == "warning"

    def test_missing_config(self, runner, tmp_path):
        with patch("uvicorn.run") as run:
            result = runner.invoke(cli, ["serve", "match", "--config", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "Could not read configuration file" in result.output
        run.assert_not_called()

    def test_unknown_service(self, runner):
        result = runner.invoke(cli, ["serve", "billing"])
        assert result.exit_code != 0
        assert "billing" in result.output

    def test_default_config_path(self):
        assert default_config_path("auth") == "/etc/auth-service/config.json"
