"""CLI tests for ``vmscli config``."""

from __future__ import annotations

import json
from pathlib import Path

from vmscli.app import app
from vmscli.config import get_config_path, get_credentials_path, load_global_config


def _invoke(cli_runner, *args: str):
    return cli_runner.invoke(app, ["--no-color", "config", *args])


class TestConfigSet:
    def test_set_base_url(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "set", "base_url", "https://portal.example.com")

        assert result.exit_code == 0, result.output
        assert load_global_config().base_url == "https://portal.example.com"

    def test_set_credential_store_is_normalized(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "set", "credential_store", " FILE ")

        assert result.exit_code == 0, result.output
        assert load_global_config().credential_store == "file"

    def test_set_invalid_credential_store(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "set", "credential_store", "vault")

        assert result.exit_code == 2
        assert "invalid credential store" in result.output
        assert not get_config_path().exists()

    def test_set_nested_number(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "set", "request.timeout", "5.5")

        assert result.exit_code == 0, result.output
        assert load_global_config().request.timeout == 5.5

    def test_set_nested_bool(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "set", "request.verify_ssl", "false")

        assert result.exit_code == 0, result.output
        assert load_global_config().request.verify_ssl is False

    def test_set_bad_number(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "set", "request.timeout", "soon")

        assert result.exit_code == 2
        assert "Expected a number" in result.output

    def test_set_unknown_key(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "set", "color", "blue")

        assert result.exit_code == 2
        assert "Unknown config key" in result.output

    def test_set_invalid_parent_key(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "set", "base_url.host", "x")

        assert result.exit_code == 2
        assert "Invalid config key" in result.output


class TestConfigShowAndPath:
    def test_show_json(self, cli_runner, isolated_config: Path) -> None:
        _invoke(cli_runner, "set", "base_url", "https://portal.example.com")

        result = cli_runner.invoke(app, ["--json", "--no-color", "config", "show"])

        assert result.exit_code == 0, result.output
        assert '"base_url": "https://portal.example.com"' in result.output
        assert '"cookie_prefix": "production"' in result.output

    def test_show_invalid_config_file(self, cli_runner, isolated_config: Path) -> None:
        path = get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text("{broken", encoding="utf-8")

        result = _invoke(cli_runner, "show")

        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_path_prints_both_files(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "path")

        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert lines == [str(get_config_path()), str(get_credentials_path())]

    def test_saved_file_is_json(self, cli_runner, isolated_config: Path) -> None:
        _invoke(cli_runner, "set", "cookie_prefix", "staging")

        data = json.loads(get_config_path().read_text(encoding="utf-8"))
        assert data["cookie_prefix"] == "staging"
