"""
Tests for the command line entry point
"""

import pytest

from bcconnector.config import reset_settings
from bcconnector.main import build_parser, main


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AZURE_TENANT_ID", "contoso.onmicrosoft.com")
    monkeypatch.setenv("AZURE_CLIENT_ID", "11111111-2222-3333-4444-555555555555")
    monkeypatch.setenv("BC_ENVIRONMENT", "Sandbox")
    monkeypatch.setenv("SECURE_STORE", "memory")
    reset_settings()
    yield monkeypatch
    reset_settings()


@pytest.mark.unit
class TestMain:
    def test_validate_config_ok(self, cli_env, capsys):
        assert main(["--validate-config"]) == 0

        output = capsys.readouterr().out
        assert "contoso.onmicrosoft.com/Sandbox/api/v2.0" in output
        assert "Configuration looks valid" in output

    def test_validate_config_reports_missing_tenant(self, cli_env, capsys):
        cli_env.setenv("AZURE_TENANT_ID", "")
        reset_settings()

        assert main(["--validate-config"]) == 1
        assert "AZURE_TENANT_ID is not set" in capsys.readouterr().out

    def test_status_when_signed_out(self, cli_env, capsys):
        assert main(["status"]) == 0

        output = capsys.readouterr().out
        assert '"authenticated": false' in output
        assert '"expires_at": null' in output

    def test_no_command_prints_help(self, cli_env):
        assert main([]) == 2

    def test_fetch_options_parsed(self):
        args = build_parser().parse_args(["fetch", "customers", "--top", "5", "--filter", "city eq 'Atlanta'"])
        assert (args.entity, args.top, args.filter) == ("customers", 5, "city eq 'Atlanta'")

    def test_invalid_configuration_reported_without_traceback(self, cli_env, capsys):
        cli_env.setenv("SECURE_STORE", "keychain")
        reset_settings()

        assert main(["status"]) == 1
        assert "❌ Invalid BCConnector configuration" in capsys.readouterr().out
