"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from shipping_gateway.cli import cli
from shipping_gateway.drivers import MelhorEnvioDriver
from shipping_gateway.errors import HttpStatusError

from conftest import FakeHttpClient, RecordingSleep

SHIPMENT_ARGS = [
    "--from-cep", "01001-000",
    "--to-cep", "20040-010",
    "--weight", "1.2",
    "--length", "20",
    "--width", "15",
    "--height", "10",
    "--value", "100",
]


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Environment for a Melhor Envio run, from a directory without .env files."""
    monkeypatch.setenv("SHIPPING_DEFAULT_DRIVER", "melhor_envio")
    monkeypatch.setenv("MELHOR_ENVIO_TOKEN", "test-token")
    monkeypatch.setenv("MELHOR_ENVIO_USE_SANDBOX", "false")
    monkeypatch.setenv("MELHOR_ENVIO_ORDER_LOOKUP_DELAY", "0")
    monkeypatch.setenv("LOG_FILE", "")
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def fake_carrier(cli_env):
    """Route the Melhor Envio driver the CLI builds to a scripted client."""
    http = FakeHttpClient()
    cli_env.setattr(
        "shipping_gateway.manager.MelhorEnvioDriver",
        lambda config: MelhorEnvioDriver(config, http=http, sleep=RecordingSleep()),
    )
    return http


@pytest.fixture
def options_file(tmp_path):
    path = tmp_path / "options.json"
    path.write_text(json.dumps({
        "from": {"name": "Sender", "postal_code": "01001000"},
        "to": {"name": "Recipient", "postal_code": "20040010"},
    }))
    return str(path)


class TestCli:
    """Tests for the click commands that need no carrier."""

    def test_init_writes_template(self, tmp_path):
        """Test init writes the configuration template."""
        target = tmp_path / "shipping.env"

        result = CliRunner().invoke(cli, ["init", str(target)])

        assert result.exit_code == 0
        content = target.read_text()
        assert "MELHOR_ENVIO_TOKEN=" in content
        assert "MELHOR_ENVIO_ORDER_LOOKUP_DELAY=3" in content

    def test_status_shows_sandbox_uri(self, tmp_path, monkeypatch):
        """Test status reports the sandbox base URI when enabled."""
        monkeypatch.setenv("MELHOR_ENVIO_USE_SANDBOX", "true")
        monkeypatch.setenv("MELHOR_ENVIO_TOKEN", "abc")
        monkeypatch.chdir(tmp_path)

        result = CliRunner().invoke(cli, ["status"])

        assert result.exit_code == 0
        assert "sandbox.melhorenvio.com.br" in result.output

    def test_version(self):
        """Test the version option."""
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "Shipping Gateway" in result.output


class TestQuoteCommand:
    """Tests for the quote command."""

    def test_rate_table(self, fake_carrier):
        """Test offers are printed as a table."""
        fake_carrier.queue([
            {"name": "PAC", "price": "20.5", "delivery_time": 7},
            {"name": "SEDEX", "price": 35},
        ])

        result = CliRunner().invoke(cli, ["quote", *SHIPMENT_ARGS])

        assert result.exit_code == 0
        assert "PAC" in result.output
        assert "20.50" in result.output
        assert "SEDEX" in result.output
        assert "35.00" in result.output
        assert fake_carrier.paths() == ["me/shipment/calculate"]

    def test_no_quotes(self, fake_carrier):
        """Test an empty answer prints a notice instead of a table."""
        fake_carrier.queue([])

        result = CliRunner().invoke(cli, ["quote", *SHIPMENT_ARGS])

        assert result.exit_code == 0
        assert "No quotes returned" in result.output

    def test_all_providers(self, fake_carrier):
        """Test --all quotes every registered provider."""
        fake_carrier.queue([{"name": "PAC", "price": 20}])

        result = CliRunner().invoke(cli, ["quote", "--all", *SHIPMENT_ARGS])

        assert result.exit_code == 0
        assert "melhor_envio" in result.output
        assert "PAC" in result.output


class TestLabelCommand:
    """Tests for the label command."""

    def test_label_issued(self, fake_carrier, happy_path_responses, options_file):
        """Test a successful issuance prints tracking code and label URL."""
        fake_carrier.queue(*happy_path_responses)

        result = CliRunner().invoke(
            cli, ["label", *SHIPMENT_ARGS, "--service", "123", "--options-file", options_file]
        )

        assert result.exit_code == 0
        assert "XX123456BR" in result.output
        assert "imprimir/ABC123" in result.output
        assert fake_carrier.requests[0].json["service"] == 123

    def test_failure_exits_with_error(self, fake_carrier, options_file):
        """Test a failed issuance reports the stage and exits with code 1."""
        fake_carrier.queue(HttpStatusError("401", status=401, body="Unauthenticated."))

        result = CliRunner().invoke(
            cli, ["label", *SHIPMENT_ARGS, "--service", "123", "--options-file", options_file]
        )

        assert result.exit_code == 1
        assert "failed at cart_add" in result.output
        assert len(fake_carrier.requests) == 1

    def test_missing_addresses_make_no_request(self, fake_carrier):
        """Test a shipment without addresses fails before contacting the carrier."""
        result = CliRunner().invoke(cli, ["label", *SHIPMENT_ARGS, "--service", "123"])

        assert result.exit_code == 1
        assert "failed at cart_add" in result.output
        assert fake_carrier.requests == []
