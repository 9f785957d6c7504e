import json

import httpx
import pytest
from typer.testing import CliRunner

from gdapi.core.client import GoDaddyClient
from gdapi.domain.models.errors import ConfigurationError
from gdapi.infrastructure.config.settings import ClientSettings
from gdapi.main import app

from tests.helpers import RecordingTransport, json_response

# These fixtures are defined in tests/conftest.py:
# runner: CliRunner
# settings: ClientSettings pointing at the test endpoint


@pytest.fixture
def cli_transport(mocker, settings: ClientSettings):
    """Wires the CLI to fixed settings and a recording transport."""
    transport = RecordingTransport()

    async def open_client(loaded: ClientSettings, validate: bool = False) -> GoDaddyClient:
        kwargs = dict(endpoint=loaded.endpoint, timeout=loaded.timeout, transport=transport.transport)
        if validate:
            return await GoDaddyClient.create(loaded.api_key, loaded.api_secret, **kwargs)
        return GoDaddyClient(loaded.api_key, loaded.api_secret, **kwargs)

    mocker.patch('gdapi.main.load_settings', return_value=settings)
    mocker.patch('gdapi.main.setup_logging')
    mocker.patch('gdapi.main.open_client', side_effect=open_client)
    return transport


def test_get_command_prints_json(runner: CliRunner, cli_transport: RecordingTransport):
    cli_transport.responses.append(json_response(200, [{"domain": "example.com"}]))

    result = runner.invoke(app, ["get", "/v1/domains"])

    assert result.exit_code == 0, result.output
    assert "example.com" in result.output
    assert cli_transport.requests[0].url.path == "/v1/domains"


def test_request_command_sends_body(runner: CliRunner, cli_transport: RecordingTransport):
    cli_transport.responses.append(json_response(200))
    body = [{"data": "203.0.113.7", "ttl": 600}]

    result = runner.invoke(app, ["request", "put", "/v1/domains/example.com/records/A/www", "--data", json.dumps(body)])

    assert result.exit_code == 0, result.output
    request = cli_transport.requests[0]
    assert request.method == "PUT"
    assert json.loads(request.content) == body


def test_api_error_exits_with_code_one(runner: CliRunner, cli_transport: RecordingTransport):
    cli_transport.responses.append(json_response(404, {"code": "NOT_FOUND", "message": "missing"}))

    result = runner.invoke(app, ["get", "/v1/domains/missing.com"])

    assert result.exit_code == 1
    assert "NOT_FOUND" in result.output


def test_transport_error_exits_with_code_one(runner: CliRunner, cli_transport: RecordingTransport):
    cli_transport.responses.append(httpx.ConnectError("unreachable"))

    result = runner.invoke(app, ["get", "/v1/domains"])

    assert result.exit_code == 1
    assert "unreachable" in result.output


def test_invalid_json_body_is_usage_error(runner: CliRunner, cli_transport: RecordingTransport):
    result = runner.invoke(app, ["request", "POST", "/v1/x", "--data", "{oops"])

    assert result.exit_code == 2
    assert cli_transport.requests == []


def test_unknown_method_is_usage_error(runner: CliRunner, cli_transport: RecordingTransport):
    result = runner.invoke(app, ["request", "TRACE", "/v1/x"])

    assert result.exit_code == 2
    assert cli_transport.requests == []


def test_check_accepts_quota_exceeded(runner: CliRunner, cli_transport: RecordingTransport):
    cli_transport.responses.append(json_response(429, {"code": "QUOTA_EXCEEDED", "message": "limit hit"}))

    result = runner.invoke(app, ["check"])

    assert result.exit_code == 0, result.output
    assert "Credentials accepted" in result.output


def test_check_rejects_bad_credentials(runner: CliRunner, cli_transport: RecordingTransport):
    cli_transport.responses.append(json_response(401, {"code": "UNABLE_TO_AUTHENTICATE", "message": "bad key"}))

    result = runner.invoke(app, ["check"])

    assert result.exit_code == 1
    assert "UNABLE_TO_AUTHENTICATE" in result.output


def test_missing_configuration_exits_with_code_one(runner: CliRunner, mocker):
    mocker.patch('gdapi.main.load_settings', side_effect=ConfigurationError("GoDaddy API key and secret are required"))

    result = runner.invoke(app, ["get", "/v1/domains"])

    assert result.exit_code == 1
    assert "required" in result.output
