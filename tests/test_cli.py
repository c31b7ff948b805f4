import xmlrpc.client

import pytest
from typer.testing import CliRunner

import rpcbatch.cli.main as cli_main
from rpcbatch.cli.main import app, parse_call, parse_value
from rpcbatch.transport import HttpTransport
from tests.mocks.server import SERVER_URL

runner = CliRunner()


@pytest.fixture(autouse=True)
def fake_transport(monkeypatch, server):
    monkeypatch.setattr(cli_main, "load_dotenv", lambda: None)
    monkeypatch.setattr(
        cli_main,
        "make_transport",
        lambda settings: HttpTransport(client=server.http_client()),
    )


def test_parse_value():
    assert parse_value("3") == 3
    assert parse_value('{"a": [1]}') == {"a": [1]}
    assert parse_value("plain") == "plain"


def test_parse_call():
    assert parse_call("math.mul [3, 4]") == {"methodName": "math.mul", "params": [3, 4]}
    assert parse_call("system.listMethods") == {"methodName": "system.listMethods", "params": []}
    assert parse_call("echo 5") == {"methodName": "echo", "params": [5]}


def test_call_command(server):
    result = runner.invoke(app, ["call", SERVER_URL, "math.mul", "6", "7"])

    assert result.exit_code == 0
    assert "42" in result.output
    assert server.requests == [("math.mul", (6, 7))]


def test_call_command_renders_binary(server):
    server.register(name="blob", func=lambda: xmlrpc.client.Binary(b"hi"))

    result = runner.invoke(app, ["call", SERVER_URL, "blob"])

    assert result.exit_code == 0
    assert "aGk=" in result.output


def test_call_command_reports_faults():
    result = runner.invoke(app, ["call", SERVER_URL, "fail", "7", "bad"])

    assert result.exit_code == 1
    assert "Fault 7: bad" in result.output


def test_multicall_command(server):
    result = runner.invoke(
        app,
        ["multicall", SERVER_URL, "--call", "add [1, 2]", "-c", "math.mul [3, 4]"],
    )

    assert result.exit_code == 0
    assert "add" in result.output
    assert "12" in result.output
    assert len(server.requests) == 1
    assert server.requests[0][0] == "system.multicall"


def test_multicall_command_reports_item_faults():
    result = runner.invoke(app, ["multicall", SERVER_URL, "-c", "add [1, 2]", "-c", "missing"])

    assert result.exit_code == 1
    assert "-32601" in result.output


def test_methods_command():
    result = runner.invoke(app, ["methods", SERVER_URL])

    assert result.exit_code == 0
    assert "math.mul" in result.output
    assert "system.listMethods" in result.output
