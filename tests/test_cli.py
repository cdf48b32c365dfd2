import importlib
import json

import pytest
from typer.testing import CliRunner

from conftest import FakeRpc, rpc_error
from tzkit.toolkit import TezosToolkit
from tzkit.version import __version__

cli = importlib.import_module("tzkit.cli.main")
runner = CliRunner()


@pytest.fixture()
def fake_node(monkeypatch):
    for name in ("RPC_URL", "CHAIN", "TIMEOUT", "LOG_LEVEL", "SECRET_KEY"):
        monkeypatch.delenv(f"TZKIT_{name}", raising=False)
    rpc = FakeRpc()
    monkeypatch.setattr(cli, "_toolkit", lambda c: TezosToolkit(rpc, config=c.config))
    return rpc


def test_version():
    result = runner.invoke(cli.app, ["version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_env_reflects_flags(fake_node):
    result = runner.invoke(cli.app, ["--rpc", "https://rpc.example.net/", "--chain", "NetXtest", "env"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["rpc_url"] == "https://rpc.example.net"
    assert data["chain"] == "NetXtest"


def test_bad_rpc_url_is_a_usage_error(fake_node):
    result = runner.invoke(cli.app, ["--rpc", "ftp://nope", "env"])
    assert result.exit_code != 0


def test_balance_in_tez_and_mutez(fake_node):
    assert runner.invoke(cli.app, ["balance", "tz1x"]).output.strip() == "1.5"
    assert runner.invoke(cli.app, ["balance", "tz1x", "--mutez"]).output.strip() == "1500000"


def test_head(fake_node):
    result = runner.invoke(cli.app, ["head"])
    assert result.exit_code == 0
    assert json.loads(result.output)["level"] == 100


def test_library_errors_exit_with_code_one(fake_node, monkeypatch):
    async def broken(address):
        raise rpc_error(500, "boom")

    monkeypatch.setattr(fake_node, "get_balance", broken)
    result = runner.invoke(cli.app, ["balance", "tz1x"])
    assert result.exit_code == 1
    assert "error:" in result.output


def test_estimate_transfer(fake_node):
    result = runner.invoke(cli.app, ["estimate-transfer", "--to", "tz1y", "--amount", "2", "--source", "tz1x"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["gas_limit"] == 10307
    assert data["storage_limit"] == 300


def test_transfer_requires_a_key(fake_node):
    result = runner.invoke(cli.app, ["transfer", "--to", "tz1y", "--amount", "1"])
    assert result.exit_code != 0
    assert fake_node.called("inject_operation") == []


def test_transfer_injects(fake_node, monkeypatch):
    import asyncio

    from tzkit.signer import InMemorySigner

    monkeypatch.setenv("TZKIT_SECRET_KEY", asyncio.run(InMemorySigner(bytes(32)).secret_key()))
    result = runner.invoke(cli.app, ["transfer", "--to", "tz1y", "--amount", "1"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"hash": fake_node.op_hash, "status": "applied"}


def test_main_returns_exit_codes(fake_node):
    assert cli.main(["version"]) == 0
    assert cli.main(["no-such-command"]) == 1


def test_watch_stops_after_limit(fake_node):
    from conftest import block

    fake_node.heads = [
        block(1, "ooA", contents=[{"kind": "transaction", "destination": "KT1abc"}, {"kind": "delegation"}]),
    ]
    result = runner.invoke(cli.app, ["watch", "--kind", "transaction", "--limit", "1"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"hash": "ooA", "kind": "transaction", "destination": "KT1abc"}
