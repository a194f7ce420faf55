"""CLI tests — publish and stats commands."""

import httpx
from click.testing import CliRunner

from eventrelay.cli import main as cli
from eventrelay.schemas.envelope import BroadcastResult


def test_publish_prints_relay_reply(monkeypatch):
    calls = []

    async def fake_broadcast(event, data=None, *, url=None, **kwargs):
        calls.append((event, data, url))
        return BroadcastResult(success=True, receivers=3)

    monkeypatch.setattr(cli, "broadcast", fake_broadcast)

    result = CliRunner().invoke(
        cli.main, ["publish", "booking_created", "--data", '{"id": 1}']
    )

    assert result.exit_code == 0, result.output
    assert '"receivers": 3' in result.output
    assert calls == [("booking_created", {"id": 1}, None)]


def test_publish_rejects_bad_json():
    result = CliRunner().invoke(cli.main, ["publish", "booking_created", "--data", "{nope"])
    assert result.exit_code == 1
    assert "not valid JSON" in result.output


def test_publish_unreachable_relay(monkeypatch):
    async def fake_broadcast(event, data=None, **kwargs):
        return None

    monkeypatch.setattr(cli, "broadcast", fake_broadcast)

    result = CliRunner().invoke(cli.main, ["publish", "booking_created"])
    assert result.exit_code == 1
    assert "unreachable" in result.output


def test_publish_bus_failure_exits_nonzero(monkeypatch):
    async def fake_broadcast(event, data=None, **kwargs):
        return BroadcastResult(success=False, error="bus is closed")

    monkeypatch.setattr(cli, "broadcast", fake_broadcast)

    result = CliRunner().invoke(cli.main, ["publish", "booking_created"])
    assert result.exit_code == 1
    assert "bus is closed" in result.output


def test_stats_lists_clients(monkeypatch):
    def fake_get(url, timeout):
        assert url == "http://relay:8000/stats"
        return httpx.Response(
            200,
            json={"connected_clients": 2, "client_ids": ["a", "b"]},
            request=httpx.Request("GET", url),
        )

    monkeypatch.setattr(cli.httpx, "get", fake_get)

    result = CliRunner().invoke(cli.main, ["stats", "--url", "http://relay:8000"])
    assert result.exit_code == 0, result.output
    assert "Connected clients: 2" in result.output
    assert "  a" in result.output


def test_base_url_strips_broadcast_path():
    assert cli._base_url("http://localhost:8000/broadcast") == "http://localhost:8000"
