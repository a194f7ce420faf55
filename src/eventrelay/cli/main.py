"""Event relay CLI — run the server, publish test events, inspect clients.

Usage:
    eventrelay serve                                   # Run the relay (uvicorn)
    eventrelay serve --port 9000
    eventrelay publish booking_created --data '{"id": 1}'
    eventrelay stats                                   # Connected clients
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Optional

import click
import httpx

from eventrelay import __version__
from eventrelay.client import broadcast
from eventrelay.config import settings

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _base_url(broadcast_url: str) -> str:
    """Strip the /broadcast path so other endpoints can be reached."""
    return broadcast_url.rsplit("/broadcast", 1)[0].rstrip("/")


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="eventrelay")
def main():
    """Event relay — real-time fan-out of domain events to WebSocket clients."""


# ---------------------------------------------------------------------------
# eventrelay serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: RELAY_HOST or 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Port (default: RELAY_PORT/PORT or 8000)")
def serve(host: Optional[str], port: Optional[int]):
    """Run the relay server."""
    import uvicorn

    uvicorn.run(
        "eventrelay.main:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


# ---------------------------------------------------------------------------
# eventrelay publish
# ---------------------------------------------------------------------------


@main.command()
@click.argument("event")
@click.option("--data", "-d", default=None, help="JSON payload (object)")
@click.option("--url", default=None, help="Broadcast URL (default: RELAY_BROADCAST_URL)")
def publish(event: str, data: Optional[str], url: Optional[str]):
    """Publish EVENT to every connected client."""
    payload = None
    if data:
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            click.secho(f"Error: --data is not valid JSON: {e}", fg="red", err=True)
            sys.exit(1)

    result = asyncio.run(broadcast(event, payload, url=url))
    if result is None:
        click.secho("Error: relay unreachable", fg="red", err=True)
        sys.exit(1)

    click.echo(_pretty_json(result.model_dump(exclude_none=True)))
    if not result.success:
        sys.exit(1)


# ---------------------------------------------------------------------------
# eventrelay stats
# ---------------------------------------------------------------------------


@main.command()
@click.option("--url", default=None, help="Relay base URL (default: derived from RELAY_BROADCAST_URL)")
def stats(url: Optional[str]):
    """Show connected WebSocket clients."""
    base = (url or _base_url(settings.broadcast_url)).rstrip("/")
    try:
        r = httpx.get(f"{base}/stats", timeout=settings.broadcast_timeout)
        r.raise_for_status()
    except httpx.HTTPError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    data = r.json()
    click.secho(f"Connected clients: {data['connected_clients']}", bold=True)
    for client_id in data["client_ids"]:
        click.echo(f"  {client_id}")


if __name__ == "__main__":
    main()
