from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import typer
import uvicorn

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_snapshot
from logging_config import configure_logging
from services.poller import build_default_poller
from settings import get_settings, parse_listen_address
from storage.onewire import build_default_bus


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Run and query the 1-Wire temperature exporter.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _apply_overrides(overrides: Dict[str, Optional[str]]) -> None:
    for name, value in overrides.items():
        if value is not None:
            os.environ[name] = value
    for cache in (get_settings, build_default_bus, build_default_poller):
        cache.cache_clear()


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Exporter base URL (defaults to EXPORTER_BASE_URL env or http://localhost:8105).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the exporter to respond.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("serve")
def serve_command(
    listen_address: Optional[str] = typer.Option(
        None,
        "--web.listen-address",
        help="Address and port to expose metrics (default :8105).",
    ),
    telemetry_path: Optional[str] = typer.Option(
        None,
        "--web.telemetry-path",
        help="Path under which to expose metrics (default /metrics).",
    ),
    json_path: Optional[str] = typer.Option(
        None,
        "--web.json-path",
        help="Path under which to expose json metrics (default /json).",
    ),
    export_fahrenheit: bool = typer.Option(
        False,
        "--export.fahrenheit",
        help="Include Fahrenheit in export.",
    ),
    device_root: Optional[Path] = typer.Option(
        None,
        "--device-root",
        file_okay=False,
        help="Directory holding the 1-Wire device entries.",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        min=0.001,
        help="Seconds between polling passes (default 60).",
    ),
) -> None:
    """Poll the sensors and serve /metrics, /json and the index page."""
    _apply_overrides(
        {
            "ONEWIRE_LISTEN_ADDRESS": listen_address,
            "ONEWIRE_TELEMETRY_PATH": telemetry_path,
            "ONEWIRE_JSON_PATH": json_path,
            "ONEWIRE_EXPORT_FAHRENHEIT": "true" if export_fahrenheit else None,
            "ONEWIRE_DEVICE_ROOT": str(device_root) if device_root is not None else None,
            "ONEWIRE_POLL_INTERVAL": str(poll_interval) if poll_interval is not None else None,
        }
    )
    settings = get_settings()
    try:
        host, port = parse_listen_address(settings.listen_address)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--web.listen-address") from exc

    configure_logging()
    typer.echo(f"Exporter listening on {settings.listen_address}")
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_config=None,
        log_level=settings.log_level.lower(),
    )


@app.command("snapshot")
def snapshot_command(
    ctx: typer.Context,
    fahrenheit: bool = typer.Option(
        False,
        "--fahrenheit",
        help="Also show each value converted to Fahrenheit.",
    ),
) -> None:
    """Fetch and display the exporter's JSON snapshot."""
    state = _get_state(ctx)
    payload = state.client.get_snapshot()
    render_snapshot(payload, fahrenheit=fahrenheit)


@app.command("metrics")
def metrics_command(ctx: typer.Context) -> None:
    """Print the raw Prometheus exposition text."""
    state = _get_state(ctx)
    typer.echo(state.client.get_metrics(), nl=False)
