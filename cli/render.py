from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

from services.parser import celsius_to_fahrenheit


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def render_snapshot(payload: Iterable[Dict[str, Any]], fahrenheit: bool = False) -> None:
    echo_heading("Sensor Snapshot")
    items = list(payload)
    if not items:
        typer.echo("No devices discovered.")
        return
    for item in items:
        value = item.get("value")
        line = f"  - {item.get('sensorid')} ({item.get('type')}): {value} C"
        if fahrenheit and isinstance(value, (int, float)):
            line += f" / {celsius_to_fahrenheit(float(value))} F"
        typer.echo(line)
