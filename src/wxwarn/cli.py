"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from typing import Annotated

import typer
from requests import RequestException
from rich.console import Console
from rich.markup import escape

from wxwarn import __version__
from wxwarn.alerts import match_to_dict, render_alerts
from wxwarn.config import WxWarnConfig
from wxwarn.errors import WxWarnError
from wxwarn.pipeline import lookup_alerts

app = typer.Typer(
    name="wxwarn",
    help="Display NOAA weather alerts in force at a latitude/longitude.",
    add_completion=False,
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"wxwarn {__version__}")
        raise typer.Exit()


@app.command()
def main(
    lat: Annotated[
        float,
        typer.Option("--lat", help="Latitude in decimal degrees."),
    ] = 43.2683199,
    lon: Annotated[
        float,
        typer.Option("--lon", help="Longitude in decimal degrees."),
    ] = -70.8635506,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print matches as JSON instead of text."),
    ] = False,
    details: Annotated[
        bool,
        typer.Option(
            "--details/--no-details",
            help="Fetch full alert text from api.weather.gov.",
        ),
    ] = True,
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Always download a fresh alerts archive."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Print every weather alert whose polygon covers the given point."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )

    config = WxWarnConfig(fetch_details=details, cache_enabled=not no_cache)

    try:
        matches = lookup_alerts(config, lat, lon)
        blocks = render_alerts(matches, config.field_names, config.area_delimiter)
    except WxWarnError as exc:
        console.print(f"[red]Alert data is unusable:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from None
    except RequestException as exc:
        console.print(f"[red]Download failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from None

    if as_json:
        console.print_json(json.dumps([match_to_dict(m) for m in matches]))
        return

    if not blocks:
        console.print("[green]No active alerts for this location.[/green]")
        return

    for i, block in enumerate(blocks):
        if i:
            console.rule()
        console.print(block, markup=False, highlight=False)
