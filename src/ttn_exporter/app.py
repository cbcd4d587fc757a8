"""Root Typer app — global options and command registration."""

from __future__ import annotations

from typing import Annotated

import typer

from ttn_exporter import __version__
from ttn_exporter.commands import config_cmd, fetch, serve

app = typer.Typer(
    name="ttn-exporter",
    help="Prometheus exporter for The Things Network gateway statistics.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"ttn-exporter {__version__}")
        raise typer.Exit()


VersionOpt = Annotated[
    bool,
    typer.Option(
        "--version", "-V", callback=_show_version, is_eager=True, help="Show version and exit.",
    ),
]


@app.callback()
def main_callback(version: VersionOpt = False) -> None:
    """Poll TTN gateway connection stats and serve them to Prometheus."""


app.command(name="serve")(serve.serve)
app.command(name="fetch")(fetch.fetch)
app.add_typer(config_cmd.app, name="config")


def main() -> None:
    app(prog_name="ttn-exporter")
