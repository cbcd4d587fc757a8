"""Config commands — inspect resolved exporter settings."""

from __future__ import annotations

import typer

from ttn_exporter.client.errors import error_handler
from ttn_exporter.commands._common import EnvFileOpt, FormatOpt, mask_secret
from ttn_exporter.config.manager import load_settings
from ttn_exporter.output.formatter import output

app = typer.Typer(name="config", help="Inspect exporter configuration.", no_args_is_help=True)


@app.command()
@error_handler
def show(
    env_file: EnvFileOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Show resolved settings (API key masked)."""
    settings = load_settings(env_file=env_file)
    data = settings.model_dump()
    data["api_key"] = mask_secret(settings.api_key)
    data["stats_url"] = settings.stats_url
    output(data, fmt, title="Exporter Settings")
