"""Output dispatcher — renders command results as a table, JSON, YAML, or CSV."""

from __future__ import annotations

import csv
import io
import json
from typing import Any

from rich.console import Console

from ttn_exporter.output.tables import kv_table

FORMATS = ("table", "json", "yaml", "csv")

console = Console()


def output_json(data: dict[str, Any]) -> None:
    console.print_json(json.dumps(data, indent=2, default=str))


def output_yaml(data: dict[str, Any]) -> None:
    import yaml

    console.print(
        yaml.safe_dump(json.loads(json.dumps(data, default=str)), default_flow_style=False, sort_keys=False),
        end="",
    )


def output_csv(data: dict[str, Any]) -> None:
    """Print a flat mapping as two-column CSV."""
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["field", "value"])
    writer.writerows([k, "" if v is None else v] for k, v in data.items())
    console.print(buf.getvalue(), end="")


def output(data: dict[str, Any], fmt: str = "table", *, title: str | None = None) -> None:
    """Dispatch output to the appropriate formatter."""
    if fmt == "json":
        output_json(data)
    elif fmt == "yaml":
        output_yaml(data)
    elif fmt == "csv":
        output_csv(data)
    elif fmt == "table":
        console.print(kv_table(data, title=title))
    else:
        raise ValueError(f"Unknown output format {fmt!r}, expected one of: {', '.join(FORMATS)}")
