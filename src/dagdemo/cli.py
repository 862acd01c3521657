"""dagdemo Command Line Interface.

Entry point for the dagdemo CLI tool. The only flag is -o; everything
else (node count, blocks per node, logging) comes from DAGDEMO_*
environment variables or the YAML file named by DAGDEMO_SETTINGS_FILE.
"""

from __future__ import annotations

import os
from pathlib import Path

import typer
from pydantic import ValidationError

from dagdemo.contracts import DagDemoError
from dagdemo.core.config import SETTINGS_FILE_ENV, DagDemoSettings, load_settings

__all__ = [
    "app",
]

app = typer.Typer(
    name="dagdemo",
    help="Mine blocks on a simulated multi-node cluster and render the resulting DAG as HTML.",
    add_completion=False,
)


def _load_settings_or_exit() -> DagDemoSettings:
    """Load settings, printing a readable error and exiting 1 on failure."""
    settings_file = os.environ.get(SETTINGS_FILE_ENV)
    try:
        return load_settings(Path(settings_file) if settings_file else None)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


@app.command()
def main(
    output: str = typer.Option(
        "",
        "-o",
        help="Where to save the rendered dag (file or directory; default: system temp dir).",
    ),
) -> None:
    """Generate a dag across a test cluster and save it as an HTML document."""
    settings = _load_settings_or_exit()

    from dagdemo.core.logging import configure_logging

    configure_logging(json_output=settings.json_logs, level=settings.log_level)

    from dagdemo.engine.orchestrator import run_net

    typer.echo("Generating dag")
    try:
        result = run_net(settings, output or None)
    except DagDemoError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from None

    typer.echo(f"Saved dag to {result.output_path}")


if __name__ == "__main__":
    app()
