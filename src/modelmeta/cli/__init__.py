"""Console script for modelmeta."""

from __future__ import annotations

import typer
from rich.console import Console

app = typer.Typer(
    name="modelmeta",
    help="Inspect declarative model schemas",
    no_args_is_help=True,
)
console = Console()

# Import subcommand apps
from modelmeta.cli.schema_commands import schema_app  # noqa: E402

# Register subcommands
app.add_typer(schema_app, name="schema", help="Compiled model schema operations")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Inspect declarative model schemas."""
    from modelmeta.config import configure_logging

    if verbose:
        configure_logging("DEBUG")


if __name__ == "__main__":
    app()
