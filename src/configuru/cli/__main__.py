"""configuru CLI entry point."""

import logging
import sys

import typer

from .check import check_command

app = typer.Typer(
    name="configuru",
    help="Validate configuration sources against declared parameters",
    invoke_without_command=True,
)

app.command("check")(check_command)


@app.command("version")
def version():
    """Show version information."""
    from .. import __version__
    typer.echo(f"configuru version {__version__}")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Validate configuration sources against declared parameters."""
    if verbose:
        logging.basicConfig(level=logging.INFO)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        typer.echo("\nError: Missing command.", err=True)
        raise typer.Exit(1)


def cli_main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("\nAborted", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
