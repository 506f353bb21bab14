"""Main CLI implementation using Typer."""

from pathlib import Path
from typing import Optional, Callable, Any

import typer
from rich.console import Console

from flexdisco.agent.config import ConfigError
from flexdisco.cli.commands import discover_configs, list_templates, show_directive


# Create Typer app
app = typer.Typer(
    name="flexdisco",
    help="Discover co-located containers and build probe configurations for them",
    add_completion=False,
)

# Console for rich output
console = Console()


def _run_cli_command(handler: Callable[..., Any], **kwargs: Any):
    """Helper to run a CLI command with error handling."""
    try:
        handler(**kwargs)
    except (ConfigError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command("discover")
def discover_command(
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", "-c", help="Configuration directory"
    ),
    table: bool = typer.Option(False, "--table", help="Show a summary table instead of YAML"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide the progress spinner"),
):
    """Run one discovery pass and print the generated configurations."""
    _run_cli_command(discover_configs, config_dir=config_dir, table=table, quiet=quiet)


@app.command("templates")
def templates_command(
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", "-c", help="Configuration directory"
    ),
):
    """List available configuration templates."""
    _run_cli_command(list_templates, config_dir=config_dir)


@app.command("parse")
def parse_command(
    value: str = typer.Argument(..., help="Annotation value, e.g. t=redis,tt=img"),
    key: str = typer.Option("flexDiscovery", "--key", "-k", help="Annotation key"),
):
    """Decode a discovery annotation value."""
    _run_cli_command(show_directive, value=value, key=key)


def main():
    """Main entry point for CLI."""
    app()
