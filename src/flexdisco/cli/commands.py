"""Command implementations for CLI."""

import asyncio
import io
from pathlib import Path
from typing import Optional, List

from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from ruamel.yaml import YAML

from flexdisco.agent.config import ConfigManager
from flexdisco.agent.main import resolve_config_dir, run_discovery
from flexdisco.discovery.annotations import build_directive, parse_annotation_value
from flexdisco.models.template import ProbeConfig
from flexdisco.utils.templates import PLACEHOLDERS


console = Console()


def dump_yaml(data) -> str:
    """Render plain data as block-style YAML."""
    yaml = YAML()
    yaml.default_flow_style = False
    stream = io.StringIO()
    yaml.dump(data, stream)
    return stream.getvalue()


def show_configs(configs: List[ProbeConfig], table: bool = False):
    """Print synthesized configurations."""
    if not configs:
        console.print("[yellow]No configurations discovered[/yellow]")
        return

    if table:
        output = Table(title="Discovered configurations")
        output.add_column("Name", style="cyan")
        output.add_column("Container", style="magenta")
        output.add_column("Image")

        for config in configs:
            attributes = config.custom_attributes or {}
            output.add_row(
                config.name or "",
                attributes.get("IDShort", ""),
                attributes.get("image", ""),
            )

        console.print(output)
        return

    documents = [config.dict(exclude_none=True) for config in configs]
    console.print(dump_yaml(documents), end="", markup=False, highlight=False)


def discover_configs(config_dir: Optional[Path] = None, table: bool = False, quiet: bool = False):
    """Run one discovery pass with a progress spinner and print the result."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        disable=quiet,
        transient=True,
    ) as progress:
        task = progress.add_task("Discovering containers...", total=None)
        configs = asyncio.run(run_discovery(config_dir))
        progress.update(task, completed=True)

    show_configs(configs, table=table)
    return configs


def list_templates(config_dir: Optional[Path] = None):
    """List loaded template documents."""
    manager = ConfigManager(resolve_config_dir(config_dir))
    asyncio.run(manager.load())

    table = Table(title=f"Templates in {manager.templates_dir}")
    table.add_column("File", style="cyan")
    table.add_column("Placeholders")

    for template in manager.templates:
        placeholders = sorted(
            token for token in PLACEHOLDERS
            if token in template.raw_text
        )
        table.add_row(template.file_name, ", ".join(placeholders) or "-")

    console.print(table)


def show_directive(value: str, key: str = "flexDiscovery"):
    """Decode one annotation value and print the directive it yields."""
    directive = build_directive(key, parse_annotation_value(value))
    if directive is None:
        raise ValueError(f"No target in annotation value {value!r}")

    table = Table(title=f"Directive {key}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("target", directive.target)
    table.add_row("config", directive.config_name)
    table.add_row("reverse", str(directive.reverse).lower())
    table.add_row("target type", directive.target_type.value)
    table.add_row("target mode", directive.target_mode)
    table.add_row("ip mode", directive.ip_mode.value if directive.ip_mode else "default")
    table.add_row("port", directive.port or "auto")

    console.print(table)
    return directive
