"""
Plugdex CLI - inspect the plugins a launcher would load.

Minimal CLI for listing discovered plugins, showing the plugin roots in
priority order, and validating a single descriptor.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from plugdex.logging_config import setup_logging

app = typer.Typer(
    name="plugdex",
    help="Plugdex - launcher plugin discovery",
    no_args_is_help=True,
)

console = Console()


def _init_logging(log_level: Optional[str]) -> None:
    # Fall back to basic stderr logging if file logging is not permitted
    try:
        setup_logging(context="cli", level=log_level)
    except PermissionError:
        logging.basicConfig(level=(log_level or "INFO").upper())


@app.command("list")
def list_plugins(
    path: Optional[List[Path]] = typer.Option(
        None,
        "--path",
        "-p",
        help="Plugin root to scan (repeatable, highest priority first)",
    ),
    use_async: bool = typer.Option(
        False, "--async", help="Load descriptors concurrently"
    ),
    concurrency: Optional[int] = typer.Option(
        None, min=1, help="Max descriptors parsed at once (default: core count)"
    ),
    log_level: Optional[str] = typer.Option(None, help="Log level override"),
) -> None:
    """
    List all plugins that load successfully.

    Plugins are shown in discovery order: roots by priority, then the
    order each root's directory listing returns them.
    """
    from plugdex.config import settings
    from plugdex.plugins import PluginLoader, resolve_roots

    _init_logging(log_level)

    roots = list(path) if path else resolve_roots(settings)
    loader = PluginLoader(
        roots,
        concurrency=concurrency or settings.effective_concurrency,
    )

    if use_async:
        plugins = asyncio.run(loader.collect_async())
    else:
        plugins = loader.load_all()

    if not plugins:
        console.print("[yellow]No plugins found[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Plugins")
    table.add_column("Name", style="bold")
    table.add_column("Priority")
    table.add_column("Pattern")
    table.add_column("Source", overflow="fold")

    for plugin in plugins:
        table.add_row(
            plugin.config.name,
            plugin.config.query.priority.value,
            plugin.pattern.pattern if plugin.pattern else "-",
            str(plugin.source),
        )

    console.print(table)
    console.print(f"\nFound {len(plugins)} plugin(s)")


@app.command()
def paths() -> None:
    """Show plugin roots in priority order and whether they exist."""
    from plugdex.config import settings
    from plugdex.plugins import resolve_roots

    for rank, root in enumerate(resolve_roots(settings), start=1):
        marker = "[green]✓[/green]" if root.is_dir() else "[dim]✗[/dim]"
        console.print(f"{rank}. {marker} {root}")


@app.command()
def show(
    descriptor: Path = typer.Argument(..., help="Path to a plugin.ron file"),
    log_level: Optional[str] = typer.Option(None, help="Log level override"),
) -> None:
    """
    Load a single descriptor and print its validated configuration.

    Exits with status 1 when the plugin would be skipped during discovery.
    """
    from plugdex.plugins import ConfigLoader

    _init_logging(log_level)

    if not descriptor.is_file():
        console.print(f"[bold red]Error:[/bold red] File not found: {descriptor}")
        raise typer.Exit(1)

    result = ConfigLoader().load(descriptor.parent, descriptor)
    if result is None:
        console.print(
            f"[bold red]Error:[/bold red] Plugin at {descriptor.parent} "
            "cannot be loaded (see log for details)"
        )
        raise typer.Exit(1)

    config, _ = result
    console.print_json(config.model_dump_json())


if __name__ == "__main__":
    app()
