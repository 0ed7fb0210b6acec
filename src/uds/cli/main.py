"""Main CLI implementation using Typer."""

from pathlib import Path
from typing import Any, Callable, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from uds.cli.commands import (
    check_port,
    exec_in_container,
    find_port,
    generate_compose,
    pull_images,
    resolve_port,
    show_info,
    show_logs,
    show_status,
    start_container,
    stop_container,
)
from uds.config import ConfigManager
from uds.errors import UDSError
from uds.models.config import UDSConfig
from uds.providers.registry import ProviderRegistry
from uds.utils.logging import setup_logging


# Create Typer app
app = typer.Typer(
    name="udsctl",
    help="UDS Docker - compose generation and container control for deployments",
    add_completion=False,
)

# Console for rich output
console = Console()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Settings or deployment file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override the configured log level"
    ),
):
    """Global options."""
    ctx.obj = {"config": config, "log_level": log_level}


def _run_cli_command(
    handler: Callable[..., Any],
    ctx: typer.Context,
    deployment_file: Optional[Path] = None,
    **kwargs: Any,
):
    """Helper to run a CLI command with providers and error handling."""
    options = ctx.obj or {}
    try:
        path = deployment_file or options.get("config")
        manager = ConfigManager(path).load() if path else None
        settings = manager.config if manager else UDSConfig()

        setup_logging(options.get("log_level") or settings.log_level)

        registry = ProviderRegistry()
        registry.initialize(settings)
        handler(registry, manager, **kwargs)
    except (UDSError, ValidationError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(getattr(e, "exit_code", 1)) from e


# Compose subcommands
compose_app = typer.Typer(help="Compose file commands")
app.add_typer(compose_app, name="compose")


@compose_app.command("generate")
def compose_generate_command(
    ctx: typer.Context,
    deployment_file: Path = typer.Argument(..., help="Deployment file"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Compose file path (default: <app_name>/docker-compose.yml)"
    ),
):
    """Generate a compose file from a deployment file."""
    _run_cli_command(generate_compose, ctx, deployment_file=deployment_file, output=output)


# Port subcommands
port_app = typer.Typer(help="Port commands")
app.add_typer(port_app, name="port")


@port_app.command("check")
def port_check_command(
    ctx: typer.Context,
    port: int = typer.Argument(..., help="Port to check"),
    host: Optional[str] = typer.Option(None, "--host", help="Host to probe"),
):
    """Check whether a port is available."""
    _run_cli_command(check_port, ctx, port=port, host=host)


@port_app.command("find")
def port_find_command(
    ctx: typer.Context,
    base_port: int = typer.Argument(..., help="First port to try"),
    max_port: Optional[int] = typer.Option(None, "--max", help="Last port to try"),
    increment: Optional[int] = typer.Option(None, "--increment", help="Scan step"),
):
    """Find the first available port."""
    _run_cli_command(find_port, ctx, base_port=base_port, max_port=max_port, increment=increment)


@port_app.command("resolve")
def port_resolve_command(
    ctx: typer.Context,
    port: int = typer.Argument(..., help="Requested port"),
    auto_assign: Optional[bool] = typer.Option(
        None, "--auto-assign/--no-auto-assign", help="Pick another port when taken"
    ),
):
    """Resolve a port conflict."""
    _run_cli_command(resolve_port, ctx, port=port, auto_assign=auto_assign)


# Image subcommands
image_app = typer.Typer(help="Image management commands")
app.add_typer(image_app, name="image")


@image_app.command("pull")
def image_pull_command(
    ctx: typer.Context,
    deployment_file: Path = typer.Argument(..., help="Deployment file"),
    skip: bool = typer.Option(False, "--skip", help="Skip pulling"),
):
    """Pull the images of a deployment."""
    _run_cli_command(pull_images, ctx, deployment_file=deployment_file, skip=skip)


# Container subcommands
container_app = typer.Typer(help="Container commands")
app.add_typer(container_app, name="container")


@container_app.command("status")
def container_status_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Container name"),
):
    """Show container health."""
    _run_cli_command(show_status, ctx, name=name)


@container_app.command("logs")
def container_logs_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Container name"),
    lines: int = typer.Option(50, "--lines", "-n", help="Number of lines"),
    all_lines: bool = typer.Option(False, "--all", help="Show the full log"),
):
    """Show container logs."""
    mode = "all" if all_lines else "tail"
    _run_cli_command(show_logs, ctx, name=name, lines=lines, mode=mode)


@container_app.command("info")
def container_info_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Container name"),
):
    """Show the container inspect document."""
    _run_cli_command(show_info, ctx, name=name)


@container_app.command("start")
def container_start_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Container name"),
):
    """Start a stopped container."""
    _run_cli_command(start_container, ctx, name=name)


@container_app.command("stop")
def container_stop_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Container name"),
    timeout: Optional[int] = typer.Option(None, "--timeout", "-t", help="Graceful stop timeout"),
):
    """Stop a running container."""
    _run_cli_command(stop_container, ctx, name=name, timeout=timeout)


@container_app.command("exec")
def container_exec_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Container name"),
    command: List[str] = typer.Argument(..., help="Command to execute"),
):
    """Execute command in container."""
    _run_cli_command(exec_in_container, ctx, name=name, command=command)


def main():
    """Main entry point for CLI."""
    app()
