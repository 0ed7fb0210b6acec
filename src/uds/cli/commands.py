"""Command implementations for CLI."""

import json
import shlex
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from uds.compose.generator import ComposeGenerator
from uds.config import ConfigManager
from uds.errors import InvalidConfig
from uds.providers.base import ContainerHealth
from uds.providers.registry import ProviderRegistry


console = Console()

HEALTH_STYLES = {
    ContainerHealth.HEALTHY: "green",
    ContainerHealth.RUNNING: "green",
    ContainerHealth.STARTING: "yellow",
    ContainerHealth.UNHEALTHY: "red",
    ContainerHealth.STOPPED: "red",
}


def _require_manager(manager: Optional[ConfigManager]) -> ConfigManager:
    """Deployment commands need a loaded deployment file."""
    if manager is None:
        raise InvalidConfig("A deployment file is required for this command")
    return manager


def generate_compose(
    registry: ProviderRegistry,
    manager: Optional[ConfigManager],
    output: Optional[Path] = None,
):
    """Generate the compose file for the loaded deployment."""
    manager = _require_manager(manager)
    spec = manager.deployment
    output = output or Path(spec.app_name) / "docker-compose.yml"
    
    generator = ComposeGenerator(health_check=manager.health_check)
    path = generator.generate(spec, output)
    
    console.print(f"[green]✓[/green] Generated compose file for {spec.app_name} at {path}")


def check_port(
    registry: ProviderRegistry,
    manager: Optional[ConfigManager],
    port: int,
    host: Optional[str] = None,
):
    """Report whether a port is free."""
    if registry.ports.is_port_available(port, host):
        console.print(f"[green]✓[/green] Port {port} is available")
    else:
        console.print(f"[yellow]●[/yellow] Port {port} is in use")


def find_port(
    registry: ProviderRegistry,
    manager: Optional[ConfigManager],
    base_port: int,
    max_port: Optional[int] = None,
    increment: Optional[int] = None,
):
    """Print the first free port from ``base_port`` upwards."""
    port = registry.ports.find_available_port(base_port, max_port, increment)
    console.print(port)


def resolve_port(
    registry: ProviderRegistry,
    manager: Optional[ConfigManager],
    port: int,
    auto_assign: Optional[bool] = None,
):
    """Print the port to use for ``port`` after conflict resolution."""
    resolved = registry.ports.resolve_port_conflict(port, auto_assign)
    console.print(resolved)


def pull_images(
    registry: ProviderRegistry,
    manager: Optional[ConfigManager],
    skip: bool = False,
):
    """Pull the images of the loaded deployment."""
    spec = _require_manager(manager).deployment
    
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"Pulling {len(spec.images)} image(s)...", total=None)
        summary = registry.images.pull_all(spec.images, spec.tag, skip=skip)
        progress.update(task, completed=True)
        
    if summary.skipped:
        console.print("Image pull skipped")
        return
        
    table = Table(title="Images")
    table.add_column("Reference", style="cyan")
    table.add_column("Pulled")
    for reference in summary.requested:
        pulled = "[green]✓[/green]" if reference in summary.pulled else "[red]✗[/red]"
        table.add_row(reference, pulled)
    console.print(table)
    console.print(f"Pulled {len(summary.pulled)}/{len(summary.requested)} images")


def show_status(registry: ProviderRegistry, manager: Optional[ConfigManager], name: str):
    """Show existence, run state and health of a container."""
    containers = registry.containers
    health = containers.get_health(name)
    style = HEALTH_STYLES[health]
    
    table = Table(title=f"Container {name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Running", "[green]●[/green]" if containers.is_running(name) else "[red]○[/red]")
    table.add_row("Health", f"[{style}]{health.value}[/{style}]")
    console.print(table)


def show_logs(
    registry: ProviderRegistry,
    manager: Optional[ConfigManager],
    name: str,
    lines: int = 50,
    mode: str = "tail",
):
    """Print container logs."""
    console.print(registry.containers.get_logs(name, lines=lines, mode=mode), markup=False, highlight=False)


def show_info(registry: ProviderRegistry, manager: Optional[ConfigManager], name: str):
    """Print the container inspect document."""
    console.print_json(json.dumps(registry.containers.get_info(name)))


def start_container(registry: ProviderRegistry, manager: Optional[ConfigManager], name: str):
    """Start a container."""
    registry.containers.start(name)
    console.print(f"[green]✓[/green] Container {name} started")


def stop_container(
    registry: ProviderRegistry,
    manager: Optional[ConfigManager],
    name: str,
    timeout: Optional[int] = None,
):
    """Stop a container."""
    registry.containers.stop(name, timeout)
    console.print(f"[green]✓[/green] Container {name} stopped")


def exec_in_container(
    registry: ProviderRegistry,
    manager: Optional[ConfigManager],
    name: str,
    command: List[str],
):
    """Execute a command in a container and print its output."""
    output = registry.containers.exec(name, shlex.join(command))
    if output:
        console.print(output, end="", markup=False, highlight=False)
