"""Container runtime capability interface."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from uds.utils.process import CommandResult


class ContainerHealth(Enum):
    """Container health status."""
    STOPPED = "stopped"
    RUNNING = "running"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    STARTING = "starting"


class ContainerRuntime(ABC):
    """Narrow interface over the container runtime.

    Implementations raise :class:`uds.errors.RuntimeCommandError` when the
    runtime reports a failure.
    """
    
    @abstractmethod
    def pull(self, reference: str) -> None:
        """Pull an image by reference."""
        pass
        
    @abstractmethod
    def list_containers(self, name: str, all: bool = True) -> List[str]:
        """Names of containers whose name is exactly ``name``.

        With ``all=False`` only running containers are listed.
        """
        pass
        
    @abstractmethod
    def inspect(self, name: str) -> Optional[Dict[str, Any]]:
        """Inspect document for a container, or None if it does not exist."""
        pass
        
    @abstractmethod
    def exec(self, name: str, command: List[str], capture_output: bool = True) -> CommandResult:
        """Run a command inside a running container and report its exit code."""
        pass
        
    @abstractmethod
    def start(self, name: str) -> None:
        """Start a stopped container."""
        pass
        
    @abstractmethod
    def stop(self, name: str, timeout: int) -> None:
        """Stop a container, waiting up to ``timeout`` seconds."""
        pass
        
    @abstractmethod
    def kill(self, name: str) -> None:
        """Forcefully terminate a container."""
        pass
        
    @abstractmethod
    def logs(self, name: str, tail: Optional[int] = None) -> str:
        """Container logs, limited to the last ``tail`` lines when given."""
        pass
