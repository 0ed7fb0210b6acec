"""Container runtime backed by the docker CLI."""

import json
import logging
import subprocess
from typing import Any, Dict, List, Optional

from uds.errors import RuntimeCommandError
from uds.providers.base import ContainerRuntime
from uds.utils.process import CommandResult, run_command


logger = logging.getLogger(__name__)


class DockerRuntime(ContainerRuntime):
    """Runtime that shells out to ``docker``."""
    
    def __init__(self, binary: str = "docker", timeout: int = 600):
        """Initialize docker runtime."""
        self.binary = binary
        self.timeout = timeout
        
    def _run(self, operation: str, target: str, args: List[str], **kwargs) -> CommandResult:
        """Run a docker subcommand, translating failures."""
        cmd = [self.binary, *args]
        try:
            return run_command(cmd, timeout=kwargs.pop("timeout", self.timeout), **kwargs)
        except subprocess.CalledProcessError as e:
            output = "\n".join(part for part in (e.stdout, e.stderr) if part)
            raise RuntimeCommandError(operation, target, output, e.returncode) from e
        except subprocess.TimeoutExpired as e:
            raise RuntimeCommandError(operation, target, f"timed out after {e.timeout}s") from e
        except FileNotFoundError as e:
            raise RuntimeCommandError(operation, target, f"{self.binary} executable not found") from e
            
    def pull(self, reference: str) -> None:
        """Pull an image by reference."""
        self._run("pull", reference, ["pull", reference])
        
    def list_containers(self, name: str, all: bool = True) -> List[str]:
        """Names of containers whose name is exactly ``name``."""
        args = ["ps", "--filter", f"name=^/?{name}$", "--format", "{{.Names}}"]
        if all:
            args.insert(1, "-a")
        result = self._run("list", name, args)
        # The name filter is a regex, so compare exactly as well
        return [line.strip() for line in result.stdout.splitlines() if line.strip() == name]
        
    def inspect(self, name: str) -> Optional[Dict[str, Any]]:
        """Inspect document for a container, or None if it does not exist."""
        result = self._run(
            "inspect", name, ["container", "inspect", name], check=False
        )
        if result.returncode != 0:
            if "no such" in result.output.lower():
                return None
            raise RuntimeCommandError("inspect", name, result.output, result.returncode)
            
        try:
            documents = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise RuntimeCommandError("inspect", name, f"invalid inspect output: {e}") from e
        return documents[0] if documents else None
        
    def exec(self, name: str, command: List[str], capture_output: bool = True) -> CommandResult:
        """Run a command inside a running container."""
        return self._run(
            "exec", name, ["exec", name, *command],
            check=False, capture_output=capture_output, timeout=None,
        )
        
    def start(self, name: str) -> None:
        """Start a stopped container."""
        self._run("start", name, ["start", name])
        
    def stop(self, name: str, timeout: int) -> None:
        """Stop a container gracefully."""
        self._run("stop", name, ["stop", f"--time={timeout}", name], timeout=timeout + self.timeout)
        
    def kill(self, name: str) -> None:
        """Forcefully terminate a container."""
        self._run("kill", name, ["kill", name])
        
    def logs(self, name: str, tail: Optional[int] = None) -> str:
        """Container logs, stdout followed by stderr."""
        args = ["logs", name]
        if tail is not None:
            args[1:1] = ["--tail", str(tail)]
        result = self._run("logs", name, args)
        return result.output
