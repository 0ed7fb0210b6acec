"""Shared fixtures."""

from typing import Dict, List, Optional, Union

import pytest

from uds.errors import RuntimeCommandError
from uds.providers.base import ContainerRuntime
from uds.utils.process import CommandResult


class FakeRuntime(ContainerRuntime):
    """In-memory container runtime recording every call."""
    
    def __init__(self):
        self.containers: Dict[str, dict] = {}
        self.pull_errors: Dict[str, Union[str, List[str]]] = {}
        self.start_errors: List[str] = []
        self.stop_error: Optional[str] = None
        self.kill_error: Optional[str] = None
        self.exec_result = CommandResult(returncode=0, stdout="ok\n")
        self.pulls: List[str] = []
        self.calls: List[tuple] = []
        
    def add_container(self, name: str, running: bool = False, health: Optional[str] = None, logs: str = ""):
        self.containers[name] = {"running": running, "health": health, "logs": logs}
        
    def pull(self, reference):
        self.pulls.append(reference)
        errors = self.pull_errors.get(reference)
        if isinstance(errors, str):
            raise RuntimeCommandError("pull", reference, errors, 1)
        if errors:
            raise RuntimeCommandError("pull", reference, errors.pop(0), 1)
            
    def list_containers(self, name, all=True):
        container = self.containers.get(name)
        if container is None or (not all and not container["running"]):
            return []
        return [name]
        
    def inspect(self, name):
        container = self.containers.get(name)
        if container is None:
            return None
        state = {"Status": "running" if container["running"] else "exited"}
        if container["health"]:
            state["Health"] = {"Status": container["health"]}
        return {"Name": f"/{name}", "State": state}
        
    def exec(self, name, command, capture_output=True):
        self.calls.append(("exec", name, command, capture_output))
        return self.exec_result
        
    def start(self, name):
        self.calls.append(("start", name))
        if self.start_errors:
            raise RuntimeCommandError("start", name, self.start_errors.pop(0), 1)
        self.containers[name]["running"] = True
        
    def stop(self, name, timeout):
        self.calls.append(("stop", name, timeout))
        if self.stop_error:
            raise RuntimeCommandError("stop", name, self.stop_error, 1)
        self.containers[name]["running"] = False
        
    def kill(self, name):
        self.calls.append(("kill", name))
        if self.kill_error:
            raise RuntimeCommandError("kill", name, self.kill_error, 1)
        self.containers[name]["running"] = False
        
    def logs(self, name, tail=None):
        lines = self.containers[name]["logs"].splitlines()
        if tail is not None:
            lines = lines[-tail:] if tail else []
        return "\n".join(lines)


@pytest.fixture
def fake_runtime():
    """Fresh fake runtime."""
    return FakeRuntime()


@pytest.fixture
def sleeps():
    """Recorded backoff delays."""
    return []
