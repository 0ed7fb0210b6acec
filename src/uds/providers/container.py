"""Container lifecycle control through a container runtime."""

import logging
import time
from typing import Any, Callable, Dict, Optional

from uds.errors import (
    CommandFailed,
    ContainerNotFound,
    ContainerNotRunning,
    RuntimeCommandError,
    StartFailed,
    StopFailed,
)
from uds.providers.base import ContainerHealth, ContainerRuntime
from uds.utils.retry import RetryError, RetryPolicy, constant_backoff


logger = logging.getLogger(__name__)

START_RETRY_DELAY = 3.0
LOG_MODES = ("tail", "all")


class ContainerController:
    """Inspects, starts, stops and executes into named containers."""

    def __init__(
        self,
        runtime: ContainerRuntime,
        max_start_attempts: int = 3,
        stop_timeout: int = 30,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize container controller."""
        self.runtime = runtime
        self.stop_timeout = stop_timeout
        self.start_policy = RetryPolicy(
            max_attempts=max_start_attempts,
            classify=constant_backoff(START_RETRY_DELAY),
            sleep=sleep,
            retry_on=(RuntimeCommandError,),
        )

    def exists(self, name: str) -> bool:
        """Check if a container with exactly this name exists."""
        return name in self.runtime.list_containers(name, all=True)

    def is_running(self, name: str) -> bool:
        """Check if a container with exactly this name is running."""
        return name in self.runtime.list_containers(name, all=False)

    def get_info(self, name: str) -> Dict[str, Any]:
        """Full inspect document for a container."""
        info = self.runtime.inspect(name)
        if info is None:
            logger.warning(f"Container {name} not found")
            raise ContainerNotFound(name)
        return info

    def get_health(self, name: str) -> ContainerHealth:
        """Health status of a container.

        Health only means something for running containers: anything not
        running is reported as stopped, and a running container without a
        health check is reported as running.
        """
        state = self.get_info(name).get("State") or {}

        if state.get("Status") != "running":
            return ContainerHealth.STOPPED

        health = state.get("Health")
        if not health:
            return ContainerHealth.RUNNING

        status = str(health.get("Status", "")).lower()
        try:
            return ContainerHealth(status)
        except ValueError:
            logger.warning(f"Unknown health status {status!r} for container {name}")
            return ContainerHealth.RUNNING

    def get_logs(self, name: str, lines: int = 50, mode: str = "tail") -> str:
        """Recent logs of a container.

        ``mode="tail"`` returns the last ``lines`` lines, ``mode="all"`` the
        full log.
        """
        if mode not in LOG_MODES:
            raise ValueError(f"Unknown log mode {mode!r}, expected one of {', '.join(LOG_MODES)}")

        if not self.exists(name):
            logger.warning(f"Container {name} not found")
            raise ContainerNotFound(name)

        return self.runtime.logs(name, tail=lines if mode == "tail" else None)

    def exec(self, name: str, command: str, capture_output: bool = True) -> Optional[str]:
        """Run a shell command inside a running container.

        Returns the command's stdout when ``capture_output`` is set.
        """
        if not self.is_running(name):
            logger.error(f"Container {name} is not running")
            raise ContainerNotRunning(name)

        result = self.runtime.exec(name, ["sh", "-c", command], capture_output=capture_output)

        if result.returncode != 0:
            logger.error(f"Command failed in container {name}: {command}")
            raise CommandFailed(name, command, result.returncode, result.stdout, result.stderr)

        return result.stdout if capture_output else None

    def start(self, name: str, max_attempts: Optional[int] = None) -> None:
        """Start a stopped container, retrying failed starts."""
        if not self.exists(name):
            logger.error(f"Container {name} not found")
            raise ContainerNotFound(name)

        if self.is_running(name):
            logger.info(f"Container {name} is already running")
            return

        logger.info(f"Starting container {name}")

        policy = self.start_policy
        if max_attempts is not None:
            policy = policy.with_attempts(max_attempts)

        try:
            policy.run(lambda: self.runtime.start(name), description=f"Start of {name}")
        except RetryError as e:
            logger.error(f"Failed to start container {name} after {e.attempts} attempts")
            raise StartFailed(name, e.attempts, str(e.last_error)) from e.last_error

        logger.info(f"Container {name} started successfully")

    def stop(self, name: str, timeout_seconds: Optional[int] = None) -> None:
        """Stop a running container, killing it if graceful stop fails."""
        if timeout_seconds is None:
            timeout_seconds = self.stop_timeout

        if not self.is_running(name):
            logger.info(f"Container {name} is not running")
            return

        logger.info(f"Stopping container {name} (timeout: {timeout_seconds}s)")

        try:
            self.runtime.stop(name, timeout_seconds)
        except RuntimeCommandError as e:
            logger.warning(f"Failed to stop container {name} gracefully, forcing: {e}")
            try:
                self.runtime.kill(name)
            except RuntimeCommandError as kill_error:
                logger.error(f"Failed to kill container {name}")
                raise StopFailed(name, str(kill_error)) from kill_error

        logger.info(f"Container {name} stopped")
