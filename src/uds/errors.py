"""Exception hierarchy for the docker integration layer."""

from typing import Optional


class UDSError(Exception):
    """Base class for all deployment errors."""


class InvalidConfig(UDSError):
    """Deployment input that cannot be degraded to a safe default."""


class PortInUse(UDSError):
    """Requested port is bound and auto-assignment is disabled."""

    def __init__(self, port: int, owner: Optional[str] = None):
        self.port = port
        self.owner = owner
        message = f"Port {port} is already in use and auto-assign is disabled"
        if owner:
            message += f" (held by: {owner})"
        super().__init__(message)


class PortExhausted(UDSError):
    """No free port in the scanned range."""

    def __init__(self, base_port: int, max_port: int):
        self.base_port = base_port
        self.max_port = max_port
        super().__init__(f"Failed to find an available port in range {base_port}-{max_port}")


class RuntimeCommandError(UDSError):
    """A container runtime invocation failed."""

    def __init__(self, operation: str, target: str, output: str = "", returncode: Optional[int] = None):
        self.operation = operation
        self.target = target
        self.output = output
        self.returncode = returncode
        detail = output.strip() or f"exit code {returncode}"
        super().__init__(f"{operation} {target} failed: {detail}")


class PullFailed(UDSError):
    """Image pull failed after retries or was classified as not found."""

    def __init__(self, reference: str, attempts: int, last_error: str = ""):
        self.reference = reference
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to pull image {reference} after {attempts} attempt(s): {last_error}"
        )


class ContainerNotFound(UDSError):
    """Named container does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Container {name} not found")


class ContainerNotRunning(UDSError):
    """Named container exists but is not running."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Container {name} is not running")


class CommandFailed(UDSError):
    """Command executed inside a container exited non-zero."""

    def __init__(self, name: str, command: str, exit_code: int, stdout: str = "", stderr: str = ""):
        self.name = name
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command failed in container {name} with exit code {exit_code}: {command}"
        )


class StartFailed(UDSError):
    """Container did not start within the allowed attempts."""

    def __init__(self, name: str, attempts: int, last_error: str = ""):
        self.name = name
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to start container {name} after {attempts} attempt(s): {last_error}"
        )


class StopFailed(UDSError):
    """Both graceful stop and forced kill failed."""

    def __init__(self, name: str, last_error: str = ""):
        self.name = name
        self.last_error = last_error
        super().__init__(f"Failed to kill container {name}: {last_error}")
