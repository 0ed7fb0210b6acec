"""Port availability checks and conflict resolution."""

import logging
import re
import shutil
import socket
import subprocess
from typing import Callable, Optional, Set

from uds.errors import PortExhausted, PortInUse
from uds.models.config import PortConfig
from uds.utils.process import run_command


logger = logging.getLogger(__name__)

ADDRESS_PORT_PATTERN = re.compile(r":(\d+)$")

# Listening-socket scanners in order of preference, with the column that
# holds the local address in their output.
SCANNERS = (
    ("netstat", ["-tuln"], 3),
    ("ss", ["-tuln"], 4),
)

OWNER_LOOKUPS = (
    ("lsof", lambda port: ["lsof", "-i", f":{port}"], False),
    ("netstat", lambda port: ["netstat", "-tulpn"], True),
    ("ss", lambda port: ["ss", "-tulpn"], True),
)


class PortResolver:
    """Finds free TCP ports on the deployment host."""

    def __init__(
        self,
        config: Optional[PortConfig] = None,
        runner: Callable = run_command,
        which: Callable[[str], Optional[str]] = shutil.which,
        connect_timeout: float = 1.0,
    ):
        """Initialize port resolver."""
        self.config = config or PortConfig()
        self.runner = runner
        self.which = which
        self.connect_timeout = connect_timeout

    def is_port_available(self, port: int, host: Optional[str] = None) -> bool:
        """Check whether nothing is bound to ``port``.

        Uses a listening-socket scan when a scanner is installed; otherwise
        attempts a connection and treats success as "in use".
        """
        host = host or self.config.host
        listening = self._listening_ports()
        if listening is not None:
            return port not in listening
        return not self._accepts_connections(host, port)

    def find_available_port(
        self,
        base_port: int,
        max_port: Optional[int] = None,
        increment: Optional[int] = None,
        host: Optional[str] = None,
    ) -> int:
        """First available port in ``base_port, base_port + increment, ...``."""
        max_port = max_port if max_port is not None else self.config.max_port
        increment = increment if increment is not None else self.config.increment
        if increment < 1:
            raise ValueError(f"increment must be positive, got {increment}")

        for port in range(base_port, max_port + 1, increment):
            if self.is_port_available(port, host):
                return port

        raise PortExhausted(base_port, max_port)

    def resolve_port_conflict(self, port: int, auto_assign: Optional[bool] = None) -> int:
        """Return ``port`` if free, else a replacement or an error."""
        if auto_assign is None:
            auto_assign = self.config.auto_assign

        if self.is_port_available(port):
            return port

        if not auto_assign:
            logger.error(f"Port {port} is already in use and auto-assign is disabled")
            owner = self.find_port_owner(port)
            if owner:
                logger.info(f"Process using port {port}:\n{owner}")
            raise PortInUse(port, owner)

        logger.warning(f"Port {port} is already in use, finding an alternative")
        try:
            available = self.find_available_port(port)
        except PortExhausted:
            logger.error(f"Failed to find an available port in range {port}-{self.config.max_port}")
            raise

        logger.warning(f"Using alternative port: {available}")
        return available

    def resolve_port_mapping(self, mapping: str, auto_assign: Optional[bool] = None) -> str:
        """Resolve the host side of a bare or ``host:container`` mapping.

        A bare port that gets reassigned keeps its original value as the
        container port.
        """
        if ":" in mapping:
            host_side, container_side = mapping.split(":", 1)
        else:
            host_side = container_side = mapping

        resolved = self.resolve_port_conflict(int(host_side), auto_assign)
        if resolved == int(host_side):
            return mapping
        return f"{resolved}:{container_side}"

    def find_port_owner(self, port: int) -> Optional[str]:
        """Best-effort description of the process holding ``port``."""
        for tool, build_cmd, needs_filter in OWNER_LOOKUPS:
            if not self.which(tool):
                continue
            try:
                result = self.runner(build_cmd(port), check=False, timeout=10)
            except (OSError, subprocess.SubprocessError) as e:
                logger.debug(f"{tool} lookup for port {port} failed: {e}")
                continue

            output = result.stdout
            if needs_filter:
                output = "\n".join(line for line in output.splitlines() if f":{port} " in line)
            return output.strip() or None
        return None

    def _listening_ports(self) -> Optional[Set[int]]:
        """Ports with a bound socket, or None when no scanner is usable."""
        for tool, args, column in SCANNERS:
            if not self.which(tool):
                continue
            try:
                result = self.runner([tool, *args], check=False, timeout=10)
            except (OSError, subprocess.SubprocessError) as e:
                logger.debug(f"{tool} scan failed: {e}")
                continue
            if result.returncode != 0:
                logger.debug(f"{tool} scan exited with {result.returncode}")
                continue
            return self._parse_ports(result.stdout, column)
        return None

    @staticmethod
    def _parse_ports(output: str, column: int) -> Set[int]:
        """Extract local ports from scanner output."""
        ports = set()
        for line in output.splitlines():
            fields = line.split()
            if len(fields) <= column:
                continue
            match = ADDRESS_PORT_PATTERN.search(fields[column])
            if match:
                ports.add(int(match.group(1)))
        return ports

    def _accepts_connections(self, host: str, port: int) -> bool:
        """Whether a TCP connection to ``host:port`` succeeds."""
        try:
            with socket.create_connection((host, port), timeout=self.connect_timeout):
                return True
        except OSError:
            return False
