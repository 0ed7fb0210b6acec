"""Synchronous subprocess helpers."""

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result from running a command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def output(self) -> str:
        """Combined stdout and stderr, as a terminal would show them."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = True,
    timeout: Optional[int] = None,
    **kwargs
) -> CommandResult:
    """Run a command and wait for it to finish."""
    logger.debug(f"Running command: {' '.join(cmd)}")
    
    try:
        completed = subprocess.run(
            cmd,
            stdout=subprocess.PIPE if capture_output else subprocess.DEVNULL,
            stderr=subprocess.PIPE if capture_output else subprocess.DEVNULL,
            timeout=timeout,
            text=True,
            encoding="utf-8",
            errors="replace",
            **kwargs
        )
    except subprocess.TimeoutExpired:
        logger.error(f"Command timed out after {timeout}s: {' '.join(cmd)}")
        raise
        
    result = CommandResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    
    if check and completed.returncode != 0:
        error = subprocess.CalledProcessError(
            completed.returncode, cmd
        )
        error.stdout = result.stdout
        error.stderr = result.stderr
        raise error
        
    return result
