"""
Blocking subprocess execution with the child's output streamed to the console.
"""

import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from cross_test_builder.core.logging import get_logger

logger = get_logger(__name__)

# Conventional exit status for a command that could not be started
COMMAND_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Outcome of one external command."""
    args: List[str]
    returncode: int
    duration_sec: float = 0.0
    cwd: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.returncode == 0


def run_command(
    cmd: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    verbosity: int = 0,
    check: bool = True,
) -> CommandResult:
    """
    Run a command to completion, inheriting stdout/stderr.

    Args:
        cmd: Command and arguments
        cwd: Working directory
        env: Full environment for the child (inherits ours when None)
        verbosity: Verbosity level; commands are logged at 2 and above
        check: Raise CalledProcessError on a non-zero exit

    Returns:
        CommandResult with exit status and duration

    Raises:
        subprocess.CalledProcessError: If check is set and the command fails
        OSError: If the command cannot be started
    """
    args = [str(c) for c in cmd]
    if verbosity >= 2:
        where = f" (cwd: {cwd})" if cwd else ""
        logger.info(f"Running command: {' '.join(args)}{where}")

    # Keep our own buffered output ahead of the child's
    sys.stdout.flush()
    sys.stderr.flush()

    start = time.perf_counter()
    proc = subprocess.run(
        args,
        cwd=str(cwd) if cwd else None,
        env=dict(env) if env is not None else None,
        check=False,
    )
    duration = time.perf_counter() - start

    if check and proc.returncode != 0:
        raise subprocess.CalledProcessError(proc.returncode, args)

    return CommandResult(
        args=args,
        returncode=proc.returncode,
        duration_sec=duration,
        cwd=str(cwd) if cwd else None,
    )
