"""
Cross toolchain (Cargo) discovery.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from cross_test_builder.core.errors import ToolchainNotFoundError
from cross_test_builder.core.logging import get_logger

logger = get_logger(__name__)

TOOLCHAIN_NAME = "cargo"
TOOLCHAIN_IDENTITY = "cargo"
VERSION_FLAG = "-V"

# A resolver returns one candidate executable path, or None when it has nothing to offer
Resolver = Callable[[], Optional[str]]
Probe = Callable[[str, str], str]


def explicit_path(path: Optional[str]) -> Resolver:
    """Resolver for a user-configured toolchain path."""
    def resolve() -> Optional[str]:
        return str(path) if path else None
    return resolve


def search_path(name: str = TOOLCHAIN_NAME) -> Resolver:
    """Resolver using the executable search path."""
    def resolve() -> Optional[str]:
        return shutil.which(name)
    return resolve


def home_relative(*parts: str) -> Resolver:
    """Resolver for a path under the user's home directory."""
    def resolve() -> Optional[str]:
        try:
            home = Path.home()
        except RuntimeError:
            return None
        return str(home.joinpath(*parts))
    return resolve


def default_resolvers(toolchain_path: Optional[str] = None) -> List[Resolver]:
    resolvers: List[Resolver] = []
    if toolchain_path:
        resolvers.append(explicit_path(toolchain_path))
    resolvers.append(search_path(TOOLCHAIN_NAME))
    resolvers.append(home_relative(".cargo", "bin", TOOLCHAIN_NAME))
    return resolvers


def version_output(candidate: str, flag: str = VERSION_FLAG) -> str:
    """Run ``candidate flag`` and return its stdout; empty when it cannot run."""
    try:
        proc = subprocess.run(
            [candidate, flag],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as e:
        logger.debug(f"Toolchain candidate {candidate} not runnable: {e}")
        return ""
    return proc.stdout or ""


class ToolchainLocator:
    """Find the first candidate toolchain driver that identifies itself as expected."""

    def __init__(
        self,
        resolvers: Optional[Sequence[Resolver]] = None,
        identity: str = TOOLCHAIN_IDENTITY,
        version_flag: str = VERSION_FLAG,
        probe: Optional[Probe] = None,
    ):
        self.resolvers = list(resolvers) if resolvers is not None else default_resolvers()
        self.identity = identity
        self.version_flag = version_flag
        self.probe = probe or version_output

    def candidates(self) -> Iterable[str]:
        for resolver in self.resolvers:
            candidate = resolver()
            if candidate:
                yield candidate

    def is_valid(self, candidate: str) -> bool:
        return self.identity in self.probe(candidate, self.version_flag)

    def locate(self) -> str:
        """
        Return the first valid candidate.

        Raises:
            ToolchainNotFoundError: If no candidate validates
        """
        tried = []
        for candidate in self.candidates():
            tried.append(candidate)
            if self.is_valid(candidate):
                logger.debug(f"Using toolchain: {candidate}")
                return candidate
        raise ToolchainNotFoundError(
            "Cargo not found! Install Rust's package manager "
            f"(tried: {', '.join(tried) if tried else 'no candidates'})."
        )
