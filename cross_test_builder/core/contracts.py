"""
Invocation contracts for the external builders.

Each contract fixes the arguments, environment and working directory handed to
one external tool, independently of how the process is spawned.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from cross_test_builder.core import naming

CONTRACT_VERSION = 1


@dataclass(frozen=True)
class CrossBuildInvocation:
    """``cargo build`` of one example for the target architecture."""
    toolchain: str
    test_name: str
    target_arch: str
    cwd: Path
    version: int = CONTRACT_VERSION

    def argv(self) -> List[str]:
        return [
            self.toolchain, "build",
            "--example", self.test_name,
            "--verbose",
            "--target", self.target_arch,
        ]

    def env_overrides(self) -> Dict[str, str]:
        return {"CARGO_INCREMENTAL": "0"}

    def environ(self, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        env = dict(os.environ if base is None else base)
        env.update(self.env_overrides())
        return env


@dataclass(frozen=True)
class LinkInvocation:
    """Native recipe (``make``) linking one test library into an image."""
    test_name: str
    library_path: Path
    cwd: Path
    object_paths: Tuple[str, ...] = ()
    renames: str = ""
    make: str = "make"
    version: int = CONTRACT_VERSION

    @property
    def deps(self) -> Tuple[Path, ...]:
        return (naming.artifact_path(self.library_path, self.test_name),)

    @property
    def expected_image(self) -> Path:
        return naming.image_path(self.cwd, self.test_name)

    def argv(self) -> List[str]:
        return [self.make]

    def env_overrides(self) -> Dict[str, str]:
        return {
            "TEST_NAME": self.test_name,
            "TEST_LIBRARY_PATH": naming.library_search_flag(self.library_path),
            "TEST_LIBRARY_PRE": naming.link_library_flag(self.test_name),
            "TEST_OBJECTS": naming.join_paths(self.object_paths),
            "TEST_DEPS": naming.join_paths(self.deps),
            "TEST_RENAMES": self.renames,
        }

    def environ(self, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        env = dict(os.environ if base is None else base)
        env.update(self.env_overrides())
        return env
