"""
Data model shared by the build stages.

Stages produce these values and never mutate them afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class DiscoveredFile:
    """One matched source file on disk."""
    name: str
    absolute_path: Path


@dataclass(frozen=True)
class BuildOptions:
    """Input for one orchestration run, shared read-only by both stages."""
    tests_project_path: Path
    target_arch: str

    def __post_init__(self):
        object.__setattr__(self, "tests_project_path", Path(self.tests_project_path))


@dataclass(frozen=True)
class CrossBuildManifest:
    """Tests that cross-compiled, plus the directory holding their artifacts."""
    tests: Tuple[str, ...]
    library_path: Path
    object_paths: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "tests", tuple(self.tests))
        object.__setattr__(self, "object_paths", tuple(self.object_paths))
        object.__setattr__(self, "library_path", Path(self.library_path))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tests": list(self.tests),
            "library_path": str(self.library_path),
            "object_paths": list(self.object_paths),
        }


@dataclass(frozen=True)
class LinkedImage:
    """A final executable image produced for one test."""
    name: str
    absolute_elf_path: Path

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "absolute_elf_path": str(self.absolute_elf_path)}


@dataclass(frozen=True)
class LinkManifest:
    """Images for every test that completed both stages, in manifest order."""
    binaries: Tuple[LinkedImage, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "binaries", tuple(self.binaries))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(b.name for b in self.binaries)

    def to_dict(self) -> Dict[str, Any]:
        return {"binaries": [b.to_dict() for b in self.binaries]}


@dataclass(frozen=True)
class TestFailure:
    """A per-test failure collected when running without fail-fast."""
    name: str
    stage: str
    message: str
    returncode: Optional[int] = None

    __test__ = False  # not a pytest class
