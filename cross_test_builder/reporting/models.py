"""
Data models for build reporting.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any
from enum import Enum
from pathlib import Path


class BuildStatus(Enum):
    """Per-test build status."""
    LINKED = "LINKED"
    CROSS_BUILT = "CROSS_BUILT"
    BUILD_FAILED = "BUILD_FAILED"
    LINK_FAILED = "LINK_FAILED"


FAILED_STATUSES = (BuildStatus.BUILD_FAILED, BuildStatus.LINK_FAILED)


@dataclass
class BuildResult:
    """Build outcome for a single test."""
    test_name: str
    status: BuildStatus
    target_arch: str
    library_path: Optional[str] = None
    elf_path: Optional[str] = None
    failure_stage: Optional[str] = None
    failure_reason: Optional[str] = None
    exit_code: Optional[int] = None
    timestamp: datetime = field(default_factory=datetime.now)
    project_root: Optional[Path] = None  # For making paths relative

    @property
    def failed(self) -> bool:
        return self.status in FAILED_STATUSES

    def _make_path_relative(self, path: str) -> str:
        """Convert absolute path to relative path if project_root is set."""
        if not self.project_root:
            return path
        path_obj = Path(path)
        if not path_obj.is_absolute():
            return path
        try:
            return str(path_obj.relative_to(self.project_root))
        except ValueError:
            # Path is not under project_root, return as-is
            return path

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization, excluding null fields."""
        result = {
            "status": self.status.value,
            "target_arch": self.target_arch,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.library_path is not None:
            result["library_path"] = self._make_path_relative(self.library_path)
        if self.elf_path is not None:
            result["elf_path"] = self._make_path_relative(self.elf_path)
        if self.failure_stage is not None:
            result["failure_stage"] = self.failure_stage
        if self.failure_reason is not None:
            result["failure_reason"] = self.failure_reason
        if self.exit_code is not None:
            result["exit_code"] = self.exit_code
        return result


@dataclass
class BuildReport:
    """Complete report of one orchestration run."""
    run_id: str
    start_time: datetime
    end_time: datetime
    target_arch: str
    results: Dict[str, BuildResult] = field(default_factory=dict)
    summary: str = ""
    duration: float = 0.0
    project_root: Optional[Path] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    # False when the run stopped after cross-building by request
    link_expected: bool = True

    total_tests: int = 0
    linked: int = 0
    cross_built: int = 0
    build_failed: int = 0
    link_failed: int = 0

    def __post_init__(self):
        """Calculate derived fields after initialization."""
        self.duration = (self.end_time - self.start_time).total_seconds()
        self._calculate_counts()
        self._generate_summary()

    def _calculate_counts(self):
        self.total_tests = len(self.results)
        for result in self.results.values():
            if result.status == BuildStatus.LINKED:
                self.linked += 1
            elif result.status == BuildStatus.CROSS_BUILT:
                self.cross_built += 1
            elif result.status == BuildStatus.BUILD_FAILED:
                self.build_failed += 1
            elif result.status == BuildStatus.LINK_FAILED:
                self.link_failed += 1

    def _generate_summary(self):
        """Generate human-readable summary."""
        total = self.total_tests
        if total == 0:
            self.summary = "No tests built"
            return

        parts = []
        for count, label in (
            (self.linked, "linked"),
            (self.cross_built, "cross-built only"),
            (self.build_failed, "build failed"),
            (self.link_failed, "link failed"),
        ):
            if count > 0:
                parts.append(f"{count} {label} ({count / total * 100:.1f}%)")
        self.summary = f"Tests: {total} total, " + ", ".join(parts)

    @property
    def success(self) -> bool:
        return self.build_failed == 0 and self.link_failed == 0

    def get_status_counts(self) -> Dict[str, int]:
        return {
            "linked": self.linked,
            "cross_built": self.cross_built,
            "build_failed": self.build_failed,
            "link_failed": self.link_failed,
        }

    def get_failed_tests(self) -> List[BuildResult]:
        return [r for r in self.results.values() if r.failed]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "run_id": self.run_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "target_arch": self.target_arch,
            "metadata": self.metadata,
            "link_expected": self.link_expected,
            "total_tests": self.total_tests,
            "linked": self.linked,
            "cross_built": self.cross_built,
            "build_failed": self.build_failed,
            "link_failed": self.link_failed,
            "results": {name: r.to_dict() for name, r in self.results.items()},
            "summary": self.summary,
            "duration": self.duration,
        }
