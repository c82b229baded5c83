"""
Custom exceptions for the cross test builder.
"""

from typing import List, Optional, Sequence


class CrossTestBuilderError(Exception):
    """Base exception for all cross test builder errors."""
    pass


class ProjectRootNotFoundError(CrossTestBuilderError):
    """Raised when the tests project root cannot be found."""
    pass


class ConfigurationError(CrossTestBuilderError):
    """Raised when configuration is invalid."""
    pass


class ToolchainNotFoundError(CrossTestBuilderError):
    """Raised when no candidate executable validates as the cross toolchain."""
    pass


class PathResolutionError(CrossTestBuilderError):
    """Raised when a configured or derived path cannot be canonicalized."""
    pass


class MissingArtifactError(CrossTestBuilderError):
    """Raised when an external build reports success but its output is absent."""
    pass


class SubprocessFailure(CrossTestBuilderError):
    """Raised when an external build invocation exits non-zero."""

    stage = "build"

    def __init__(self, test_name: str, returncode: int, command: Optional[Sequence[str]] = None):
        self.test_name = test_name
        self.returncode = returncode
        self.command = list(command) if command else []
        super().__init__(self.describe())

    def describe(self) -> str:
        return f"{self.stage} for '{self.test_name}' failed (exit code {self.returncode})"


class CrossBuildError(SubprocessFailure):
    """Raised when cross-compiling a test exits non-zero."""

    stage = "Cross build"


class LinkError(SubprocessFailure):
    """Raised when linking a test image exits non-zero."""

    stage = "GCC ARM build"


class BatchFailure(CrossTestBuilderError):
    """Raised at the end of a stage run in collect-all mode when any test failed."""

    def __init__(self, stage: str, failures: List):
        self.stage = stage
        self.failures = list(failures)
        names = ", ".join(f.name for f in self.failures)
        super().__init__(f"{stage}: {len(self.failures)} test(s) failed: {names}")
