"""
Core modules for the cross test builder.
"""

from cross_test_builder.core.config import Config
from cross_test_builder.core.discovery import (
    find_project_root,
    find_files,
    discover_tests,
    resolve_project_root,
)
from cross_test_builder.core.errors import (
    CrossTestBuilderError,
    ProjectRootNotFoundError,
    ConfigurationError,
    ToolchainNotFoundError,
    PathResolutionError,
    MissingArtifactError,
    SubprocessFailure,
    CrossBuildError,
    LinkError,
    BatchFailure,
)
from cross_test_builder.core.models import (
    BuildOptions,
    CrossBuildManifest,
    DiscoveredFile,
    LinkedImage,
    LinkManifest,
    TestFailure,
)
from cross_test_builder.core.toolchain import ToolchainLocator

__all__ = [
    "Config",
    "find_project_root",
    "find_files",
    "discover_tests",
    "resolve_project_root",
    "CrossTestBuilderError",
    "ProjectRootNotFoundError",
    "ConfigurationError",
    "ToolchainNotFoundError",
    "PathResolutionError",
    "MissingArtifactError",
    "SubprocessFailure",
    "CrossBuildError",
    "LinkError",
    "BatchFailure",
    "BuildOptions",
    "CrossBuildManifest",
    "DiscoveredFile",
    "LinkedImage",
    "LinkManifest",
    "TestFailure",
    "ToolchainLocator",
]
