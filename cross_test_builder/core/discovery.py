"""
Project root and test source discovery.

This module locates the tests project (the Cargo crate holding the
``examples/test_*.rs`` programs and the ``gcc/`` link recipe) and lists the
tests it contains.
"""

import os
from pathlib import Path
from typing import Callable, List, Optional

from cross_test_builder.core import naming
from cross_test_builder.core.errors import PathResolutionError, ProjectRootNotFoundError
from cross_test_builder.core.logging import get_logger
from cross_test_builder.core.models import DiscoveredFile

logger = get_logger(__name__)

PROJECT_ROOT_ENV = "CROSS_TEST_BUILDER_PROJECT_ROOT"

# Marker files/directories that indicate a tests project root
PROJECT_MARKERS = [
    "Cargo.toml",
    naming.RECIPE_DIRNAME,
]


def find_project_root(start_path: Optional[Path] = None) -> Path:
    """
    Find the tests project root by walking up from start_path looking for markers.

    Args:
        start_path: Starting directory (default: current working directory)

    Returns:
        Path to the tests project root

    Raises:
        ProjectRootNotFoundError: If no directory up the tree carries the markers
    """
    if start_path is None:
        start_path = Path.cwd()

    env_root = os.environ.get(PROJECT_ROOT_ENV)
    if env_root:
        env_path = Path(env_root).resolve()
        if _is_project_root(env_path):
            return env_path
        raise ProjectRootNotFoundError(
            f"Environment variable {PROJECT_ROOT_ENV} points to invalid location: {env_root}"
        )

    current = Path(start_path).resolve()
    while True:
        if _is_project_root(current):
            return current
        if current == current.parent:
            break
        current = current.parent

    raise ProjectRootNotFoundError(
        f"Could not find tests project root starting from {start_path}. "
        f"Looking for a directory containing: {', '.join(PROJECT_MARKERS)}. "
        f"Set {PROJECT_ROOT_ENV} environment variable to override."
    )


def _is_project_root(path: Path) -> bool:
    if not path.is_dir():
        return False
    return (path / "Cargo.toml").is_file() and (path / naming.RECIPE_DIRNAME).is_dir()


def canonicalize(path: Path, what: str = "path") -> Path:
    """Return the symlink-free absolute form of an existing path."""
    try:
        return Path(path).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise PathResolutionError(f"Couldn't find the absolute path of {what}: {path}") from e


def resolve_project_root(tests_project_path: Path) -> Path:
    """Canonicalize the tests project path, which must be an existing directory."""
    root = canonicalize(tests_project_path, "tests project")
    if not root.is_dir():
        raise PathResolutionError(f"Tests project path is not a directory: {root}")
    return root


def _decodable(name: str) -> bool:
    # os.fsdecode maps undecodable bytes to lone surrogates, which don't encode back
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def find_files(directory: Path, predicate: Callable[[str], bool]) -> List[DiscoveredFile]:
    """
    List regular files directly inside ``directory`` whose names satisfy ``predicate``.

    Entries that are not regular files, or whose names are not valid text, are
    skipped. Order follows the directory listing.

    Raises:
        PathResolutionError: If the directory cannot be resolved or listed
    """
    directory_abs = canonicalize(directory, "directory")
    found: List[DiscoveredFile] = []
    try:
        with os.scandir(directory_abs) as entries:
            for entry in entries:
                try:
                    if not entry.is_file():
                        continue
                except OSError:
                    continue
                name = entry.name
                if not _decodable(name):
                    logger.debug(f"Skipping undecodable file name in {directory_abs}: {name!r}")
                    continue
                if predicate(name):
                    found.append(DiscoveredFile(name=name, absolute_path=directory_abs / name))
    except OSError as e:
        raise PathResolutionError(f"Directory not found: {directory}") from e
    return found


def discover_tests(
    tests_project_path: Path,
    prefix: str = naming.TEST_PREFIX,
    suffix: str = naming.SOURCE_SUFFIX,
) -> List[str]:
    """
    Discover the test programs of a tests project.

    Args:
        tests_project_path: Tests project root
        prefix: Required file name prefix
        suffix: Required source suffix, stripped from the test name

    Returns:
        Test names sorted lexicographically

    Raises:
        PathResolutionError: If the project or its examples directory is missing
    """
    root = resolve_project_root(tests_project_path)
    files = find_files(
        naming.examples_dir(root),
        lambda n: naming.is_test_source(n, prefix=prefix, suffix=suffix),
    )
    names = sorted(naming.name_from_filename(f.name, suffix=suffix) for f in files)
    logger.debug(f"Discovered {len(names)} test(s) in {naming.examples_dir(root)}")
    return names
