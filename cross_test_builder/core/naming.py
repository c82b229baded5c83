"""
Naming conventions for test sources, compiled artifacts and linked images.

Every per-test path is qualified by the test name, so tests sharing the
artifact and image directories never write to the same file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

TEST_PREFIX = "test_"
SOURCE_SUFFIX = ".rs"

EXAMPLES_DIRNAME = "examples"
RECIPE_DIRNAME = "gcc"
RECIPE_BUILD_DIRNAME = "build"
IMAGE_PREFIX = "stm32_"
IMAGE_SUFFIX = ".elf"


def is_test_source(filename: str, prefix: str = TEST_PREFIX, suffix: str = SOURCE_SUFFIX) -> bool:
    return filename.startswith(prefix) and filename.endswith(suffix) and len(filename) > len(suffix)


def name_from_filename(filename: str, suffix: str = SOURCE_SUFFIX) -> str:
    """Strip the source suffix once; the ``test_`` prefix stays part of the name."""
    if not filename.endswith(suffix):
        raise ValueError(f"Not a test source: {filename}")
    return filename[: len(filename) - len(suffix)]


def artifact_filename(test_name: str) -> str:
    return f"lib{test_name}.a"


def artifact_path(library_dir: Path, test_name: str) -> Path:
    return Path(library_dir) / artifact_filename(test_name)


def library_search_flag(library_dir: Path) -> str:
    return f"-L {library_dir}"


def link_library_flag(test_name: str) -> str:
    return f"-l:{artifact_filename(test_name)}"


def image_filename(test_name: str) -> str:
    return f"{IMAGE_PREFIX}{test_name}{IMAGE_SUFFIX}"


def image_path(recipe_dir: Path, test_name: str) -> Path:
    return Path(recipe_dir) / RECIPE_BUILD_DIRNAME / image_filename(test_name)


def library_dir(project_root: Path, target_arch: str) -> Path:
    """Shared Cargo output directory for example artifacts of one target."""
    return Path(project_root) / "target" / target_arch / "debug" / "examples"


def examples_dir(project_root: Path) -> Path:
    return Path(project_root) / EXAMPLES_DIRNAME


def recipe_dir(project_root: Path) -> Path:
    return Path(project_root) / RECIPE_DIRNAME


def join_paths(paths: Iterable) -> str:
    """Space-join paths the way the make recipe expects list variables."""
    return " ".join(str(p) for p in paths)
