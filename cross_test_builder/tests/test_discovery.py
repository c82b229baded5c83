import os
from pathlib import Path

import pytest

from cross_test_builder.core.discovery import (
    discover_tests,
    find_files,
    find_project_root,
    resolve_project_root,
)
from cross_test_builder.core.errors import PathResolutionError, ProjectRootNotFoundError
from cross_test_builder.tests.helpers import make_project


def test_discover_returns_only_matching_sources(tmp_path: Path) -> None:
    root = make_project(
        tmp_path / "proj",
        sources=["test_blink.rs", "test_uart.rs", "test_timer4_isr.rs"],
        extra=["blink.rs", "test_notes.txt", "helper_test_x.rs", "test_.md", "README.md"],
    )

    assert discover_tests(root) == ["test_blink", "test_timer4_isr", "test_uart"]


def test_discover_is_sorted_regardless_of_creation_order(tmp_path: Path) -> None:
    root = make_project(tmp_path / "proj", sources=["test_zeta.rs", "test_alpha.rs", "test_mid.rs"])

    assert discover_tests(root) == ["test_alpha", "test_mid", "test_zeta"]


def test_discover_strips_suffix_only_once(tmp_path: Path) -> None:
    root = make_project(tmp_path / "proj", sources=["test_parse.rs.rs"])

    assert discover_tests(root) == ["test_parse.rs"]


def test_discover_skips_directories_with_matching_names(tmp_path: Path) -> None:
    root = make_project(tmp_path / "proj", sources=["test_real.rs"])
    (root / "examples" / "test_dir.rs").mkdir()

    assert discover_tests(root) == ["test_real"]


@pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
def test_discover_follows_symlinked_files(tmp_path: Path) -> None:
    root = make_project(tmp_path / "proj")
    target = tmp_path / "shared.rs"
    target.write_text("")
    (root / "examples" / "test_linked.rs").symlink_to(target)

    assert discover_tests(root) == ["test_linked"]


@pytest.mark.skipif(os.name == "nt", reason="Windows file names are always text")
def test_discover_skips_undecodable_names(tmp_path: Path) -> None:
    root = make_project(tmp_path / "proj", sources=["test_ok.rs"])
    raw = os.path.join(os.fsencode(root / "examples"), b"test_\xff.rs")
    try:
        with open(raw, "wb"):
            pass
    except OSError:
        pytest.skip("file system rejects non-UTF-8 names")

    assert discover_tests(root) == ["test_ok"]

def test_discover_accepts_relative_project_path(tmp_path: Path, monkeypatch) -> None:
    make_project(tmp_path / "proj", sources=["test_one.rs"])
    monkeypatch.chdir(tmp_path)

    assert discover_tests(Path("proj")) == ["test_one"]


def test_discover_with_no_tests(tmp_path: Path) -> None:
    root = make_project(tmp_path / "proj", extra=["lib.rs"])

    assert discover_tests(root) == []


def test_discover_missing_project_fails(tmp_path: Path) -> None:
    with pytest.raises(PathResolutionError):
        discover_tests(tmp_path / "nope")


def test_discover_missing_examples_dir_fails(tmp_path: Path) -> None:
    root = tmp_path / "proj"
    root.mkdir()

    with pytest.raises(PathResolutionError):
        discover_tests(root)


def test_resolve_project_root_rejects_files(tmp_path: Path) -> None:
    f = tmp_path / "file"
    f.write_text("")

    with pytest.raises(PathResolutionError):
        resolve_project_root(f)


def test_find_files_reports_absolute_paths(tmp_path: Path) -> None:
    (tmp_path / "a.rs").write_text("")
    (tmp_path / "b.txt").write_text("")

    found = find_files(tmp_path, lambda n: n.endswith(".rs"))

    assert [f.name for f in found] == ["a.rs"]
    assert found[0].absolute_path == tmp_path.resolve() / "a.rs"
    assert found[0].absolute_path.is_absolute()


def test_find_project_root_walks_up(tmp_path: Path) -> None:
    root = make_project(tmp_path / "proj")
    nested = root / "examples" / "deep"
    nested.mkdir()

    assert find_project_root(nested) == root.resolve()


def test_find_project_root_env_override(tmp_path: Path, monkeypatch) -> None:
    root = make_project(tmp_path / "proj")
    monkeypatch.setenv("CROSS_TEST_BUILDER_PROJECT_ROOT", str(root))

    assert find_project_root(tmp_path) == root.resolve()


def test_find_project_root_env_override_must_be_valid(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("CROSS_TEST_BUILDER_PROJECT_ROOT", str(tmp_path))

    with pytest.raises(ProjectRootNotFoundError):
        find_project_root(tmp_path)


def test_find_project_root_not_found(tmp_path: Path) -> None:
    with pytest.raises(ProjectRootNotFoundError):
        find_project_root(tmp_path)
