"""
Cross-compilation of every discovered test into a target static library.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from cross_test_builder.core import discovery, naming
from cross_test_builder.core.contracts import CrossBuildInvocation
from cross_test_builder.core.errors import (
    BatchFailure,
    CrossBuildError,
    MissingArtifactError,
)
from cross_test_builder.core.logging import get_logger
from cross_test_builder.core.models import BuildOptions, CrossBuildManifest, TestFailure
from cross_test_builder.core.toolchain import ToolchainLocator
from cross_test_builder.utils.command_runner import COMMAND_NOT_FOUND, run_command

logger = get_logger(__name__)

STAGE = "cross-build"

# Called once per attempted test with the error that stopped it, or None
TestCallback = Callable[[str, Optional[Exception]], None]


def _build_one(invocation: CrossBuildInvocation, library_dir, runner, verbosity: int) -> None:
    argv = invocation.argv()
    try:
        result = runner(
            argv,
            cwd=invocation.cwd,
            env=invocation.environ(),
            verbosity=verbosity,
            check=False,
        )
    except OSError as e:
        raise CrossBuildError(invocation.test_name, COMMAND_NOT_FOUND, argv) from e
    if not result.success:
        raise CrossBuildError(invocation.test_name, result.returncode, argv)

    artifact = naming.artifact_path(library_dir, invocation.test_name)
    if not artifact.is_file():
        raise MissingArtifactError(
            f"Cross build for '{invocation.test_name}' succeeded but {artifact} was not produced"
        )


def cross_build(
    options: BuildOptions,
    locator: Optional[ToolchainLocator] = None,
    runner=None,
    fail_fast: bool = True,
    verbosity: int = 0,
    on_test: Optional[TestCallback] = None,
) -> CrossBuildManifest:
    """
    Cross-compile every test of the project, one at a time.

    Args:
        options: Project path and target architecture
        locator: Toolchain locator (default candidates when None)
        runner: Command runner with the signature of ``run_command``
        fail_fast: Stop at the first failing test; otherwise attempt every test
            and raise a BatchFailure listing all failures at the end
        verbosity: Verbosity level passed to the runner
        on_test: Optional progress callback

    Returns:
        CrossBuildManifest naming every test whose artifact was confirmed on disk

    Raises:
        ToolchainNotFoundError: If no toolchain validates
        PathResolutionError: If the project or output directory cannot be resolved
        CrossBuildError: If a build exits non-zero (fail-fast)
        MissingArtifactError: If a build succeeded without producing its library (fail-fast)
        BatchFailure: If any test failed (collect-all)
    """
    locator = locator or ToolchainLocator()
    runner = runner or run_command

    toolchain = locator.locate()
    root = discovery.resolve_project_root(options.tests_project_path)
    tests = discovery.discover_tests(root)
    expected_dir = naming.library_dir(root, options.target_arch)

    logger.info(f"Cross-building {len(tests)} test(s) for {options.target_arch} with {toolchain}")

    built: List[str] = []
    failures: List[TestFailure] = []
    for index, test in enumerate(tests, start=1):
        logger.info(f"[{index}/{len(tests)}] Cross-building {test}")
        invocation = CrossBuildInvocation(
            toolchain=toolchain,
            test_name=test,
            target_arch=options.target_arch,
            cwd=root,
        )
        try:
            _build_one(invocation, expected_dir, runner, verbosity)
        except (CrossBuildError, MissingArtifactError) as e:
            if on_test:
                on_test(test, e)
            if fail_fast:
                raise
            logger.error(str(e))
            failures.append(TestFailure(
                name=test,
                stage=STAGE,
                message=str(e),
                returncode=getattr(e, "returncode", None),
            ))
            continue
        if on_test:
            on_test(test, None)
        built.append(test)

    if failures:
        raise BatchFailure("Cross build", failures)

    library_path = discovery.canonicalize(expected_dir, "cross-build output directory")
    return CrossBuildManifest(tests=built, library_path=library_path)
