"""
Linking of cross-built test libraries into executable images via the gcc recipe.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from cross_test_builder.core import discovery, naming
from cross_test_builder.core.contracts import LinkInvocation
from cross_test_builder.core.errors import BatchFailure, LinkError, MissingArtifactError
from cross_test_builder.core.logging import get_logger
from cross_test_builder.core.models import (
    BuildOptions,
    CrossBuildManifest,
    LinkedImage,
    LinkManifest,
    TestFailure,
)
from cross_test_builder.utils.command_runner import COMMAND_NOT_FOUND, run_command

logger = get_logger(__name__)

STAGE = "link"

TestCallback = Callable[[str, Optional[Exception]], None]


def _link_one(invocation: LinkInvocation, runner, verbosity: int) -> LinkedImage:
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
        raise LinkError(invocation.test_name, COMMAND_NOT_FOUND, argv) from e
    if not result.success:
        raise LinkError(invocation.test_name, result.returncode, argv)

    try:
        elf = invocation.expected_image.resolve(strict=True)
    except OSError as e:
        raise MissingArtifactError(
            f"Link of '{invocation.test_name}' succeeded but {invocation.expected_image} was not produced"
        ) from e
    return LinkedImage(name=invocation.test_name, absolute_elf_path=elf)


def link(
    options: BuildOptions,
    manifest: CrossBuildManifest,
    runner=None,
    fail_fast: bool = True,
    verbosity: int = 0,
    make: str = "make",
    on_test: Optional[TestCallback] = None,
) -> LinkManifest:
    """
    Link every cross-built test against the shared runtime, one at a time.

    Args:
        options: Project path and target architecture
        manifest: Output of the cross-build stage
        runner: Command runner with the signature of ``run_command``
        fail_fast: Stop at the first failing test; otherwise attempt every test
            and raise a BatchFailure listing all failures at the end
        verbosity: Verbosity level passed to the runner
        make: Build tool driving the recipe
        on_test: Optional progress callback

    Returns:
        LinkManifest with one image per test, in manifest order

    Raises:
        PathResolutionError: If the project or recipe directory cannot be resolved
        LinkError: If a link exits non-zero (fail-fast)
        MissingArtifactError: If a link succeeded without producing its image (fail-fast)
        BatchFailure: If any test failed (collect-all)
    """
    if not manifest.tests:
        return LinkManifest()

    runner = runner or run_command
    root = discovery.resolve_project_root(options.tests_project_path)
    recipe = discovery.canonicalize(naming.recipe_dir(root), "link recipe directory")

    logger.info(f"Linking {len(manifest.tests)} test image(s) in {recipe}")

    images: List[LinkedImage] = []
    failures: List[TestFailure] = []
    for index, test in enumerate(manifest.tests, start=1):
        logger.info(f"[{index}/{len(manifest.tests)}] Linking {test}")
        invocation = LinkInvocation(
            test_name=test,
            library_path=manifest.library_path,
            cwd=recipe,
            object_paths=manifest.object_paths,
            make=make,
        )
        try:
            image = _link_one(invocation, runner, verbosity)
        except (LinkError, MissingArtifactError) as e:
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
        images.append(image)

    if failures:
        raise BatchFailure("Link", failures)

    return LinkManifest(binaries=images)
