"""
Link step producing one executable image per cross-built test.
"""

from typing import Optional

from cross_test_builder.core import naming
from cross_test_builder.core.contracts import LinkInvocation
from cross_test_builder.core.discovery import discover_tests
from cross_test_builder.core.errors import CrossTestBuilderError
from cross_test_builder.core.logging import get_logger
from cross_test_builder.core.models import CrossBuildManifest
from cross_test_builder.core.stages.link import TestCallback, link
from cross_test_builder.core.steps.base import StepBase, StepPlan, StepResult, StepStatus
from cross_test_builder.core.steps.crossbuild import env_prefixed


class LinkStep(StepBase):
    """Step for linking compiled test libraries with the gcc recipe."""

    def __init__(self, config, manifest: Optional[CrossBuildManifest] = None, runner=None,
                 on_test: Optional[TestCallback] = None):
        super().__init__(config)
        self.logger = get_logger(__name__)
        self.manifest = manifest
        self.runner = runner
        self.on_test = on_test

    @property
    def name(self) -> str:
        return "link"

    def should_skip(self) -> bool:
        return self.config.skip_link

    def validate(self) -> Optional[str]:
        if self.manifest is None:
            return "No cross-build manifest available. Run the crossbuild step first."
        return None

    def plan_validate(self) -> Optional[str]:
        recipe = naming.recipe_dir(self.config.project_root)
        if not recipe.is_dir():
            return f"Link recipe directory not found: {recipe}"
        return None

    def _do_execute(self) -> StepResult:
        options = self.config.build_options()
        try:
            images = link(
                options,
                self.manifest,
                runner=self.runner,
                fail_fast=self.config.fail_fast,
                verbosity=self.config.verbosity,
                make=self.config.make_command,
                on_test=self.on_test,
            )
        except CrossTestBuilderError as e:
            self.logger.error(f"Link failed: {e}")
            return StepResult(
                name=self.name,
                status=StepStatus.FAILED,
                message=str(e),
                error=e,
            )

        message = f"Linked {len(images.binaries)} image(s)"
        if self.config.verbosity >= 1:
            self.logger.info(message)
        return StepResult(
            name=self.name,
            status=StepStatus.SUCCESS,
            message=message,
            outputs={"recipe_dir": str(naming.recipe_dir(self.config.project_root))},
            details={"images": {b.name: str(b.absolute_elf_path) for b in images.binaries}},
            manifest=images,
        )

    def _plan_details(self) -> StepPlan:
        root = self.config.project_root
        if self.manifest is not None:
            tests = list(self.manifest.tests)
            library_path = self.manifest.library_path
            object_paths = self.manifest.object_paths
        else:
            try:
                tests = discover_tests(root)
            except CrossTestBuilderError:
                tests = []
            library_path = naming.library_dir(root, self.config.target_arch)
            object_paths = ()

        recipe = naming.recipe_dir(root)
        commands = []
        for test in tests:
            invocation = LinkInvocation(
                test_name=test,
                library_path=library_path,
                cwd=recipe,
                object_paths=object_paths,
                make=self.config.make_command,
            )
            commands.append(env_prefixed(invocation.env_overrides(), invocation.argv()))
        return StepPlan(
            name=self.name,
            will_run=True,
            reason="ready",
            commands=commands,
            outputs={"images": str(recipe / naming.RECIPE_BUILD_DIRNAME)},
            details={"tests": len(tests), "cwd": str(recipe)},
        )
