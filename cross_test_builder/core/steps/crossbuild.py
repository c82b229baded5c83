"""
Cross-compilation step.
"""

import shlex
from typing import List, Optional

from cross_test_builder.core import naming
from cross_test_builder.core.contracts import CrossBuildInvocation
from cross_test_builder.core.discovery import discover_tests
from cross_test_builder.core.errors import CrossTestBuilderError, ToolchainNotFoundError
from cross_test_builder.core.logging import get_logger
from cross_test_builder.core.stages.crossbuild import TestCallback, cross_build
from cross_test_builder.core.steps.base import StepBase, StepPlan, StepResult, StepStatus
from cross_test_builder.core.toolchain import ToolchainLocator, default_resolvers


def env_prefixed(env: dict, argv: List[str]) -> List[str]:
    """Render an invocation as a shell-style ``VAR=value cmd args`` list."""
    return [f"{k}={shlex.quote(v)}" for k, v in env.items()] + argv


class CrossBuildStep(StepBase):
    """Step for cross-compiling every test into a target static library."""

    def __init__(self, config, locator: Optional[ToolchainLocator] = None, runner=None,
                 on_test: Optional[TestCallback] = None):
        super().__init__(config)
        self.logger = get_logger(__name__)
        self.locator = locator or ToolchainLocator(default_resolvers(config.toolchain_path))
        self.runner = runner
        self.on_test = on_test

    @property
    def name(self) -> str:
        return "crossbuild"

    def plan_validate(self) -> Optional[str]:
        examples = naming.examples_dir(self.config.project_root)
        if not examples.is_dir():
            return f"Examples directory not found: {examples}"
        return None

    def _do_execute(self) -> StepResult:
        options = self.config.build_options()
        try:
            manifest = cross_build(
                options,
                locator=self.locator,
                runner=self.runner,
                fail_fast=self.config.fail_fast,
                verbosity=self.config.verbosity,
                on_test=self.on_test,
            )
        except CrossTestBuilderError as e:
            self.logger.error(f"Cross build failed: {e}")
            return StepResult(
                name=self.name,
                status=StepStatus.FAILED,
                message=str(e),
                error=e,
                details={"target_arch": options.target_arch},
            )

        message = f"Cross-built {len(manifest.tests)} test(s) for {options.target_arch}"
        if self.config.verbosity >= 1:
            self.logger.info(message)
        return StepResult(
            name=self.name,
            status=StepStatus.SUCCESS,
            message=message,
            outputs={"library_path": str(manifest.library_path)},
            details={"tests": list(manifest.tests), "target_arch": options.target_arch},
            manifest=manifest,
        )

    def _plan_details(self) -> StepPlan:
        root = self.config.project_root
        arch = self.config.target_arch
        reason = "ready"
        try:
            toolchain = self.locator.locate()
        except ToolchainNotFoundError:
            toolchain = "cargo"
            reason = "toolchain not found"
        tests = discover_tests(root)

        commands = []
        for test in tests:
            invocation = CrossBuildInvocation(toolchain=toolchain, test_name=test, target_arch=arch, cwd=root)
            commands.append(env_prefixed(invocation.env_overrides(), invocation.argv()))
        return StepPlan(
            name=self.name,
            will_run=reason == "ready",
            reason=reason,
            commands=commands,
            outputs={"library_path": str(naming.library_dir(root, arch))},
            details={"tests": len(tests), "cwd": str(root)},
        )
