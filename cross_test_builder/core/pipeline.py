"""
Pipeline orchestration for the cross test builder.

This module runs the cross-build step and then the link step, passing the
cross-build manifest forward and collecting a report of the run.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from cross_test_builder.core.config import Config
from cross_test_builder.core.logging import get_logger
from cross_test_builder.core.models import CrossBuildManifest, LinkManifest
from cross_test_builder.core.steps import CrossBuildStep, LinkStep, StepPlan, StepResult
from cross_test_builder.core.toolchain import ToolchainLocator
from cross_test_builder.reporting import BuildTracker, ReportGenerator


@dataclass
class PipelineOutcome:
    """What a pipeline run produced."""
    success: bool
    message: str = ""
    cross_build: Optional[CrossBuildManifest] = None
    link: Optional[LinkManifest] = None
    failed_step: Optional[StepResult] = None
    steps: List[StepResult] = field(default_factory=list)
    reports: Dict[str, Path] = field(default_factory=dict)


def _log_step(result: StepResult, logger, verbosity: int) -> None:
    if result.success:
        if verbosity >= 1:
            duration = f" ({result.duration_sec:.2f}s)" if result.duration_sec is not None else ""
            logger.info(f"✓ {result.name} step completed{duration}")
    elif result.skipped:
        if verbosity >= 1:
            logger.info(f"⊘ {result.name} step skipped: {result.message}")
    else:
        logger.error(f"✗ {result.name} step failed: {result.message}")


class BuildPipeline:
    """Cross-build every test, then link every cross-built test."""

    def __init__(self, config: Config, locator: Optional[ToolchainLocator] = None, runner=None):
        """
        Initialize the pipeline with configuration.

        Args:
            config: Configuration object
            locator: Toolchain locator override
            runner: Command runner override (signature of ``run_command``)
        """
        self.config = config
        self.locator = locator
        self.runner = runner
        self.logger = get_logger(__name__)

    def _crossbuild_step(self, tracker: Optional[BuildTracker] = None) -> CrossBuildStep:
        return CrossBuildStep(
            self.config,
            locator=self.locator,
            runner=self.runner,
            on_test=tracker.on_cross_build if tracker else None,
        )

    def _link_step(self, manifest: Optional[CrossBuildManifest],
                   tracker: Optional[BuildTracker] = None) -> LinkStep:
        return LinkStep(
            self.config,
            manifest=manifest,
            runner=self.runner,
            on_test=tracker.on_link if tracker else None,
        )

    def run(self, link: bool = True) -> PipelineOutcome:
        """
        Run the pipeline.

        Args:
            link: Run the link step after a successful cross-build

        Returns:
            PipelineOutcome; ``success`` is False when any step failed
        """
        verbosity = self.config.verbosity
        if self.config.dry_run:
            self.logger.warning("DRY RUN MODE - No commands will be executed")

        start_time = time.time()
        tracker = BuildTracker(
            self.config.target_arch,
            self.config.project_root,
            link_expected=link and not self.config.skip_link,
        )
        outcome = PipelineOutcome(success=True)

        result = self._crossbuild_step(tracker).execute()
        outcome.steps.append(result)
        _log_step(result, self.logger, verbosity)
        if not result.success and not result.skipped:
            outcome.success = False
            outcome.failed_step = result
        else:
            outcome.cross_build = result.manifest
            if result.manifest is not None:
                tracker.record_cross_build(result.manifest)

            if link and (result.manifest is not None or self.config.dry_run):
                result = self._link_step(outcome.cross_build, tracker).execute()
                outcome.steps.append(result)
                _log_step(result, self.logger, verbosity)
                if not result.success and not result.skipped:
                    outcome.success = False
                    outcome.failed_step = result
                elif result.manifest is not None:
                    outcome.link = result.manifest
                    tracker.record_link(result.manifest)

        duration = time.time() - start_time
        if outcome.success:
            outcome.message = f"Pipeline completed successfully in {duration:.1f} seconds"
            if verbosity >= 1:
                self.logger.info(outcome.message)
        else:
            outcome.message = f"{outcome.failed_step.name} failed: {outcome.failed_step.message}"
            self.logger.error(f"Pipeline failed after {duration:.1f} seconds")

        if self.config.enable_reporting and not self.config.dry_run:
            outcome.reports = self._write_reports(tracker)
        return outcome

    def _write_reports(self, tracker: BuildTracker) -> Dict[str, Path]:
        report = tracker.build_report(metadata=self.config.to_dict())
        generator = ReportGenerator(self.config.report_dir)
        files = generator.generate_reports(report, self.config.report_formats)
        for fmt, path in files.items():
            if self.config.verbosity >= 1:
                self.logger.info(f"Wrote {fmt} report: {path}")
        return files

    def build_plan(self, link: bool = True) -> List[StepPlan]:
        """Build a plan for the pipeline without executing steps."""
        plans = [self._crossbuild_step().plan()]
        if link:
            plans.append(self._link_step(None).plan())
        return plans

    def plan_lines(self, link: bool = True) -> List[str]:
        """Return a human-readable execution plan."""
        lines = ["Plan:"]
        for idx, plan in enumerate(self.build_plan(link=link), start=1):
            lines.extend(plan.lines(idx))
        return lines

    def print_plan(self, link: bool = True) -> None:
        """Log a human-readable execution plan."""
        for line in self.plan_lines(link=link):
            self.logger.info(line)
