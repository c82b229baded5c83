"""
Collects per-test outcomes from the build stages into a BuildReport.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from cross_test_builder.core import naming
from cross_test_builder.core.models import CrossBuildManifest, LinkManifest
from cross_test_builder.reporting.models import BuildReport, BuildResult, BuildStatus


class BuildTracker:
    """Record stage callbacks and manifests for one run."""

    def __init__(self, target_arch: str, project_root: Optional[Path] = None, link_expected: bool = True):
        self.target_arch = target_arch
        self.project_root = project_root
        self.link_expected = link_expected
        self.start_time = datetime.now()
        self.results: Dict[str, BuildResult] = {}

    def _record(self, name: str, status: BuildStatus, stage: str, error: Optional[Exception]) -> BuildResult:
        result = self.results.get(name)
        if result is None:
            result = BuildResult(
                test_name=name,
                status=status,
                target_arch=self.target_arch,
                project_root=self.project_root,
            )
            self.results[name] = result
        result.status = status
        result.timestamp = datetime.now()
        if error is not None:
            result.failure_stage = stage
            result.failure_reason = str(error)
            result.exit_code = getattr(error, "returncode", None)
        return result

    def on_cross_build(self, name: str, error: Optional[Exception]) -> None:
        status = BuildStatus.BUILD_FAILED if error else BuildStatus.CROSS_BUILT
        self._record(name, status, "cross-build", error)

    def on_link(self, name: str, error: Optional[Exception]) -> None:
        if error:
            self._record(name, BuildStatus.LINK_FAILED, "link", error)
            return
        # The stage only reports success once the image exists
        result = self._record(name, BuildStatus.LINKED, "link", None)
        if self.project_root is not None:
            result.elf_path = str(naming.image_path(naming.recipe_dir(self.project_root), name))

    def record_cross_build(self, manifest: CrossBuildManifest) -> None:
        for name in manifest.tests:
            if name in self.results:
                self.results[name].library_path = str(manifest.library_path)

    def record_link(self, manifest: LinkManifest) -> None:
        for image in manifest.binaries:
            result = self._record(image.name, BuildStatus.LINKED, "link", None)
            result.elf_path = str(image.absolute_elf_path)

    def build_report(self, run_id: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None) -> BuildReport:
        end_time = datetime.now()
        return BuildReport(
            run_id=run_id or self.start_time.strftime("%Y%m%d_%H%M%S"),
            start_time=self.start_time,
            end_time=end_time,
            target_arch=self.target_arch,
            results=dict(self.results),
            project_root=self.project_root,
            metadata=dict(metadata or {}),
            link_expected=self.link_expected,
        )
