"""
Report generator for multiple output formats.
"""

import json
import yaml
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Dict, Optional

from cross_test_builder.reporting.models import BuildReport, BuildStatus


class ReportGenerator:
    """Generate build reports in multiple formats."""

    def __init__(self, output_dir: Path = Path("reports")):
        self.output_dir = output_dir

    def _report_path(self, report: BuildReport, extension: str) -> Path:
        """Return path for report file; ensure output dir exists."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filename = f"build_report_{report.target_arch}_{report.run_id}.{extension}"
        return self.output_dir / filename

    def generate_reports(self,
                         report: BuildReport,
                         formats: Optional[List[str]] = None) -> Dict[str, Path]:
        """
        Generate reports in specified formats.

        Args:
            report: BuildReport object
            formats: List of formats to generate (json, md, junit)

        Returns:
            Dictionary mapping format to output file path
        """
        if formats is None:
            formats = ["json", "md"]

        writers = {
            "json": self._generate_json_report,
            "md": self._generate_markdown_report,
            "junit": self._generate_junit_report,
        }
        generated_files = {}
        for format_type in formats:
            writer = writers.get(format_type)
            if writer is not None:
                generated_files[format_type] = writer(report)
        return generated_files

    def _generate_json_report(self, report: BuildReport) -> Path:
        file_path = self._report_path(report, "json")
        file_path.write_text(json.dumps(report.to_dict(), indent=2))
        return file_path

    def _generate_markdown_report(self, report: BuildReport) -> Path:
        file_path = self._report_path(report, "md")
        file_path.write_text(self._create_markdown_content(report))
        return file_path

    def _generate_junit_report(self, report: BuildReport) -> Path:
        """Generate JUnit XML report, one testcase per test."""
        file_path = self._report_path(report, "junit.xml")
        skipped = report.cross_built if report.link_expected else 0

        testsuite = ET.Element(
            "testsuite",
            {
                "name": f"cross_test_builder_{report.target_arch}",
                "tests": str(report.total_tests),
                "failures": str(report.build_failed + report.link_failed),
                "errors": "0",
                "skipped": str(skipped),
                "time": f"{report.duration:.2f}",
            },
        )

        if report.metadata:
            props = ET.SubElement(testsuite, "properties")
            for key, value in report.metadata.items():
                if value is None:
                    continue
                ET.SubElement(props, "property", {"name": str(key), "value": str(value)})

        for name, result in sorted(report.results.items()):
            testcase = ET.SubElement(
                testsuite,
                "testcase",
                {"classname": "cross_test_builder", "name": name, "time": "0.00"},
            )
            reason = result.failure_reason or ""
            if result.failed:
                failure = ET.SubElement(testcase, "failure", {"message": reason or result.status.value})
                if reason:
                    failure.text = reason
            elif result.status == BuildStatus.CROSS_BUILT and report.link_expected:
                ET.SubElement(testcase, "skipped", {"message": "cross-built but not linked"})

        ET.ElementTree(testsuite).write(file_path, encoding="utf-8", xml_declaration=True)
        return file_path

    def _create_markdown_content(self, report: BuildReport) -> str:
        status_counts = report.get_status_counts()
        total = report.total_tests

        md = f"""# Cross Test Build Report

## Summary

- **Target:** {report.target_arch}
- **Run ID:** {report.run_id}
- **Start Time:** {report.start_time.strftime('%Y-%m-%d %H:%M:%S')}
- **Duration:** {report.duration:.2f} seconds
- **Total Tests:** {total}
- **Result:** {report.summary}

## Results Overview

| Status | Count | Percentage |
|--------|-------|------------|
"""
        for status_name, count in status_counts.items():
            if count > 0:
                rate = (count / total * 100) if total > 0 else 0
                md += f"| {status_name.replace('_', ' ').title()} | {count} | {rate:.1f}% |\n"

        md += "\n## Tests\n\n"
        for name, result in sorted(report.results.items()):
            md += f"### {name}\n\n"
            md += f"- **Status:** {result.status.value}\n"
            if result.elf_path:
                md += f"- **ELF Path:** `{result.elf_path}`\n"
            if result.failure_stage:
                md += f"- **Failure Stage:** {result.failure_stage}\n"
            if result.failure_reason:
                md += f"- **Failure Reason:** {result.failure_reason}\n"
            md += "\n"

        if report.metadata:
            md += "## Configuration\n\n```yaml\n"
            md += yaml.safe_dump(report.metadata, default_flow_style=False, sort_keys=True)
            md += "```\n"

        return md
