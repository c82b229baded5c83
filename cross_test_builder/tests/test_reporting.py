from datetime import datetime, timedelta
from pathlib import Path
import json
import xml.etree.ElementTree as ET

from cross_test_builder.core.errors import CrossBuildError
from cross_test_builder.core.models import CrossBuildManifest, LinkedImage, LinkManifest
from cross_test_builder.reporting import BuildReport, BuildResult, BuildStatus, BuildTracker, ReportGenerator


def _report(tmp_path: Path, run_id: str = "run1") -> BuildReport:
    tracker = BuildTracker("thumbv7em-none-eabihf", project_root=tmp_path)
    tracker.on_cross_build("test_ok", None)
    tracker.on_cross_build("test_bad", CrossBuildError("test_bad", 101))
    tracker.record_cross_build(CrossBuildManifest(tests=("test_ok",), library_path=tmp_path / "lib"))
    tracker.record_link(LinkManifest(binaries=(
        LinkedImage("test_ok", tmp_path / "gcc" / "build" / "stm32_test_ok.elf"),
    )))
    return tracker.build_report(run_id=run_id, metadata={"target_arch": "thumbv7em-none-eabihf"})


def test_counts_and_summary(tmp_path: Path) -> None:
    report = _report(tmp_path)

    assert report.total_tests == 2
    assert report.linked == 1
    assert report.build_failed == 1
    assert not report.success
    assert report.summary.startswith("Tests: 2 total")
    assert [r.test_name for r in report.get_failed_tests()] == ["test_bad"]


def test_empty_report() -> None:
    now = datetime.now()
    report = BuildReport(run_id="r", start_time=now, end_time=now + timedelta(seconds=2), target_arch="a")

    assert report.summary == "No tests built"
    assert report.duration == 2.0
    assert report.success


def test_result_paths_relative_to_project(tmp_path: Path) -> None:
    result = BuildResult(
        test_name="t",
        status=BuildStatus.LINKED,
        target_arch="a",
        elf_path=str(tmp_path / "gcc" / "build" / "stm32_t.elf"),
        project_root=tmp_path,
    )

    assert result.to_dict()["elf_path"] == str(Path("gcc") / "build" / "stm32_t.elf")
    assert "failure_reason" not in result.to_dict()


def test_generator_writes_all_formats(tmp_path: Path) -> None:
    report = _report(tmp_path)
    out = tmp_path / "reports"

    files = ReportGenerator(out).generate_reports(report, ["json", "md", "junit"])

    data = json.loads(files["json"].read_text())
    assert data["results"]["test_bad"]["failure_reason"] == "Cross build for 'test_bad' failed (exit code 101)"

    md = files["md"].read_text()
    assert "### test_ok" in md
    assert "target_arch: thumbv7em-none-eabihf" in md

    suite = ET.parse(files["junit"]).getroot()
    assert suite.get("tests") == "2"
    assert suite.get("failures") == "1"
    failed = [tc.get("name") for tc in suite.iter("testcase") if tc.find("failure") is not None]
    assert failed == ["test_bad"]


def test_generator_ignores_unknown_formats(tmp_path: Path) -> None:
    files = ReportGenerator(tmp_path).generate_reports(_report(tmp_path), ["json", "html"])

    assert set(files) == {"json"}


def test_junit_file_is_named_per_run(tmp_path: Path) -> None:
    generator = ReportGenerator(tmp_path / "reports")

    first = generator.generate_reports(_report(tmp_path, run_id="run1"), ["junit"])["junit"]
    second = generator.generate_reports(_report(tmp_path, run_id="run2"), ["junit"])["junit"]

    assert first != second
    assert first.exists() and second.exists()
    assert first.name == "build_report_thumbv7em-none-eabihf_run1.junit.xml"


def test_on_link_marks_test_linked(tmp_path: Path) -> None:
    tracker = BuildTracker("a", project_root=tmp_path)
    tracker.on_cross_build("test_ok", None)
    tracker.on_link("test_ok", None)

    result = tracker.build_report(run_id="r").results["test_ok"]

    assert result.status == BuildStatus.LINKED
    assert result.to_dict()["elf_path"] == str(Path("gcc") / "build" / "stm32_test_ok.elf")
