import json
import xml.etree.ElementTree as ET
from pathlib import Path

from cross_test_builder.core.config import Config
from cross_test_builder.core.pipeline import BuildPipeline
from cross_test_builder.core.toolchain import ToolchainLocator
from cross_test_builder.tests.helpers import ARCH, FakeRunner, fake_locator, make_project


def _config(root: Path, **kwargs) -> Config:
    kwargs.setdefault("enable_reporting", False)
    return Config(project_root=root, target_arch=ARCH, **kwargs)


def test_blink_scenario(tmp_path: Path, runner, locator) -> None:
    root = make_project(tmp_path / "proj", sources=["test_blink.rs"])

    outcome = BuildPipeline(_config(root), locator=locator, runner=runner).run()

    assert outcome.success
    (image,) = outcome.link.binaries
    assert image.name == "test_blink"
    assert image.absolute_elf_path == (root / "gcc" / "build" / "stm32_test_blink.elf").resolve()


def test_cross_build_failure_never_reaches_link(tmp_path: Path, locator) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs", "test_b.rs"])
    runner = FakeRunner(fail={"test_a"})

    outcome = BuildPipeline(_config(root), locator=locator, runner=runner).run()

    assert not outcome.success
    assert outcome.failed_step.name == "crossbuild"
    assert outcome.link is None
    assert runner.make_calls == []
    assert "test_a" in outcome.message


def test_collect_all_still_stops_before_link(tmp_path: Path, locator) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs", "test_b.rs"])
    runner = FakeRunner(fail={"test_a"})

    outcome = BuildPipeline(_config(root, fail_fast=False), locator=locator, runner=runner).run()

    assert not outcome.success
    assert runner.built() == ["test_a", "test_b"]
    assert runner.make_calls == []


def test_missing_toolchain_fails_the_run(tmp_path: Path, runner) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs"])
    locator = ToolchainLocator(resolvers=[], probe=lambda c, f: "")

    outcome = BuildPipeline(_config(root), locator=locator, runner=runner).run()

    assert not outcome.success
    assert "Cargo not found" in outcome.message
    assert runner.calls == []


def test_pipeline_is_idempotent(tmp_path: Path, locator) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs", "test_b.rs"])
    config = _config(root)

    first = BuildPipeline(config, locator=locator, runner=FakeRunner()).run()
    second = BuildPipeline(config, locator=locator, runner=FakeRunner()).run()

    assert first.success and second.success
    assert first.link == second.link


def test_build_only_skips_link(tmp_path: Path, runner, locator) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs"])

    outcome = BuildPipeline(_config(root), locator=locator, runner=runner).run(link=False)

    assert outcome.success
    assert outcome.cross_build.tests == ("test_a",)
    assert outcome.link is None
    assert runner.make_calls == []


def test_dry_run_executes_nothing(tmp_path: Path, runner) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs"])

    outcome = BuildPipeline(_config(root, dry_run=True), locator=fake_locator("/x/cargo"), runner=runner).run()

    assert outcome.success
    assert runner.calls == []
    assert [s.name for s in outcome.steps] == ["crossbuild", "link"]
    assert "/x/cargo build --example test_a" in outcome.steps[0].message
    assert "TEST_NAME=test_a" in outcome.steps[1].message


def test_plan_lists_commands(tmp_path: Path) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs"])

    lines = BuildPipeline(_config(root), locator=fake_locator("/x/cargo")).plan_lines()

    assert lines[0] == "Plan:"
    assert any("cmd: CARGO_INCREMENTAL=0 /x/cargo build --example test_a" in line for line in lines)
    assert any(line.startswith("2. link: will run") for line in lines)


def test_reports_written(tmp_path: Path, runner, locator) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs", "test_b.rs"])
    report_dir = tmp_path / "reports"
    config = _config(root, enable_reporting=True, report_formats=["json", "md", "junit"], report_dir=report_dir)

    outcome = BuildPipeline(config, locator=locator, runner=runner).run()

    assert set(outcome.reports) == {"json", "md", "junit"}
    data = json.loads(outcome.reports["json"].read_text())
    assert data["linked"] == 2
    assert data["results"]["test_a"]["status"] == "LINKED"
    assert data["results"]["test_a"]["elf_path"] == "gcc/build/stm32_test_a.elf"


def test_report_records_failure(tmp_path: Path, locator) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs", "test_b.rs"])
    config = _config(root, enable_reporting=True, report_dir=tmp_path / "reports")

    outcome = BuildPipeline(config, locator=locator, runner=FakeRunner(fail={"test_b"})).run()

    data = json.loads(outcome.reports["json"].read_text())
    assert data["results"]["test_a"]["status"] == "CROSS_BUILT"
    assert data["results"]["test_b"]["status"] == "BUILD_FAILED"
    assert data["results"]["test_b"]["failure_stage"] == "cross-build"
    assert data["results"]["test_b"]["exit_code"] == 101


def test_report_keeps_images_linked_before_a_link_failure(tmp_path: Path, locator) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs", "test_b.rs"])
    config = _config(root, enable_reporting=True, report_dir=tmp_path / "reports")
    runner = FakeRunner(fail_link={"test_b"}, returncode=2)

    outcome = BuildPipeline(config, locator=locator, runner=runner).run()

    assert not outcome.success
    assert outcome.failed_step.name == "link"
    data = json.loads(outcome.reports["json"].read_text())
    assert data["results"]["test_a"]["status"] == "LINKED"
    assert data["results"]["test_a"]["elf_path"] == "gcc/build/stm32_test_a.elf"
    assert data["results"]["test_b"]["status"] == "LINK_FAILED"
    assert data["results"]["test_b"]["exit_code"] == 2


def test_build_only_junit_has_no_skipped_cases(tmp_path: Path, runner, locator) -> None:
    root = make_project(tmp_path / "proj", sources=["test_a.rs", "test_b.rs"])
    config = _config(root, enable_reporting=True, report_formats=["junit"], report_dir=tmp_path / "reports")

    outcome = BuildPipeline(config, locator=locator, runner=runner).run(link=False)

    suite = ET.parse(outcome.reports["junit"]).getroot()
    assert suite.get("tests") == "2"
    assert suite.get("skipped") == "0"
    assert list(suite.iter("skipped")) == []
