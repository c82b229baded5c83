"""
Command-line interface for the cross test builder.

This module provides a subcommand-based CLI using Typer.
"""

import shutil
import sys
from pathlib import Path
from typing import List, Optional

import typer

from cross_test_builder.core import naming
from cross_test_builder.core.config import Config, DEFAULT_TARGET_ARCH
from cross_test_builder.core.discovery import discover_tests
from cross_test_builder.core.errors import CrossTestBuilderError
from cross_test_builder.core.logging import setup_logger
from cross_test_builder.core.pipeline import BuildPipeline, PipelineOutcome
from cross_test_builder.core.toolchain import ToolchainLocator, default_resolvers

app = typer.Typer(
    name="cross-test-builder",
    help="Cross-compile Rust example tests and link them into STM32 images for emulation",
    add_completion=False,
)


def get_config(
    arch: Optional[str] = None,
    verbosity: Optional[int] = None,
    dry_run: Optional[bool] = None,
    project_root: Optional[Path] = None,
    **kwargs
) -> Config:
    """Create Config from the options actually given, reporting problems as a CLI error."""
    init_kwargs = {}
    if dry_run:
        init_kwargs["dry_run"] = True
    if arch:
        init_kwargs["target_arch"] = arch
    if project_root:
        init_kwargs["project_root"] = project_root
    if verbosity is not None:
        init_kwargs["verbosity"] = verbosity
    for key, value in kwargs.items():
        if key in Config.__dataclass_fields__ and value is not None:
            init_kwargs[key] = value
    try:
        return Config(**init_kwargs)
    except (CrossTestBuilderError, ValueError) as e:
        typer.echo(f"✗ Configuration error: {e}", err=True)
        sys.exit(1)


def _finish(outcome: PipelineOutcome, config: Config, success_msg: str) -> None:
    """Echo the outcome of a pipeline run and exit with the matching code."""
    if config.dry_run:
        for step in outcome.steps:
            typer.echo(f"⊘ {step.name}: {step.message}")
    for fmt, path in outcome.reports.items():
        typer.echo(f"Report ({fmt}): {path}")
    if outcome.success:
        if outcome.link is not None:
            for image in outcome.link.binaries:
                typer.echo(f"  {image.name}: {image.absolute_elf_path}")
        typer.echo(success_msg)
        sys.exit(0)
    typer.echo(f"✗ {outcome.message}", err=True)
    sys.exit(1)


def _run_pipeline(config: Config, link: bool, success_msg: str) -> None:
    setup_logger(verbosity=config.verbosity)
    pipeline = BuildPipeline(config)
    if config.plan:
        for line in pipeline.plan_lines(link=link):
            typer.echo(line)
        sys.exit(0)
    _finish(pipeline.run(link=link), config, success_msg)


@app.command()
def build(
    arch: Optional[str] = typer.Option(None, "--arch", help=f"Target triple passed to cargo --target (default {DEFAULT_TARGET_ARCH})"),
    cargo: Optional[str] = typer.Option(None, "--cargo", help="Path to the cargo executable"),
    fail_fast: Optional[bool] = typer.Option(None, "--fail-fast/--no-fail-fast", help="Stop at the first failing test (default) or build every test and report all failures"),
    report: Optional[bool] = typer.Option(None, "--report/--no-report", help="Write build reports (default on)"),
    report_formats: Optional[List[str]] = typer.Option(None, "--report-formats", help="Report formats (json, md, junit; default json)"),
    report_dir: Optional[Path] = typer.Option(None, help="Directory to save reports"),
    verbosity: Optional[int] = typer.Option(None, "--verbosity", "-v", help="Verbosity level (0-3)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done"),
    plan: bool = typer.Option(False, "--plan", help="Print execution plan and exit"),
    project_root: Optional[Path] = typer.Option(None, "--repo-root", help="Tests project root directory"),
):
    """Cross-compile every example test into a target static library."""
    config = get_config(
        arch=arch, verbosity=verbosity, dry_run=dry_run, plan=plan or None, project_root=project_root,
        toolchain_path=cargo, fail_fast=fail_fast, enable_reporting=report,
        report_formats=list(report_formats) if report_formats else None, report_dir=report_dir,
    )
    _run_pipeline(config, link=False, success_msg=f"✓ Cross build completed for {config.target_arch}")


@app.command()
def full(
    arch: Optional[str] = typer.Option(None, "--arch", help=f"Target triple passed to cargo --target (default {DEFAULT_TARGET_ARCH})"),
    cargo: Optional[str] = typer.Option(None, "--cargo", help="Path to the cargo executable"),
    make: Optional[str] = typer.Option(None, "--make", help="Build tool running the gcc recipe"),
    fail_fast: Optional[bool] = typer.Option(None, "--fail-fast/--no-fail-fast", help="Stop at the first failing test (default) or build every test and report all failures"),
    skip_link: bool = typer.Option(False, "--skip-link", help="Skip the link step"),
    report: Optional[bool] = typer.Option(None, "--report/--no-report", help="Write build reports (default on)"),
    report_formats: Optional[List[str]] = typer.Option(None, "--report-formats", help="Report formats (json, md, junit; default json)"),
    report_dir: Optional[Path] = typer.Option(None, help="Directory to save reports"),
    verbosity: Optional[int] = typer.Option(None, "--verbosity", "-v", help="Verbosity level (0-3)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done"),
    plan: bool = typer.Option(False, "--plan", help="Print execution plan and exit"),
    project_root: Optional[Path] = typer.Option(None, "--repo-root", help="Tests project root directory"),
):
    """Run the complete pipeline (cross-build → link)."""
    config = get_config(
        arch=arch, verbosity=verbosity, dry_run=dry_run, plan=plan or None, project_root=project_root,
        toolchain_path=cargo, make_command=make, fail_fast=fail_fast, skip_link=skip_link or None,
        enable_reporting=report, report_formats=list(report_formats) if report_formats else None, report_dir=report_dir,
    )
    _run_pipeline(config, link=True, success_msg="✓ Pipeline completed successfully")


@app.command(name="list")
def list_tests(
    project_root: Optional[Path] = typer.Option(None, "--repo-root", help="Tests project root directory"),
):
    """List the tests discovered in the project's examples directory."""
    config = get_config(project_root=project_root)
    try:
        tests = discover_tests(config.project_root)
    except CrossTestBuilderError as e:
        typer.echo(f"✗ {e}", err=True)
        sys.exit(1)
    for test in tests:
        typer.echo(test)


@app.command()
def doctor(
    cargo: Optional[str] = typer.Option(None, "--cargo", help="Path to the cargo executable"),
    project_root: Optional[Path] = typer.Option(None, "--repo-root", help="Tests project root directory"),
):
    """Run preflight checks (toolchain, build tool, project layout)."""
    typer.echo("Running preflight checks...")
    config = get_config(project_root=project_root, toolchain_path=cargo)
    typer.echo(f"✓ Project root: {config.project_root}")

    all_ok = True
    try:
        toolchain = ToolchainLocator(default_resolvers(config.toolchain_path)).locate()
        typer.echo(f"✓ cargo found ({toolchain})")
    except CrossTestBuilderError as e:
        typer.echo(f"✗ {e}", err=True)
        all_ok = False

    if shutil.which(config.make_command):
        typer.echo(f"✓ {config.make_command} found (link recipe driver)")
    else:
        typer.echo(f"✗ {config.make_command} not found (link recipe driver)", err=True)
        all_ok = False

    key_dirs = {
        naming.examples_dir(config.project_root): "Test sources",
        naming.recipe_dir(config.project_root): "Link recipe",
    }
    for dir_path, description in key_dirs.items():
        if dir_path.is_dir():
            typer.echo(f"✓ {dir_path.name}/ exists ({description})")
        else:
            typer.echo(f"✗ {dir_path.name}/ not found ({description})", err=True)
            all_ok = False

    if all_ok:
        typer.echo("\n✓ All preflight checks passed")
        sys.exit(0)
    typer.echo("\n✗ Some preflight checks failed", err=True)
    sys.exit(1)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
