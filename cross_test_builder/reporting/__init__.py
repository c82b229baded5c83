"""
Build reporting for the cross test builder.

This module provides:
- Per-test build result data structures
- A tracker fed by the build stages
- Report generation (JSON, Markdown, JUnit XML)
"""

from cross_test_builder.reporting.models import BuildReport, BuildResult, BuildStatus
from cross_test_builder.reporting.tracker import BuildTracker
from cross_test_builder.reporting.generator import ReportGenerator

__all__ = [
    "BuildReport",
    "BuildResult",
    "BuildStatus",
    "BuildTracker",
    "ReportGenerator",
]
