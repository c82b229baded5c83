"""
Pipeline step implementations.
"""

from cross_test_builder.core.steps.base import StepBase, StepPlan, StepResult, StepStatus
from cross_test_builder.core.steps.crossbuild import CrossBuildStep
from cross_test_builder.core.steps.link import LinkStep

__all__ = [
    "StepBase",
    "StepPlan",
    "StepResult",
    "StepStatus",
    "CrossBuildStep",
    "LinkStep",
]
