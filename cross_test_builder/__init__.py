"""
Cross Test Builder

Cross-compiles the example test programs of a Rust embedded project and links
each one into an STM32 ELF image for running under emulation.
"""

__version__ = "0.1.0"

from cross_test_builder.core.config import Config
from cross_test_builder.core.models import BuildOptions
from cross_test_builder.core.pipeline import BuildPipeline
from cross_test_builder.core.stages import cross_build, link

__all__ = [
    "Config",
    "BuildOptions",
    "BuildPipeline",
    "cross_build",
    "link",
]
