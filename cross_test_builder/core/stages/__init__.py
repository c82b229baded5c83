"""
Build stages: cross-compilation followed by linking.
"""

from cross_test_builder.core.stages.crossbuild import cross_build
from cross_test_builder.core.stages.link import link

__all__ = ["cross_build", "link"]
