"""
Utility helpers.
"""

from cross_test_builder.utils.command_runner import CommandResult, run_command

__all__ = ["CommandResult", "run_command"]
