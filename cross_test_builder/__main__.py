"""
Entry point for running cross_test_builder as a module.

Usage:
    python -m cross_test_builder [command] [options]
"""

from cross_test_builder.cli import main

if __name__ == "__main__":
    main()
