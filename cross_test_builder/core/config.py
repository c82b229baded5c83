"""
Configuration management for the cross test builder.
"""

import os
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass

from cross_test_builder.core.discovery import find_project_root
from cross_test_builder.core.errors import ConfigurationError, PathResolutionError
from cross_test_builder.core.models import BuildOptions

CONFIG_ENV = "CROSS_TEST_BUILDER_CONFIG"
CONFIG_FILENAME = "cross_test_builder.toml"
CONFIG_TABLE = "cross_test_builder"

DEFAULT_TARGET_ARCH = "thumbv7em-none-eabihf"
REPORT_FORMATS = frozenset({"json", "md", "junit"})

# Built-in values for settings neither passed explicitly nor set in the config file
DEFAULTS: Dict[str, Any] = {
    "target_arch": DEFAULT_TARGET_ARCH,
    "make_command": "make",
    "fail_fast": True,
    "verbosity": 0,
    "dry_run": False,
    "plan": False,
    "skip_link": False,
    "enable_reporting": True,
    "report_formats": ["json"],
}

PATH_KEYS = frozenset({"project_root", "config_file", "report_dir"})
# Keys a config file may set
_FILE_KEYS = frozenset(DEFAULTS) | {"toolchain_path", "report_dir"}


@dataclass
class Config:
    """Configuration class for the cross test builder."""

    # Project paths - discovered in __post_init__ when not given
    project_root: Optional[Path] = None
    config_file: Optional[Path] = None

    # Settings left as None are taken from the config file, then DEFAULTS

    # Build configuration
    target_arch: Optional[str] = None
    toolchain_path: Optional[str] = None
    make_command: Optional[str] = None

    # Run configuration
    fail_fast: Optional[bool] = None
    verbosity: Optional[int] = None  # 0=minimal, 1=progress, 2=commands, 3=debug
    dry_run: Optional[bool] = None
    plan: Optional[bool] = None
    skip_link: Optional[bool] = None

    # Reporting configuration
    enable_reporting: Optional[bool] = None
    report_formats: Optional[list] = None
    report_dir: Optional[Path] = None

    def __post_init__(self):
        """Post-initialization processing."""
        if self.project_root is None:
            try:
                self.project_root = find_project_root()
            except Exception as e:
                raise ConfigurationError(
                    f"Could not discover tests project root: {e}. "
                    f"Set project_root explicitly (--repo-root)."
                ) from e
        else:
            self.project_root = Path(self.project_root).resolve()

        self._load_config_file()
        for key, value in DEFAULTS.items():
            if getattr(self, key) is None:
                setattr(self, key, list(value) if isinstance(value, list) else value)

        if self.report_dir is None:
            self.report_dir = self.project_root / "target" / "cross_test_builder" / "reports"
        else:
            self.report_dir = Path(self.report_dir).resolve()

        if not 0 <= self.verbosity <= 3:
            raise ValueError(f"verbosity must be between 0 and 3, got {self.verbosity}")

        if not self.target_arch or not str(self.target_arch).strip():
            raise ConfigurationError("target_arch must be a non-empty target triple")

        unknown = [f for f in self.report_formats if f not in REPORT_FORMATS]
        if unknown:
            raise ConfigurationError(
                f"Unknown report format(s): {', '.join(unknown)} "
                f"(choose from {', '.join(sorted(REPORT_FORMATS))})"
            )

        if not self.project_root.exists():
            raise PathResolutionError(f"Project root does not exist: {self.project_root}")
        if not self.project_root.is_dir():
            raise PathResolutionError(f"Project root is not a directory: {self.project_root}")

    def _load_config_file(self) -> None:
        """Load defaults from cross_test_builder.toml if present.

        Values from the file only fill settings that were not passed
        explicitly. An explicit config_file wins over $CROSS_TEST_BUILDER_CONFIG.
        """
        env_path = os.environ.get(CONFIG_ENV)
        if self.config_file is not None:
            self.config_file = Path(self.config_file).resolve()
        elif env_path:
            self.config_file = Path(env_path).resolve()
        else:
            self.config_file = self.project_root / CONFIG_FILENAME

        if not self.config_file or not self.config_file.exists():
            return

        try:
            try:
                import tomllib  # Python 3.11+
            except ModuleNotFoundError:  # Python 3.8-3.10
                import tomli as tomllib

            data = tomllib.loads(self.config_file.read_text())
        except Exception as e:
            raise ConfigurationError(f"Failed to read config file: {self.config_file}: {e}") from e

        table = data.get(CONFIG_TABLE) or data.get("tool", {}).get(CONFIG_TABLE, {})
        if not isinstance(table, dict):
            raise ConfigurationError(f"[{CONFIG_TABLE}] in {self.config_file} must be a table")

        for key, value in table.items():
            if key not in _FILE_KEYS or value is None:
                continue
            if getattr(self, key) is not None:
                continue
            if key in PATH_KEYS:
                value = (self.config_file.parent / value).resolve()
            setattr(self, key, value)

    def build_options(self) -> BuildOptions:
        """Return the read-only options shared by both build stages."""
        return BuildOptions(tests_project_path=self.project_root, target_arch=self.target_arch)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "project_root": str(self.project_root),
            "config_file": str(self.config_file) if self.config_file else None,
            "target_arch": self.target_arch,
            "toolchain_path": self.toolchain_path,
            "make_command": self.make_command,
            "fail_fast": self.fail_fast,
            "verbosity": self.verbosity,
            "dry_run": self.dry_run,
            "plan": self.plan,
            "skip_link": self.skip_link,
            "enable_reporting": self.enable_reporting,
            "report_formats": list(self.report_formats),
            "report_dir": str(self.report_dir),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        data = dict(data)
        for key in PATH_KEYS:
            if key in data and isinstance(data[key], str):
                data[key] = Path(data[key])
        return cls(**data)

