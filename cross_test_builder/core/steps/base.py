"""
Step lifecycle shared by the cross-build and link steps.

A step is skipped, described (dry run), validated, then executed and timed.
Steps never raise for build failures; they return a failed StepResult.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import time


class StepStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    """Outcome of one step, carrying the stage manifest on success."""
    name: str
    status: StepStatus
    message: str
    duration_sec: Optional[float] = None
    outputs: Dict[str, str] = field(default_factory=dict)
    details: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Exception] = None
    manifest: Optional[Any] = None

    @property
    def success(self) -> bool:
        return self.status == StepStatus.SUCCESS

    @property
    def skipped(self) -> bool:
        return self.status == StepStatus.SKIPPED


@dataclass
class StepPlan:
    """Commands a step would run, without running them."""
    name: str
    will_run: bool
    reason: str
    commands: List[List[str]] = field(default_factory=list)
    outputs: Dict[str, str] = field(default_factory=dict)
    details: Dict[str, Any] = field(default_factory=dict)

    def lines(self, index: int = 1) -> List[str]:
        will = "will run" if self.will_run else "skipped"
        lines = [f"{index}. {self.name}: {will} ({self.reason})"]
        lines.extend(f"   cmd: {' '.join(cmd)}" for cmd in self.commands)
        outputs = ", ".join(f"{k}={v}" for k, v in self.outputs.items() if v)
        if outputs:
            lines.append(f"   outputs: {outputs}")
        details = ", ".join(f"{k}={v}" for k, v in self.details.items() if v is not None)
        if details:
            lines.append(f"   details: {details}")
        return lines


class StepBase(ABC):
    """Base class for the crossbuild and link steps."""

    def __init__(self, config):
        self.config = config
        self.logger = None  # set by subclasses

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    def execute(self) -> StepResult:
        if self.should_skip():
            return StepResult(
                name=self.name,
                status=StepStatus.SKIPPED,
                message=f"{self.name} step skipped by config",
            )
        if self.config.dry_run:
            return self.dry_run()
        error = self.validate()
        if error:
            return StepResult(name=self.name, status=StepStatus.FAILED, message=error)
        start = time.perf_counter()
        result = self._do_execute()
        result.duration_sec = time.perf_counter() - start
        return result

    @abstractmethod
    def _do_execute(self) -> StepResult:
        ...

    def should_skip(self) -> bool:
        return False

    def validate(self) -> Optional[str]:
        """Return an error message when the step cannot run, else None."""
        return None

    def dry_run(self) -> StepResult:
        plan = self.plan()
        if plan.commands:
            message = "DRY RUN: Would run: " + "; ".join(" ".join(cmd) for cmd in plan.commands)
        else:
            message = f"DRY RUN: Would execute {self.name} step ({plan.reason})"
        return StepResult(
            name=self.name,
            status=StepStatus.SKIPPED,
            message=message,
            outputs=dict(plan.outputs),
        )

    def plan(self) -> StepPlan:
        if self.should_skip():
            return StepPlan(name=self.name, will_run=False, reason="skipped by config")
        error = self.plan_validate()
        if error:
            return StepPlan(name=self.name, will_run=False, reason=f"invalid: {error}")
        return self._plan_details()

    def plan_validate(self) -> Optional[str]:
        """Checks that hold before anything has been built."""
        return None

    @abstractmethod
    def _plan_details(self) -> StepPlan:
        ...
