"""
Runtime data models.

This module contains data structures produced while a build invocation runs:
toolchain selection, per-step outcomes and the overall run summary.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ToolchainPlan:
    """Compiler, cache and linker helpers picked for this host."""

    compiler_launcher: Optional[str] = None
    c_compiler: Optional[str] = None
    cxx_compiler: Optional[str] = None
    use_mold: bool = False
    cmake_options: List[str] = field(default_factory=list)

    @property
    def description(self) -> str:
        parts = [
            f"launcher={self.compiler_launcher or 'none'}",
            f"cc={self.c_compiler or 'default'}",
            f"cxx={self.cxx_compiler or 'default'}",
            f"mold={'yes' if self.use_mold else 'no'}",
        ]
        return ", ".join(parts)


@dataclass
class StepResult:
    """
    Outcome of a single orchestrator step.
    """

    name: str
    success: bool
    message: str = ""
    returncode: Optional[int] = None
    skipped: bool = False


@dataclass
class RunContext:
    """
    Mutable state accumulated by the orchestrator as steps complete.
    """

    log_file: Path
    # Environment handed to every external command after venv activation.
    env: Dict[str, str] = field(default_factory=dict)
    cmake_options: List[str] = field(default_factory=list)
    resolved_jobs: Optional[int] = None


@dataclass
class RunSummary:
    """Results of every step that ran, in order."""

    steps: List[StepResult] = field(default_factory=list)
    log_file: Optional[Path] = None

    @property
    def success(self) -> bool:
        return all(step.success for step in self.steps)

    @property
    def failed_step(self) -> Optional[StepResult]:
        for step in self.steps:
            if not step.success:
                return step
        return None
