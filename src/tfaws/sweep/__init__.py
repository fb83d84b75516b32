"""Test-environment cleanup of leaked AWS resources."""

from tfaws.sweep.sweep import (
    SKIP_SWEEP_ERRORS,
    SweepResource,
    Sweepable,
    skip_sweep_error,
    sweep_orchestrator,
)
from tfaws.sweep.registry import Sweeper, SweeperRegistry, SweepResult, SweepStatus

__all__ = [
    "SKIP_SWEEP_ERRORS",
    "SweepResource",
    "Sweepable",
    "skip_sweep_error",
    "sweep_orchestrator",
    "Sweeper",
    "SweeperRegistry",
    "SweepResult",
    "SweepStatus",
]
