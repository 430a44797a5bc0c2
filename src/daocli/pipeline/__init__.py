"""Pipeline composition utilities."""

from .base import (
    PipelineListener,
    PipelineRunner,
    Step,
    StepAction,
    StepHandle,
    StepPredicate,
    StepResult,
    StepStatus,
)

__all__ = [
    "PipelineListener",
    "PipelineRunner",
    "Step",
    "StepAction",
    "StepHandle",
    "StepPredicate",
    "StepResult",
    "StepStatus",
]
