"""Common abstractions for composing dao-cli task pipelines."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Generic, List, Optional, Protocol, Sequence, TypeVar

_LOGGER = logging.getLogger(__name__)

ContextT = TypeVar("ContextT")

StepAction = Callable[[ContextT, "StepHandle"], Awaitable[None]]
StepPredicate = Callable[[ContextT], object]


class StepStatus(str, Enum):
    """Outcome recorded for each step of a run."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    DISABLED = "disabled"
    FAILED = "failed"


@dataclass(slots=True)
class StepResult:
    """Represents the outcome of a pipeline step."""

    title: str
    status: StepStatus
    message: Optional[str] = None


class PipelineListener(Protocol):
    """Receives progress notifications while a pipeline runs."""

    def on_step_start(self, title: str) -> None:
        ...

    def on_step_output(self, title: str, output: str) -> None:
        ...

    def on_step_finish(self, result: StepResult) -> None:
        ...

    def on_step_error(self, title: str, error: BaseException) -> None:
        ...


@dataclass(slots=True)
class Step(Generic[ContextT]):
    """A titled unit of work.

    ``enabled`` is ``None`` for required steps. Conditional steps carry a
    predicate evaluated against the context right before the step would run.
    """

    title: str
    action: StepAction
    enabled: Optional[StepPredicate] = None

    @classmethod
    def required(cls, title: str, action: StepAction) -> "Step[ContextT]":
        return cls(title=title, action=action)

    @classmethod
    def conditional(cls, title: str, predicate: StepPredicate, action: StepAction) -> "Step[ContextT]":
        return cls(title=title, action=action, enabled=predicate)

    @property
    def is_conditional(self) -> bool:
        return self.enabled is not None


@dataclass(slots=True)
class StepHandle:
    """Handle given to a running step so it can skip itself or report progress."""

    title: str
    listener: Optional[PipelineListener] = None
    skipped: bool = False
    skip_reason: Optional[str] = None
    _output: Optional[str] = field(default=None, repr=False)

    def skip(self, reason: Optional[str] = None) -> None:
        """Mark the step as skipped. The action should return right after."""

        self.skipped = True
        self.skip_reason = reason

    @property
    def output(self) -> Optional[str]:
        return self._output

    @output.setter
    def output(self, value: str) -> None:
        self._output = value
        _LOGGER.debug("Step output | step=%s | output=%s", self.title, value)
        if self.listener is not None:
            self.listener.on_step_output(self.title, value)


class PipelineRunner(Generic[ContextT]):
    """Execute a sequence of steps in order against one shared context."""

    def __init__(
        self,
        steps: Sequence[Step[ContextT]],
        context: ContextT,
        *,
        listener: Optional[PipelineListener] = None,
    ) -> None:
        self._steps = list(steps)
        self._context = context
        self._listener = listener
        self._results: List[StepResult] = []

    @property
    def results(self) -> List[StepResult]:
        return list(self._results)

    async def run(self) -> ContextT:
        """Run every step, stopping at (and re-raising) the first failure."""

        self._results.clear()
        for step in self._steps:
            if step.enabled is not None and not step.enabled(self._context):
                _LOGGER.debug("Step disabled | step=%s", step.title)
                self._record(StepResult(title=step.title, status=StepStatus.DISABLED))
                continue

            handle = StepHandle(title=step.title, listener=self._listener)
            if self._listener is not None:
                self._listener.on_step_start(step.title)
            _LOGGER.debug("Step started | step=%s", step.title)
            try:
                await step.action(self._context, handle)
            except BaseException as exc:
                self._results.append(StepResult(title=step.title, status=StepStatus.FAILED, message=str(exc)))
                _LOGGER.debug("Step failed | step=%s | error=%s", step.title, exc)
                if self._listener is not None:
                    self._listener.on_step_error(step.title, exc)
                raise

            if handle.skipped:
                self._record(StepResult(title=step.title, status=StepStatus.SKIPPED, message=handle.skip_reason))
            else:
                self._record(StepResult(title=step.title, status=StepStatus.COMPLETED, message=handle.output))
        return self._context

    def _record(self, result: StepResult) -> None:
        self._results.append(result)
        if self._listener is not None:
            self._listener.on_step_finish(result)


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
