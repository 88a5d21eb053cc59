"""Staged processing pipeline that realizes a split plan.

The orchestrator is a small state machine::

    IDLE -> RUNNING -> DONE | FAILED

While running, a cooperative clock advances the active stage's progress. The
realization collaborator is only invoked once every stage has completed.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import List, Optional, Protocol, Sequence, Tuple

from .backends.base import DocumentCodec
from .exceptions import OrchestratorBusyError
from .types import OutputResult, OutputSpec, ProcessStage, ProcessStatus, ResultHandle, StageStatus

LOGGER = logging.getLogger("split_planner.orchestrator")

DEFAULT_STAGES: Tuple[str, ...] = (
    "Analyzing PDF Structure...",
    "Extracting Page Data...",
    "Splitting Document...",
    "Compressing Output Files...",
    "Generating Analytics...",
)
DEFAULT_TICK_INTERVAL = 0.05
INITIAL_PROGRESS = 10
PROGRESS_INCREMENT = 20


class ProcessState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class Realizer(Protocol):
    async def realize(self, specs: Sequence[OutputSpec]) -> List[OutputResult]:
        """Turn every spec into an output, in order."""


class CodecRealizer:
    """Realize specs one by one through a :class:`DocumentCodec`."""

    def __init__(self, codec: DocumentCodec, data: bytes) -> None:
        self.codec = codec
        self.data = data

    async def realize(self, specs: Sequence[OutputSpec]) -> List[OutputResult]:
        results: List[OutputResult] = []
        try:
            for spec in specs:
                payload, byte_size = self.codec.extract_and_rotate(self.data, spec)
                results.append(
                    OutputResult(
                        name=spec.name,
                        page_count=spec.page_count,
                        byte_size=byte_size,
                        handle=ResultHandle(spec.name, payload),
                    )
                )
                LOGGER.debug("Realized %s (%s pages, %s bytes)", spec.name, spec.page_count, byte_size)
                await asyncio.sleep(0)
        except BaseException:
            for result in results:
                result.handle.release()
            raise
        return results


class ProcessOrchestrator:
    """Drive the staged status pipeline and the final realization call."""

    def __init__(
        self,
        realizer: Realizer,
        *,
        stages: Sequence[str] = DEFAULT_STAGES,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        initial_progress: int = INITIAL_PROGRESS,
        increment: int = PROGRESS_INCREMENT,
    ) -> None:
        if not stages:
            raise ValueError("At least one processing stage is required")
        if increment < 1:
            raise ValueError(f"Progress increment must be >= 1, got {increment}")
        self.realizer = realizer
        self.stage_names = tuple(stages)
        self.tick_interval = max(0.0, tick_interval)
        self.initial_progress = initial_progress
        self.increment = increment

        self._state = ProcessState.IDLE
        self._status: List[StageStatus] = []
        self._stage_index = 0
        self._specs: Tuple[OutputSpec, ...] = ()
        self._results: List[OutputResult] = []
        self._error: Optional[str] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def state(self) -> ProcessState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ProcessState.RUNNING

    @property
    def status(self) -> ProcessStatus:
        return tuple(StageStatus(item.name, item.stage, item.progress) for item in self._status)

    @property
    def stage_index(self) -> int:
        return self._stage_index

    @property
    def specs(self) -> Tuple[OutputSpec, ...]:
        return self._specs

    @property
    def results(self) -> List[OutputResult]:
        return list(self._results)

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def stages_completed(self) -> bool:
        return bool(self._status) and self._stage_index >= len(self._status)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def begin(self, specs: Sequence[OutputSpec]) -> None:
        if self._state is ProcessState.RUNNING:
            raise OrchestratorBusyError()

        self._release_results()
        self._specs = tuple(specs)
        self._status = [StageStatus(name) for name in self.stage_names]
        self._stage_index = 0
        self._error = None
        self._state = ProcessState.RUNNING
        LOGGER.info("Split started with %s output(s)", len(self._specs))

    def tick(self) -> bool:
        """Advance the clock by one step; return True once all stages are done."""

        if self._state is not ProcessState.RUNNING or self.stages_completed:
            return self.stages_completed

        current = self._status[self._stage_index]
        if current.stage is ProcessStage.PENDING:
            current.stage = ProcessStage.ACTIVE
            current.progress = self.initial_progress
        elif current.progress < 100:
            current.progress = min(100, current.progress + self.increment)
        else:
            current.stage = ProcessStage.COMPLETED
            self._stage_index += 1
            LOGGER.debug("Stage completed: %s", current.name)

        return self.stages_completed

    async def run(self, specs: Sequence[OutputSpec]) -> ProcessState:
        """Run every stage, then realize ``specs``; return the terminal state."""

        self.begin(specs)
        while not self.tick():
            await asyncio.sleep(self.tick_interval)

        try:
            results = await self.realizer.realize(self._specs)
        except Exception as exc:
            self._error = str(exc) or exc.__class__.__name__
            self._results = []
            self._state = ProcessState.FAILED
            LOGGER.warning("Split failed: %s", self._error)
            return self._state

        self._results = list(results)
        self._state = ProcessState.DONE
        LOGGER.info("Split finished: %s output(s)", len(self._results))
        return self._state

    def reset(self) -> None:
        if self._state is ProcessState.RUNNING:
            raise OrchestratorBusyError("A running split cannot be reset.")
        self._release_results()
        self._status = []
        self._stage_index = 0
        self._specs = ()
        self._error = None
        self._state = ProcessState.IDLE

    def _release_results(self) -> None:
        for result in self._results:
            result.handle.release()
        self._results = []


__all__ = [
    "CodecRealizer",
    "DEFAULT_STAGES",
    "ProcessOrchestrator",
    "ProcessState",
    "Realizer",
]
