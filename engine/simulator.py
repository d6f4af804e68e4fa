"""Simulation engine lifecycle state machine."""

from __future__ import annotations

import enum
import logging
import random
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union

from engine.termination import StopNow, Termination
from evolution.base import Algorithm, AlgorithmError, GenerationOutcome

LOGGER = logging.getLogger(__name__)

STOPPED_BY_REQUEST = "Simulation stopped by request."


class RunMode(str, enum.Enum):
    """Whether the simulation is running and how it was started."""

    NOT_RUNNING = "not_running"
    LOOP = "loop"
    STEP = "step"


class SimulationError(RuntimeError):
    """Base class for simulator command failures."""


class SimulationAlreadyRunning(SimulationError):
    """Raised when a command is issued while the simulator is busy in another mode."""

    def __init__(self, mode: RunMode, started_at: datetime, message: str | None = None) -> None:
        self.mode = mode
        self.started_at = started_at
        super().__init__(
            message or f"simulation already running in {mode.value} mode since {started_at.isoformat()}"
        )


class SimulationStillRunning(SimulationAlreadyRunning):
    """Raised by ``reset`` while the simulation is running."""

    def __init__(self, mode: RunMode, started_at: datetime) -> None:
        super().__init__(
            mode,
            started_at,
            f"Simulation still running in {mode.value} mode since {started_at.isoformat()}. "
            "Wait for the simulation to finish or stop it before resetting it.",
        )


@dataclass(frozen=True)
class State:
    """Snapshot of one processed generation."""

    started_at: datetime
    iteration: int
    duration: float
    processing_time: float
    result: GenerationOutcome


@dataclass(frozen=True)
class Intermediate:
    """The simulation continues after this state."""

    state: State


@dataclass(frozen=True)
class Final:
    """The simulation ended with this state."""

    state: State
    processing_time: float
    duration: float
    stop_reason: str


SimResult = Union[Intermediate, Final]


class Simulator:
    """Drives an algorithm generation by generation until termination fires.

    The simulator is a three-state machine (``RunMode``). ``run`` loops until
    the termination condition stops it, ``step`` processes one generation per
    call, ``stop`` and ``reset`` bring it back to a clean ``NOT_RUNNING``
    state. It owns the random source handed to the algorithm.
    """

    def __init__(
        self,
        algorithm: Algorithm,
        termination: Termination,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.algorithm = algorithm
        self.termination = termination
        self.rng = rng if rng is not None else random.Random(seed)

        self.iteration = 0
        self.processing_time = 0.0
        self.started_at = datetime.now()

        self._run_mode = RunMode.NOT_RUNNING
        self._started_clock = time.perf_counter()
        self._state_lock = threading.Lock()

    @property
    def run_mode(self) -> RunMode:
        with self._state_lock:
            return self._run_mode

    def run(self) -> Final:
        """Loop generations until termination and return the final result.

        Raises:
            SimulationAlreadyRunning: If the simulator is already running.
            AlgorithmError: If the algorithm fails; run-mode is reset anyway.
        """
        self._enter(RunMode.LOOP, allow_continue=False)
        try:
            while True:
                state = self._process_one_iteration()
                flag = self.termination.evaluate(state)
                if isinstance(flag, StopNow):
                    return self._final(state, flag.reason)
                if self.run_mode is not RunMode.LOOP:
                    LOGGER.info("Loop stopped externally at iteration %d", state.iteration)
                    return self._final(state, STOPPED_BY_REQUEST)
        finally:
            self._set_mode(RunMode.NOT_RUNNING)

    def step(self) -> SimResult:
        """Process exactly one generation.

        Raises:
            SimulationAlreadyRunning: If the simulator is running in loop mode.
            AlgorithmError: If the algorithm fails. Run-mode is reset on any failure.
        """
        self._enter(RunMode.STEP, allow_continue=True)
        try:
            state = self._process_one_iteration()
            flag = self.termination.evaluate(state)
        except Exception:
            self._set_mode(RunMode.NOT_RUNNING)
            raise

        if isinstance(flag, StopNow):
            self._set_mode(RunMode.NOT_RUNNING)
            return self._final(state, flag.reason)
        return Intermediate(state)

    def stop(self) -> bool:
        """Force ``NOT_RUNNING``; return whether the simulator was running."""
        with self._state_lock:
            if self._run_mode is RunMode.NOT_RUNNING:
                return False
            self._run_mode = RunMode.NOT_RUNNING
            return True

    def reset(self) -> None:
        """Zero the counters and reset the algorithm.

        Raises:
            SimulationStillRunning: If the simulator is running.
            AlgorithmError: If the algorithm cannot be reset.
        """
        with self._state_lock:
            if self._run_mode is not RunMode.NOT_RUNNING:
                raise SimulationStillRunning(self._run_mode, self.started_at)
            self.iteration = 0
            self.processing_time = 0.0
        self._safe_algorithm_call("algorithm.reset", self.algorithm.reset)

    def _enter(self, mode: RunMode, allow_continue: bool) -> None:
        with self._state_lock:
            if self._run_mode is mode and allow_continue:
                return
            if self._run_mode is not RunMode.NOT_RUNNING:
                raise SimulationAlreadyRunning(self._run_mode, self.started_at)
            self._run_mode = mode
            self.started_at = datetime.now()
            self._started_clock = time.perf_counter()

    def _set_mode(self, mode: RunMode) -> None:
        with self._state_lock:
            self._run_mode = mode

    def _process_one_iteration(self) -> State:
        self.iteration += 1
        loop_started = time.perf_counter()

        outcome = self._safe_algorithm_call("algorithm.advance", self.algorithm.advance, self.iteration, self.rng)
        self.processing_time += float(self.algorithm.processing_time())

        return State(
            started_at=self.started_at,
            iteration=self.iteration,
            duration=time.perf_counter() - loop_started,
            processing_time=self.processing_time,
            result=outcome,
        )

    def _final(self, state: State, reason: str) -> Final:
        return Final(
            state=state,
            processing_time=self.processing_time,
            duration=time.perf_counter() - self._started_clock,
            stop_reason=reason,
        )

    @staticmethod
    def _safe_algorithm_call(label: str, fn: Any, *args: Any) -> Any:
        try:
            return fn(*args)
        except AlgorithmError:
            raise
        except Exception as exc:
            raise AlgorithmError(f"{label} failed: {exc}") from exc
