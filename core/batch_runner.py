"""Runs batches of independent trials concurrently and averages their fitness curves."""

from __future__ import annotations

import enum
import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from configs.loader import ExperimentConfig
from core.deterministic_rng import DeterministicRNG
from engine.simulator import Final, SimulationError, Simulator
from evolution.base import AlgorithmError

LOGGER = logging.getLogger(__name__)

SimulatorFactory = Callable[[ExperimentConfig, random.Random], Simulator]


class BatchError(RuntimeError):
    """Base class for per-trial batch failures."""


class TrialFailedToConverge(BatchError):
    """A trial stopped without reaching the optimal fitness."""

    def __init__(self, trial_number: int, best_fitness: float, optimal_fitness: float, generations: int) -> None:
        self.trial_number = trial_number
        self.best_fitness = best_fitness
        self.optimal_fitness = optimal_fitness
        self.generations = generations
        super().__init__(
            f"trial #{trial_number} stopped at fitness {best_fitness:g} of {optimal_fitness:g} "
            f"after {generations} generations"
        )


class ConfigurationTornDown(BatchError):
    """The configuration was torn down before a trial started."""


class ConvergenceCounterError(BatchError):
    """The shared convergence counter could not be updated."""


class TrialStatus(str, enum.Enum):
    CONVERGED = "converged"
    NOT_CONVERGED = "not_converged"
    ERRORED = "errored"
    ABORTED = "aborted"


@dataclass(frozen=True)
class TrialOutcome:
    """Result of one trial: its best-fitness series and how it ended."""

    trial_number: int
    status: TrialStatus
    series: tuple[float, ...] = ()
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.status in {TrialStatus.NOT_CONVERGED, TrialStatus.ERRORED}


@dataclass(frozen=True)
class BatchResult:
    """Averaged outcome of every trial run for one configuration.

    ``combined_series`` is ``None`` unless every started trial converged.
    ``average_generations`` divides the converged generation total by the
    number of started trials, so trials aborted by a tear-down are not
    counted; without a tear-down this is the batch size.
    """

    label: str
    trials: tuple[TrialOutcome, ...]
    combined_series: tuple[float, ...] | None
    average_generations: float | None
    elapsed: float

    @property
    def converged(self) -> bool:
        return self.combined_series is not None

    @property
    def failures(self) -> tuple[TrialOutcome, ...]:
        return tuple(trial for trial in self.trials if trial.failed)

    @property
    def verdict(self) -> str:
        if self.converged:
            return "converged"
        if self.failures:
            return "failed"
        return "cancelled"


class LivenessToken:
    """Signals that a configuration has been torn down.

    Trials check the token once, when they start; a trial already running is
    never interrupted.
    """

    def __init__(self) -> None:
        self._torn_down = threading.Event()

    def tear_down(self) -> None:
        self._torn_down.set()

    @property
    def is_alive(self) -> bool:
        return not self._torn_down.is_set()


class ConvergenceCounter:
    """Lock-guarded sum of the generations needed by converged trials."""

    def __init__(self, lock_timeout: float = 5.0) -> None:
        self._lock = threading.Lock()
        self._lock_timeout = float(lock_timeout)
        self._total = 0
        self._count = 0

    def add(self, generations: int) -> None:
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise ConvergenceCounterError(f"could not acquire convergence counter within {self._lock_timeout}s")
        try:
            self._total += int(generations)
            self._count += 1
        finally:
            self._lock.release()

    @property
    def total(self) -> int:
        with self._lock:
            return self._total

    @property
    def count(self) -> int:
        with self._lock:
            return self._count


def align_series(series: Sequence[Sequence[float]], optimal_fitness: float) -> list[list[float]]:
    """Pad every series with ``optimal_fitness`` up to the longest length.

    A trial that converged early keeps its optimum for the remaining
    generations of the batch.
    """
    max_len = max((len(values) for values in series), default=0)
    return [
        [float(v) for v in values] + [float(optimal_fitness)] * (max_len - len(values))
        for values in series
    ]


def combine_series(series: Sequence[Sequence[float]], optimal_fitness: float) -> list[float]:
    """Element-wise mean of the aligned series."""
    aligned = align_series(series, optimal_fitness)
    if not aligned or not aligned[0]:
        return []
    return [float(v) for v in np.asarray(aligned, dtype=float).mean(axis=0)]


class BatchRunner:
    """Runs ``batch_size`` independent trials of a configuration in parallel.

    Every trial builds its own simulator through ``simulator_factory`` with a
    random stream derived from the configuration seed and the trial index,
    steps it until the final result, and records the best fitness of every
    generation.
    """

    def __init__(self, simulator_factory: SimulatorFactory, max_workers: int | None = None) -> None:
        self.simulator_factory = simulator_factory
        self.max_workers = max_workers

    def run_batch(
        self,
        config: ExperimentConfig,
        optimal_fitness: float,
        trials: int | None = None,
        liveness: LivenessToken | None = None,
    ) -> BatchResult:
        """Run the trials, wait for all of them and combine their series."""
        num_trials = int(trials if trials is not None else config.batch_size)
        if num_trials <= 0:
            raise ValueError("trials must be > 0")
        liveness = liveness or LivenessToken()
        counter = ConvergenceCounter()
        rng = DeterministicRNG(config.seed)
        workers = min(num_trials, self.max_workers or num_trials)

        started = time.perf_counter()
        LOGGER.info("Starting batch '%s' with %d trials on %d workers", config.name, num_trials, workers)

        outcomes: list[TrialOutcome] = []
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(
                    self._run_trial,
                    config,
                    trial_index + 1,
                    rng.trial_stream(trial_index),
                    float(optimal_fitness),
                    counter,
                    liveness,
                ): trial_index + 1
                for trial_index in range(num_trials)
            }
            for future in as_completed(futures):
                trial_number = futures[future]
                try:
                    outcome = future.result()
                except Exception as exc:
                    LOGGER.exception("[trial #%d] crashed: %s", trial_number, exc)
                    outcome = TrialOutcome(trial_number=trial_number, status=TrialStatus.ERRORED, error=exc)
                outcomes.append(outcome)

        outcomes.sort(key=lambda outcome: outcome.trial_number)
        return self._aggregate(config, outcomes, float(optimal_fitness), counter, time.perf_counter() - started)

    def run_sweep(
        self,
        configs: Sequence[ExperimentConfig],
        optimal_fitness_of: Callable[[ExperimentConfig], float],
        liveness: LivenessToken | None = None,
    ) -> list[BatchResult]:
        """Run one batch per configuration, in order."""
        return [self.run_batch(config, optimal_fitness_of(config), liveness=liveness) for config in configs]

    def _run_trial(
        self,
        config: ExperimentConfig,
        trial_number: int,
        rng: random.Random,
        optimal_fitness: float,
        counter: ConvergenceCounter,
        liveness: LivenessToken,
    ) -> TrialOutcome:
        if not liveness.is_alive:
            LOGGER.debug("[trial #%d] configuration '%s' torn down, skipping", trial_number, config.name)
            return TrialOutcome(
                trial_number=trial_number,
                status=TrialStatus.ABORTED,
                error=ConfigurationTornDown(f"configuration '{config.name}' was torn down"),
            )

        LOGGER.info("[trial #%d] starting a simulation with %s parameters", trial_number, config.name)
        simulator = self.simulator_factory(config, rng)
        series: list[float] = []
        while True:
            try:
                result = simulator.step()
            except (AlgorithmError, SimulationError) as exc:
                LOGGER.warning("[trial #%d] %s", trial_number, exc)
                return TrialOutcome(trial_number=trial_number, status=TrialStatus.ERRORED, error=exc)
            series.append(float(result.state.result.best_fitness))
            if isinstance(result, Final):
                break

        best_fitness = series[-1]
        if best_fitness < optimal_fitness:
            error = TrialFailedToConverge(trial_number, best_fitness, optimal_fitness, len(series))
            LOGGER.info("[trial #%d] optimal solution was not found: %s", trial_number, error)
            return TrialOutcome(
                trial_number=trial_number,
                status=TrialStatus.NOT_CONVERGED,
                series=tuple(series),
                error=error,
            )

        try:
            counter.add(len(series))
        except ConvergenceCounterError as exc:
            LOGGER.warning("[trial #%d] %s", trial_number, exc)
            return TrialOutcome(trial_number=trial_number, status=TrialStatus.ERRORED, error=exc)

        LOGGER.info("[trial #%d] optimal solution found after %d generations", trial_number, len(series))
        return TrialOutcome(trial_number=trial_number, status=TrialStatus.CONVERGED, series=tuple(series))

    @staticmethod
    def _aggregate(
        config: ExperimentConfig,
        outcomes: list[TrialOutcome],
        optimal_fitness: float,
        counter: ConvergenceCounter,
        elapsed: float,
    ) -> BatchResult:
        started = [outcome for outcome in outcomes if outcome.status is not TrialStatus.ABORTED]
        failures = [outcome for outcome in started if outcome.failed]

        combined: tuple[float, ...] | None = None
        average_generations: float | None = None
        if failures:
            LOGGER.warning(
                "With %s parameters, the optimal solution was not always found within the generation limit; "
                "failed trials: %s",
                config.name,
                ", ".join(f"#{outcome.trial_number}" for outcome in failures),
            )
        elif not started:
            LOGGER.warning("Batch '%s' was torn down before any trial started", config.name)
        else:
            combined = tuple(combine_series([outcome.series for outcome in started], optimal_fitness))
            average_generations = counter.total / len(started)

        LOGGER.info("Finished batch '%s' after %.2f seconds", config.name, elapsed)
        return BatchResult(
            label=config.name,
            trials=tuple(outcomes),
            combined_series=combined,
            average_generations=average_generations,
            elapsed=elapsed,
        )
