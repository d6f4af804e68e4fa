"""Termination conditions evaluated after every generation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from engine.simulator import State


@dataclass(frozen=True)
class Continue:
    """The simulation should run another generation."""


@dataclass(frozen=True)
class StopNow:
    """The simulation should stop for ``reason``."""

    reason: str


StopFlag = Union[Continue, StopNow]

CONTINUE = Continue()


class Termination(ABC):
    """Decides after each generation whether a simulation should stop."""

    @abstractmethod
    def evaluate(self, state: "State") -> StopFlag:
        """Return ``CONTINUE`` or ``StopNow(reason)`` for ``state``."""


class GenerationLimit(Termination):
    """Stops once ``max_generations`` generations have been processed."""

    def __init__(self, max_generations: int) -> None:
        if max_generations <= 0:
            raise ValueError("max_generations must be > 0")
        self.max_generations = int(max_generations)

    def evaluate(self, state: "State") -> StopFlag:
        if state.iteration >= self.max_generations:
            return StopNow(f"Simulation ended after {state.iteration} generations.")
        return CONTINUE


class FitnessLimit(Termination):
    """Stops once the best fitness reaches ``fitness_target``."""

    def __init__(self, fitness_target: float) -> None:
        self.fitness_target = float(fitness_target)

    def evaluate(self, state: "State") -> StopFlag:
        best_fitness = state.result.best_fitness
        if best_fitness >= self.fitness_target:
            return StopNow(
                f"Simulation ended because best fitness {best_fitness:g} reached the target "
                f"{self.fitness_target:g}."
            )
        return CONTINUE


class Or(Termination):
    """Stops as soon as any condition stops, with that condition's reason."""

    def __init__(self, *conditions: Termination) -> None:
        if not conditions:
            raise ValueError("Or needs at least one condition")
        self.conditions = tuple(conditions)

    def evaluate(self, state: "State") -> StopFlag:
        for condition in self.conditions:
            flag = condition.evaluate(state)
            if isinstance(flag, StopNow):
                return flag
        return CONTINUE


class And(Termination):
    """Stops only once every condition stops; the reasons are joined."""

    def __init__(self, *conditions: Termination) -> None:
        if not conditions:
            raise ValueError("And needs at least one condition")
        self.conditions = tuple(conditions)

    def evaluate(self, state: "State") -> StopFlag:
        reasons: list[str] = []
        for condition in self.conditions:
            flag = condition.evaluate(state)
            if not isinstance(flag, StopNow):
                return CONTINUE
            reasons.append(flag.reason)
        return StopNow(" and ".join(reasons))


def or_(*conditions: Termination) -> Or:
    return Or(*conditions)


def and_(*conditions: Termination) -> And:
    return And(*conditions)
