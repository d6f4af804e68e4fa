"""Genetic operator and algorithm contracts."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence

from genetics.genome import Genome
from genetics.population import Individual


class AlgorithmError(RuntimeError):
    """Raised when an algorithm fails to advance or reset."""


@dataclass(frozen=True)
class BestSolution:
    """Best individual found so far and when it was found."""

    found_at: datetime
    generation: int
    solution: Individual


@dataclass(frozen=True)
class GenerationOutcome:
    """Result payload of one generation.

    ``population`` is a snapshot of the individuals after reinsertion, so the
    outcome stays valid after the algorithm moves on to the next generation.
    """

    generation: int
    population: tuple[Individual, ...]
    average_fitness: float
    best_solution: BestSolution

    @property
    def best_fitness(self) -> float:
        return self.best_solution.solution.fitness


class Algorithm(ABC):
    """Advances a population by one generation per call.

    Concrete algorithms compose selection, crossover, mutation, evaluation and
    reinsertion, and must draw every random choice from the ``rng`` they are
    handed.
    """

    @abstractmethod
    def advance(self, iteration: int, rng: random.Random) -> GenerationOutcome:
        """Compute the next generation.

        Args:
            iteration (int): 1-based generation number assigned by the caller.
            rng (random.Random): Random source owned by the caller.

        Returns:
            GenerationOutcome: The new population snapshot and best solution.

        Raises:
            AlgorithmError: If the generation cannot be computed.
        """

    @abstractmethod
    def processing_time(self) -> float:
        """Seconds spent in the most recent ``advance`` call."""

    @abstractmethod
    def reset(self) -> None:
        """Restore the initial population and forget the best solution.

        Raises:
            AlgorithmError: If the algorithm cannot be restored.
        """


class CrossoverOp(ABC):
    """Recombines parent genomes into the same number of children."""

    name = "Crossover"

    @abstractmethod
    def crossover(self, parents: Sequence[Sequence[Any]], rng: random.Random) -> list[Genome]:
        """Return one child per parent.

        Invariants:
            - ``len(children) == len(parents)``.
            - Every child has the parents' common genome length.
            - Every locus value is copied from that locus of some parent.
        """


class SelectionOp(ABC):
    """Chooses groups of parents from an evaluated population."""

    @abstractmethod
    def select_from(self, individuals: Sequence[Individual], rng: random.Random) -> list[list[Individual]]:
        """Return parent groups; each group feeds one crossover call."""


class MutationOp(ABC):
    """Randomly alters a genome."""

    @abstractmethod
    def mutate(self, genome: Genome, rng: random.Random) -> Genome:
        """Return a mutated copy of ``genome`` with the same length."""


class ReinsertionOp(ABC):
    """Merges offspring into the previous population."""

    @abstractmethod
    def combine(
        self,
        offspring: Sequence[Individual],
        population: Sequence[Individual],
        rng: random.Random,
    ) -> list[Individual]:
        """Return the next population; its size equals ``len(population)``."""
