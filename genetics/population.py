"""Fitness-evaluated individuals and populations."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Iterator, Sequence

from genetics.fitness import FitnessFunction
from genetics.genome import GenomeBuilder, as_phenome


@dataclass(frozen=True)
class Individual:
    """A genome together with the fitness derived from it.

    Individuals are immutable: a changed genome is a new individual whose
    fitness is evaluated again from scratch.
    """

    genome: tuple[Any, ...]
    fitness: float

    @classmethod
    def evaluate(cls, genome: Sequence[Any], fitness_function: FitnessFunction) -> "Individual":
        """Create an individual by evaluating ``genome``."""
        frozen = tuple(genome)
        return cls(genome=frozen, fitness=float(fitness_function.fitness_of(frozen)))

    def phenome(self) -> str:
        return as_phenome(self.genome)

    def __len__(self) -> int:
        return len(self.genome)


class Population:
    """Ordered collection of individuals with cached aggregate statistics.

    All genomes of a population share one length. The cached average fitness
    and best individual are recomputed every time the individuals are
    replaced.
    """

    def __init__(self, individuals: Sequence[Individual] = ()) -> None:
        self._individuals: list[Individual] = []
        self._average_fitness = 0.0
        self._best: Individual | None = None
        self.replace(individuals)

    @classmethod
    def build(
        cls,
        builder: GenomeBuilder,
        size: int,
        fitness_function: FitnessFunction,
        rng: random.Random,
    ) -> "Population":
        """Build and evaluate ``size`` individuals from ``builder``."""
        if size <= 0:
            raise ValueError("Population size must be > 0.")
        return cls(
            [Individual.evaluate(builder.build_genome(index, rng), fitness_function) for index in range(size)]
        )

    def replace(self, individuals: Sequence[Individual]) -> None:
        """Swap in a new generation and refresh the cached statistics."""
        individuals = list(individuals)
        lengths = {len(individual.genome) for individual in individuals}
        if len(lengths) > 1:
            raise ValueError(f"All genomes in a population must have the same length, got {sorted(lengths)}.")

        self._individuals = individuals
        if individuals:
            self._average_fitness = sum(ind.fitness for ind in individuals) / len(individuals)
            self._best = max(individuals, key=lambda ind: ind.fitness)
        else:
            self._average_fitness = 0.0
            self._best = None

    @property
    def individuals(self) -> tuple[Individual, ...]:
        return tuple(self._individuals)

    @property
    def size(self) -> int:
        return len(self._individuals)

    @property
    def genome_length(self) -> int:
        return len(self._individuals[0].genome) if self._individuals else 0

    @property
    def average_fitness(self) -> float:
        return self._average_fitness

    @property
    def best(self) -> Individual | None:
        return self._best

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self._individuals)
