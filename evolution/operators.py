"""Selection, mutation and reinsertion operators used by the genetic algorithm."""

from __future__ import annotations

import random
from typing import Any, Sequence

from evolution.base import MutationOp, ReinsertionOp, SelectionOp
from genetics.genome import NUCLEOTIDES, Genome, random_symbol
from genetics.population import Individual


class MaximizeSelector(SelectionOp):
    """Truncation selection favouring the fittest individuals.

    Ranks the population by fitness and walks the ranking cyclically, cutting
    it into ``round(size * selection_ratio)`` groups of
    ``num_individuals_per_parents`` individuals.
    """

    def __init__(self, selection_ratio: float, num_individuals_per_parents: int) -> None:
        if selection_ratio <= 0.0:
            raise ValueError("selection_ratio must be > 0")
        if num_individuals_per_parents <= 0:
            raise ValueError("num_individuals_per_parents must be > 0")
        self.selection_ratio = float(selection_ratio)
        self.num_individuals_per_parents = int(num_individuals_per_parents)

    def select_from(self, individuals: Sequence[Individual], rng: random.Random) -> list[list[Individual]]:
        if not individuals:
            return []
        ranked = sorted(individuals, key=lambda ind: ind.fitness, reverse=True)
        num_groups = max(1, int(len(ranked) * self.selection_ratio + 0.5))

        groups: list[list[Individual]] = []
        cursor = 0
        for _ in range(num_groups):
            group: list[Individual] = []
            for _ in range(self.num_individuals_per_parents):
                group.append(ranked[cursor])
                cursor = (cursor + 1) % len(ranked)
            groups.append(group)
        return groups


class RandomValueMutator(MutationOp):
    """Replaces each locus with a random symbol with probability ``mutation_rate``."""

    def __init__(self, mutation_rate: float, alphabet: Sequence[Any] = NUCLEOTIDES) -> None:
        if not 0.0 <= mutation_rate <= 1.0:
            raise ValueError("mutation_rate must be in [0.0, 1.0]")
        self.mutation_rate = float(mutation_rate)
        self.alphabet = tuple(alphabet)

    def mutate(self, genome: Genome, rng: random.Random) -> Genome:
        return [
            random_symbol(rng, self.alphabet) if rng.random() < self.mutation_rate else symbol
            for symbol in genome
        ]


class ElitistReinserter(ReinsertionOp):
    """Keeps the population size while preserving the best known individuals.

    ``replace_ratio`` of the population is taken from the fittest offspring;
    the remaining places go to the fittest individuals of the old population.
    """

    def __init__(self, replace_ratio: float) -> None:
        if not 0.0 < replace_ratio <= 1.0:
            raise ValueError("replace_ratio must be in (0.0, 1.0]")
        self.replace_ratio = float(replace_ratio)

    def combine(
        self,
        offspring: Sequence[Individual],
        population: Sequence[Individual],
        rng: random.Random,
    ) -> list[Individual]:
        target_size = len(population)
        num_offspring = min(len(offspring), int(target_size * self.replace_ratio + 0.5))

        ranked_offspring = sorted(offspring, key=lambda ind: ind.fitness, reverse=True)
        ranked_population = sorted(population, key=lambda ind: ind.fitness, reverse=True)

        next_population = ranked_offspring[:num_offspring]
        next_population.extend(ranked_population[: target_size - len(next_population)])
        return next_population
