"""Generational genetic algorithm composed from pluggable operators."""

from __future__ import annotations

import logging
import random
import time
from datetime import datetime

from evolution.base import (
    Algorithm,
    AlgorithmError,
    BestSolution,
    CrossoverOp,
    GenerationOutcome,
    MutationOp,
    ReinsertionOp,
    SelectionOp,
)
from genetics.fitness import FitnessFunction
from genetics.population import Individual, Population

LOGGER = logging.getLogger(__name__)


class GeneticAlgorithm(Algorithm):
    """Selection, crossover, mutation, evaluation and reinsertion in one generation."""

    def __init__(
        self,
        fitness_function: FitnessFunction,
        selection: SelectionOp,
        crossover: CrossoverOp,
        mutation: MutationOp,
        reinsertion: ReinsertionOp,
        initial_population: Population,
    ) -> None:
        self.fitness_function = fitness_function
        self.selection = selection
        self.crossover = crossover
        self.mutation = mutation
        self.reinsertion = reinsertion

        self._initial_individuals = initial_population.individuals
        self.population = Population(self._initial_individuals)
        self.best_solution: BestSolution | None = None
        self._processing_time = 0.0

    def advance(self, iteration: int, rng: random.Random) -> GenerationOutcome:
        started = time.perf_counter()
        if self.population.size == 0:
            raise AlgorithmError("Cannot advance an empty population.")

        offspring: list[Individual] = []
        for parents in self.selection.select_from(self.population.individuals, rng):
            children = self.crossover.crossover([parent.genome for parent in parents], rng)
            for child in children:
                mutated = self.mutation.mutate(child, rng)
                offspring.append(Individual.evaluate(mutated, self.fitness_function))

        next_individuals = self.reinsertion.combine(offspring, self.population.individuals, rng)
        if len(next_individuals) != self.population.size:
            raise AlgorithmError(
                f"Reinsertion must preserve population size {self.population.size}, "
                f"got {len(next_individuals)}."
            )
        self.population.replace(next_individuals)

        best = self.population.best
        if best is None:
            raise AlgorithmError("Reinsertion produced an empty population.")
        if self.best_solution is None or best.fitness > self.best_solution.solution.fitness:
            self.best_solution = BestSolution(found_at=datetime.now(), generation=iteration, solution=best)
            LOGGER.debug("Generation %d: new best fitness %s", iteration, best.fitness)

        self._processing_time = time.perf_counter() - started
        return GenerationOutcome(
            generation=iteration,
            population=self.population.individuals,
            average_fitness=self.population.average_fitness,
            best_solution=self.best_solution,
        )

    def processing_time(self) -> float:
        return self._processing_time

    def reset(self) -> None:
        self.population = Population(self._initial_individuals)
        self.best_solution = None
        self._processing_time = 0.0
