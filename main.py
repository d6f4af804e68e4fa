"""Wiring from an experiment configuration to algorithms, simulators and batches."""

from __future__ import annotations

import random
from pathlib import Path

from configs.loader import ConfigLoader, ExperimentConfig
from core.batch_runner import BatchResult, BatchRunner
from data.logger import BatchLogger
from engine.component_registry import create_crossover, create_fitness
from engine.simulator import Simulator
from engine.termination import FitnessLimit, GenerationLimit, or_
from evolution.ga import GeneticAlgorithm
from evolution.operators import ElitistReinserter, MaximizeSelector, RandomValueMutator
from genetics.genome import RandomStrandBuilder
from genetics.population import Population


def optimal_fitness(config: ExperimentConfig) -> float:
    """Highest fitness reachable under ``config``; reaching it means convergence."""
    return float(create_fitness(config.fitness, config).highest_possible_fitness())


def build_algorithm(config: ExperimentConfig, rng: random.Random) -> GeneticAlgorithm:
    """Build a genetic algorithm with a random initial population drawn from ``rng``."""
    fitness_function = create_fitness(config.fitness, config)
    initial_population = Population.build(
        RandomStrandBuilder(config.strand_size),
        config.population_size,
        fitness_function,
        rng,
    )
    return GeneticAlgorithm(
        fitness_function=fitness_function,
        selection=MaximizeSelector(config.selection_ratio, config.num_individuals_per_parents),
        crossover=create_crossover(config.crossover, config),
        mutation=RandomValueMutator(config.mutation_rate),
        reinsertion=ElitistReinserter(config.reinsertion_ratio),
        initial_population=initial_population,
    )


def build_simulator(config: ExperimentConfig, rng: random.Random) -> Simulator:
    """Build a simulator that stops at the optimum or at the generation limit."""
    algorithm = build_algorithm(config, rng)
    termination = or_(
        FitnessLimit(algorithm.fitness_function.highest_possible_fitness()),
        GenerationLimit(config.generation_limit),
    )
    return Simulator(algorithm=algorithm, termination=termination, rng=rng)


def run_batches(configs: list[ExperimentConfig], max_workers: int | None = None) -> list[BatchResult]:
    """Run one batch of trials per configuration."""
    runner = BatchRunner(build_simulator, max_workers=max_workers)
    return runner.run_sweep(configs, optimal_fitness)


def main(config_path: str = "configs/example_batch.yaml", db_path: str = "batch_results.db") -> None:
    """Load configs, run their batches, and persist the results."""
    configs = ConfigLoader.load_many(config_path)
    logger = BatchLogger(Path(db_path))
    try:
        for result, config in zip(run_batches(configs), configs):
            logger.log_batch(config, result)
    finally:
        logger.close()


if __name__ == "__main__":
    main()
