"""Factories/registries for the pluggable genetic operators."""

from __future__ import annotations

from typing import Callable

from configs.loader import ExperimentConfig
from evolution.base import CrossoverOp
from evolution.crossover import MultiPointCrossBreeder, SinglePointCrossBreeder, UniformCrossBreeder
from genetics.fitness import ClustersOf4Fitness, CountTsFitness, FitnessFunction


CrossoverFactory = Callable[[ExperimentConfig], CrossoverOp]
FitnessFactory = Callable[[ExperimentConfig], FitnessFunction]


_CROSSOVER_FACTORIES: dict[str, CrossoverFactory] = {}
_FITNESS_FACTORIES: dict[str, FitnessFactory] = {}


def register_crossover_factory(name: str, factory: CrossoverFactory) -> None:
    _CROSSOVER_FACTORIES[str(name)] = factory


def register_fitness_factory(name: str, factory: FitnessFactory) -> None:
    _FITNESS_FACTORIES[str(name)] = factory


def available_crossover_factories() -> list[str]:
    return sorted(_CROSSOVER_FACTORIES)


def available_fitness_factories() -> list[str]:
    return sorted(_FITNESS_FACTORIES)


def create_crossover(name: str, config: ExperimentConfig) -> CrossoverOp:
    factory = _CROSSOVER_FACTORIES.get(str(name))
    if factory is None:
        available = ", ".join(available_crossover_factories()) or "<none>"
        raise ValueError(f"Unknown crossover factory '{name}'. Available: {available}")
    return factory(config)


def create_fitness(name: str, config: ExperimentConfig) -> FitnessFunction:
    factory = _FITNESS_FACTORIES.get(str(name))
    if factory is None:
        available = ", ".join(available_fitness_factories()) or "<none>"
        raise ValueError(f"Unknown fitness factory '{name}'. Available: {available}")
    return factory(config)


def _uniform_crossover_factory(_config: ExperimentConfig) -> CrossoverOp:
    return UniformCrossBreeder()


def _single_point_crossover_factory(_config: ExperimentConfig) -> CrossoverOp:
    return SinglePointCrossBreeder()


def _multi_point_crossover_factory(config: ExperimentConfig) -> CrossoverOp:
    return MultiPointCrossBreeder(num_cut_points=int(config.cut_points))


def _clusters_of_4_fitness_factory(config: ExperimentConfig) -> FitnessFunction:
    return ClustersOf4Fitness(strand_size=int(config.strand_size))


def _count_ts_fitness_factory(config: ExperimentConfig) -> FitnessFunction:
    return CountTsFitness(strand_size=int(config.strand_size))


def _register_defaults() -> None:
    if _CROSSOVER_FACTORIES:
        return
    register_crossover_factory("uniform", _uniform_crossover_factory)
    register_crossover_factory("single_point", _single_point_crossover_factory)
    register_crossover_factory("multi_point", _multi_point_crossover_factory)

    register_fitness_factory("clusters_of_4", _clusters_of_4_fitness_factory)
    register_fitness_factory("count_ts", _count_ts_fitness_factory)


_register_defaults()
