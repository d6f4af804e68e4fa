from __future__ import annotations

import random

import pytest

from genetics.fitness import ClustersOf4Fitness, CountTsFitness
from genetics.genome import NUCLEOTIDES, Nucleotide, RandomStrandBuilder, as_phenome
from genetics.population import Individual, Population


def test_clusters_of_4_counts_uniform_chunks() -> None:
    fitness = ClustersOf4Fitness(12)

    assert fitness.fitness_of(list("AAAACCCCAGTT")) == 2.0
    assert fitness.fitness_of(list("TTTTTTTTTTTT")) == 3.0
    assert fitness.fitness_of(list("ACGTACGTACGT")) == 0.0
    assert fitness.highest_possible_fitness() == 3.0
    assert fitness.lowest_possible_fitness() == 0.0


def test_count_ts_counts_t_symbols() -> None:
    fitness = CountTsFitness(5)

    assert fitness.fitness_of([Nucleotide.T, Nucleotide.A, Nucleotide.T, "T", "G"]) == 3.0
    assert fitness.highest_possible_fitness() == 5.0


def test_as_phenome_renders_enum_and_plain_symbols() -> None:
    assert as_phenome([Nucleotide.A, Nucleotide.G, "T"]) == "AGT"
    assert Individual.evaluate("ACTG", CountTsFitness(4)).phenome() == "ACTG"


def test_random_strand_builder_is_seeded_and_sized() -> None:
    builder = RandomStrandBuilder(20)

    first = builder.build_genome(0, random.Random(8))
    second = builder.build_genome(0, random.Random(8))

    assert first == second
    assert len(first) == 20
    assert set(first) <= set(NUCLEOTIDES)
    with pytest.raises(ValueError):
        RandomStrandBuilder(4, alphabet=())


def test_population_caches_statistics_on_replace() -> None:
    fitness = CountTsFitness(3)
    population = Population([Individual.evaluate("TTA", fitness), Individual.evaluate("AAA", fitness)])

    assert population.size == 2
    assert population.genome_length == 3
    assert population.average_fitness == 1.0
    assert population.best is not None and population.best.fitness == 2.0

    population.replace([Individual.evaluate("TTT", fitness)])

    assert population.average_fitness == 3.0
    assert population.best.phenome() == "TTT"
    assert population.size == 1


def test_population_rejects_mixed_genome_lengths() -> None:
    fitness = CountTsFitness(3)

    with pytest.raises(ValueError, match="same length"):
        Population([Individual.evaluate("TT", fitness), Individual.evaluate("TTT", fitness)])


def test_population_build_evaluates_every_individual() -> None:
    fitness = CountTsFitness(6)

    population = Population.build(RandomStrandBuilder(6), 7, fitness, random.Random(1))

    assert len(population) == 7
    assert all(ind.fitness == fitness.fitness_of(ind.genome) for ind in population)
    with pytest.raises(ValueError):
        Population.build(RandomStrandBuilder(6), 0, fitness, random.Random(1))
