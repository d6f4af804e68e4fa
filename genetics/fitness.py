"""Fitness function contracts and the strand fitness functions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from genetics.genome import Nucleotide


class FitnessFunction(ABC):
    """Maps a genome to a scalar fitness where higher is better."""

    @abstractmethod
    def fitness_of(self, genome: Sequence[Any]) -> float:
        """Return the fitness of ``genome``.

        Invariants:
            - Must be deterministic for equal genomes.
            - Must lie within ``[lowest_possible_fitness, highest_possible_fitness]``.
        """

    @abstractmethod
    def highest_possible_fitness(self) -> float:
        """Return the optimum; reaching it means a run has converged."""

    @abstractmethod
    def lowest_possible_fitness(self) -> float:
        """Return the worst fitness any genome can have."""


class ClustersOf4Fitness(FitnessFunction):
    """Counts consecutive 4-locus chunks made of a single repeated symbol."""

    chunk_size = 4

    def __init__(self, strand_size: int) -> None:
        self.strand_size = int(strand_size)

    def fitness_of(self, genome: Sequence[Any]) -> float:
        clusters = 0
        for start in range(0, len(genome), self.chunk_size):
            chunk = genome[start:start + self.chunk_size]
            if all(symbol == chunk[0] for symbol in chunk):
                clusters += 1
        return float(clusters)

    def highest_possible_fitness(self) -> float:
        return float(self.strand_size // self.chunk_size)

    def lowest_possible_fitness(self) -> float:
        return 0.0


class CountTsFitness(FitnessFunction):
    """Counts ``T`` nucleotides in the strand."""

    def __init__(self, strand_size: int) -> None:
        self.strand_size = int(strand_size)

    def fitness_of(self, genome: Sequence[Any]) -> float:
        return float(sum(1 for symbol in genome if symbol == Nucleotide.T))

    def highest_possible_fitness(self) -> float:
        return float(self.strand_size)

    def lowest_possible_fitness(self) -> float:
        return 0.0
