"""Genome representation and random genome builders."""

from __future__ import annotations

import enum
import random
from abc import ABC, abstractmethod
from typing import Any, Sequence


class Nucleotide(str, enum.Enum):
    """Default four-symbol alphabet for strand genomes."""

    A = "A"
    C = "C"
    T = "T"
    G = "G"


NUCLEOTIDES: tuple[Nucleotide, ...] = tuple(Nucleotide)

# Ordered fixed-length sequence of symbols; the element type is generic.
Genome = list[Any]


def as_phenome(genome: Sequence[Any]) -> str:
    """Render a genome as a human-readable string, one character per locus."""
    return "".join(str(getattr(symbol, "value", symbol)) for symbol in genome)


def random_symbol(rng: random.Random, alphabet: Sequence[Any] = NUCLEOTIDES) -> Any:
    """Sample one symbol uniformly from ``alphabet``."""
    return alphabet[rng.randrange(len(alphabet))]


class GenomeBuilder(ABC):
    """Creates the genomes of an initial population.

    Implementations must draw all randomness from the ``rng`` handle they are
    given so that a population can be rebuilt from a seed.
    """

    @abstractmethod
    def build_genome(self, index: int, rng: random.Random) -> Genome:
        """Build the genome of the ``index``-th individual.

        Args:
            index (int): Position of the individual in the population.
            rng (random.Random): Random source for this population.

        Returns:
            Genome: A newly created genome.

        Invariants:
            - Every genome built by one builder has the same length.
        """


class RandomStrandBuilder(GenomeBuilder):
    """Builds strands of uniformly random symbols."""

    def __init__(self, strand_size: int, alphabet: Sequence[Any] = NUCLEOTIDES) -> None:
        if strand_size < 0:
            raise ValueError("strand_size must be >= 0")
        if not alphabet:
            raise ValueError("alphabet must be non-empty")
        self.strand_size = int(strand_size)
        self.alphabet = tuple(alphabet)

    def build_genome(self, index: int, rng: random.Random) -> Genome:
        return [random_symbol(rng, self.alphabet) for _ in range(self.strand_size)]
