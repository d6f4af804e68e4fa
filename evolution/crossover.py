"""Discrete recombination operators for fixed-length genomes.

Every operator here combines genomes by exchanging symbol values between the
parents, so it works for any discrete alphabet:

* ``UniformCrossBreeder`` picks the parent of each locus independently.
* ``SinglePointCrossBreeder`` splits the genome once and joins two slices.
* ``MultiPointCrossBreeder`` splits the genome at ``k`` random cut points.

All operators create exactly as many children as there are parents, and each
child has the parents' common genome length.
"""

from __future__ import annotations

import random
from typing import Any, Sequence

from evolution.base import CrossoverOp
from genetics.genome import Genome


class CrossoverConfigurationError(ValueError):
    """Raised when parents or cut points cannot satisfy an operator's contract."""


def _genome_length(parents: Sequence[Sequence[Any]]) -> int:
    if not parents:
        raise CrossoverConfigurationError("Crossover requires at least one parent.")
    lengths = {len(parent) for parent in parents}
    if len(lengths) != 1:
        raise CrossoverConfigurationError(
            f"All parents must have the same genome length, got {sorted(lengths)}."
        )
    return lengths.pop()


def random_n_cut_points(rng: random.Random, num_cut_points: int, length: int) -> list[int]:
    """Draw ``num_cut_points`` distinct loci strictly inside ``(0, length)``, ascending."""
    if not 0 < num_cut_points < length:
        raise CrossoverConfigurationError(
            f"Number of cut points must be in [1, {length - 1}] for genome length {length}, "
            f"got {num_cut_points}."
        )
    return sorted(rng.sample(range(1, length), num_cut_points))


def multi_point_crossover(
    parents: Sequence[Sequence[Any]],
    num_cut_points: int,
    rng: random.Random,
) -> list[Genome]:
    """Breed one child per parent by splicing segments between random cut points.

    Adjacent segments of a child always come from different parents. With a
    single parent that rule cannot hold, so it is rejected up front.
    """
    genome_length = _genome_length(parents)
    num_parents = len(parents)
    if num_parents < 2:
        raise CrossoverConfigurationError(
            "Multi-point crossover needs at least 2 parents so adjacent segments "
            f"can come from different parents, got {num_parents}."
        )

    offspring: list[Genome] = []
    while len(offspring) < num_parents:
        boundaries = random_n_cut_points(rng, num_cut_points, genome_length)
        boundaries.append(genome_length)

        genome: Genome = []
        start = 0
        previous: int | None = None
        for end in boundaries:
            if previous is None:
                index = rng.randrange(num_parents)
            else:
                # uniform over every parent except the previous one
                index = rng.randrange(num_parents - 1)
                if index >= previous:
                    index += 1
            genome.extend(parents[index][start:end])
            previous = index
            start = end
        offspring.append(genome)
    return offspring


class UniformCrossBreeder(CrossoverOp):
    """Copies each locus from a parent chosen uniformly at random."""

    name = "Uniform-Cross-Breeder"

    def crossover(self, parents: Sequence[Sequence[Any]], rng: random.Random) -> list[Genome]:
        genome_length = _genome_length(parents)
        num_parents = len(parents)
        offspring: list[Genome] = []
        while len(offspring) < num_parents:
            offspring.append([parents[rng.randrange(num_parents)][locus] for locus in range(genome_length)])
        return offspring

    def __repr__(self) -> str:
        return "UniformCrossBreeder()"


class MultiPointCrossBreeder(CrossoverOp):
    """Splits the genomes at ``num_cut_points`` random loci and recombines the slices."""

    name = "Multi-Point-Cross-Breeder"

    def __init__(self, num_cut_points: int) -> None:
        if num_cut_points <= 0:
            raise CrossoverConfigurationError(f"num_cut_points must be > 0, got {num_cut_points}.")
        self.num_cut_points = int(num_cut_points)

    def crossover(self, parents: Sequence[Sequence[Any]], rng: random.Random) -> list[Genome]:
        return multi_point_crossover(parents, self.num_cut_points, rng)

    def __repr__(self) -> str:
        return f"MultiPointCrossBreeder(num_cut_points={self.num_cut_points})"


class SinglePointCrossBreeder(MultiPointCrossBreeder):
    """Multi-point crossover with exactly one cut point."""

    name = "Single-Point-Cross-Breeder"

    def __init__(self) -> None:
        super().__init__(num_cut_points=1)

    def __repr__(self) -> str:
        return "SinglePointCrossBreeder()"
