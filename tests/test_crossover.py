"""Tests for the discrete crossover operators."""

from __future__ import annotations

import random

import pytest

from evolution.crossover import (
    CrossoverConfigurationError,
    MultiPointCrossBreeder,
    SinglePointCrossBreeder,
    UniformCrossBreeder,
    multi_point_crossover,
    random_n_cut_points,
)


def _tagged_parents(num_parents: int, length: int) -> list[list[tuple[int, int]]]:
    """Parents whose loci record (parent index, locus) so every value's origin is known."""
    return [[(parent, locus) for locus in range(length)] for parent in range(num_parents)]


def _origins(child: list[tuple[int, int]]) -> list[int]:
    return [parent for parent, _locus in child]


def test_multi_point_children_count_length_and_loci() -> None:
    rng = random.Random(7)
    for num_parents in range(2, 5):
        for length in range(2, 8):
            for cut_points in range(1, length):
                parents = _tagged_parents(num_parents, length)
                children = MultiPointCrossBreeder(cut_points).crossover(parents, rng)

                assert len(children) == num_parents
                for child in children:
                    assert len(child) == length
                    assert all(locus == position for position, (_parent, locus) in enumerate(child))
                    assert all(0 <= parent < num_parents for parent in _origins(child))


def test_multi_point_adjacent_segments_come_from_different_parents() -> None:
    rng = random.Random(11)
    for num_parents in (2, 3, 5):
        for cut_points in (1, 3, 9):
            parents = _tagged_parents(num_parents, 10)
            for child in multi_point_crossover(parents, cut_points, rng):
                origins = _origins(child)
                switches = sum(1 for a, b in zip(origins, origins[1:]) if a != b)
                assert switches == cut_points


def test_single_point_is_multi_point_with_one_cut() -> None:
    parents = _tagged_parents(3, 12)

    single = SinglePointCrossBreeder().crossover(parents, random.Random(5))
    multi = MultiPointCrossBreeder(1).crossover(parents, random.Random(5))

    assert single == multi
    for child in single:
        origins = _origins(child)
        assert sum(1 for a, b in zip(origins, origins[1:]) if a != b) == 1


def test_multi_point_rejects_single_parent() -> None:
    with pytest.raises(CrossoverConfigurationError, match="at least 2 parents"):
        MultiPointCrossBreeder(2).crossover([["A", "C", "T", "G"]], random.Random(0))

    with pytest.raises(CrossoverConfigurationError, match="at least 2 parents"):
        SinglePointCrossBreeder().crossover([["A", "C"]], random.Random(0))


def test_multi_point_rejects_cut_points_out_of_range() -> None:
    parents = _tagged_parents(2, 4)

    with pytest.raises(CrossoverConfigurationError, match="cut points"):
        MultiPointCrossBreeder(4).crossover(parents, random.Random(0))
    with pytest.raises(CrossoverConfigurationError):
        MultiPointCrossBreeder(0)
    with pytest.raises(CrossoverConfigurationError):
        random_n_cut_points(random.Random(0), 1, 1)


def test_parents_must_share_genome_length() -> None:
    parents = [["A", "C", "T"], ["A", "C"]]

    with pytest.raises(CrossoverConfigurationError, match="same genome length"):
        UniformCrossBreeder().crossover(parents, random.Random(0))
    with pytest.raises(CrossoverConfigurationError, match="same genome length"):
        SinglePointCrossBreeder().crossover(parents, random.Random(0))
    with pytest.raises(CrossoverConfigurationError, match="at least one parent"):
        UniformCrossBreeder().crossover([], random.Random(0))


def test_cut_points_are_distinct_sorted_and_inside_genome() -> None:
    rng = random.Random(3)
    for _ in range(50):
        points = random_n_cut_points(rng, 4, 6)
        assert points == sorted(set(points))
        assert all(0 < point < 6 for point in points)


def test_uniform_empty_genomes_give_empty_children() -> None:
    children = UniformCrossBreeder().crossover([[], [], []], random.Random(1))

    assert children == [[], [], []]


def test_uniform_copies_each_locus_from_some_parent() -> None:
    rng = random.Random(2)
    for num_parents in range(1, 5):
        for length in range(0, 9):
            parents = _tagged_parents(num_parents, length)
            children = UniformCrossBreeder().crossover(parents, rng)

            assert len(children) == num_parents
            for child in children:
                assert len(child) == length
                assert all(locus == position for position, (_parent, locus) in enumerate(child))


def test_uniform_draws_parents_evenly() -> None:
    parents = [["A"] * 2000, ["T"] * 2000]

    children = UniformCrossBreeder().crossover(parents, random.Random(13))

    for child in children:
        share = child.count("A") / len(child)
        assert 0.4 < share < 0.6


def test_crossover_accepts_tuple_genomes() -> None:
    parents = [tuple("AAAAAAAA"), tuple("TTTTTTTT")]

    children = MultiPointCrossBreeder(3).crossover(parents, random.Random(4))

    assert all(set(child) <= {"A", "T"} and len(child) == 8 for child in children)
