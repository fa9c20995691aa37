"""Tests for the partitioner (partition.py).

Ranks are checked against itertools.combinations, which yields K-subsets in
the same lexicographic order the engine ranks them in.
"""
from itertools import combinations

import pytest

from floatcraft import (
    InfeasibleJob, InputSkin, InvalidJob, SearchJob,
    combination_count, partition, rank_combination, slice_bounds, unrank_combination,
)


class TestRanking:
    @pytest.mark.parametrize("n,k", [(5, 1), (6, 3), (8, 4), (12, 10), (7, 7)])
    def test_rank_matches_lexicographic_position(self, n: int, k: int) -> None:
        for expected, combo in enumerate(combinations(range(n), k)):
            assert rank_combination(combo, n) == expected

    @pytest.mark.parametrize("n,k", [(5, 1), (6, 3), (8, 4), (12, 10), (7, 7)])
    def test_unrank_matches_lexicographic_position(self, n: int, k: int) -> None:
        for rank, combo in enumerate(combinations(range(n), k)):
            assert unrank_combination(rank, n, k) == combo

    def test_unrank_large_space_without_enumeration(self) -> None:
        n, k = 200, 10
        last = combination_count(n, k) - 1
        assert unrank_combination(0, n, k) == tuple(range(10))
        assert unrank_combination(last, n, k) == tuple(range(190, 200))

    def test_unrank_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            unrank_combination(combination_count(6, 3), 6, 3)

    def test_combination_count_edge_cases(self) -> None:
        assert combination_count(12, 10) == 66
        assert combination_count(3, 5) == 0
        assert combination_count(4, 0) == 1


class TestSliceBounds:
    @pytest.mark.parametrize("n,k", [(7, 3), (12, 10), (5, 5)])
    def test_slices_disjoint_and_exhaustive(self, n: int, k: int) -> None:
        total = combination_count(n, k)
        for thread_count in range(1, total + 6):
            covered: list[int] = []
            prev_stop = 0
            for tid in range(thread_count):
                s = slice_bounds(total, tid, thread_count)
                assert s.start == prev_stop  # contiguous, no gap or overlap
                assert s.stop >= s.start
                covered.extend(range(s.start, s.stop))
                prev_stop = s.stop
            assert covered == list(range(total))

    def test_slice_sizes_balanced(self) -> None:
        sizes = [slice_bounds(66, tid, 4).size for tid in range(4)]
        assert sum(sizes) == 66
        assert max(sizes) - min(sizes) <= 1

    def test_surplus_workers_get_empty_slices(self) -> None:
        slices = [slice_bounds(3, tid, 8) for tid in range(8)]
        assert sum(s.size for s in slices) == 3
        assert sum(1 for s in slices if s.empty) == 5

    def test_bad_coordinates_rejected(self) -> None:
        with pytest.raises(InvalidJob):
            slice_bounds(10, 3, 3)
        with pytest.raises(InvalidJob):
            slice_bounds(10, 0, 0)


class TestPartition:
    def test_partition_uses_job_coordinates(self) -> None:
        pool = [InputSkin(wear=i / 20, price=1.0) for i in range(12)]
        jobs = [
            SearchJob(target=0.25, tolerance=0.02, pool=pool, max_results=10,
                      thread_id=tid, thread_count=4)
            for tid in range(4)
        ]
        slices = [partition(j) for j in jobs]
        assert slices[0].start == 0
        assert slices[-1].stop == 66
        for a, b in zip(slices, slices[1:]):
            assert a.stop == b.start

    def test_size_above_pool_is_infeasible(self) -> None:
        pool = [InputSkin(wear=i / 20, price=1.0) for i in range(12)]
        job = SearchJob.model_construct(
            target=0.25, tolerance=0.02, pool=tuple(pool), combination_size=13,
            max_results=10, thread_id=0, thread_count=1)
        with pytest.raises(InfeasibleJob):
            partition(job)
