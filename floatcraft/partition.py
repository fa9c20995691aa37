"""Work partitioning over the lexicographic combination index space.

Every K-subset of range(N) has a rank in [0, C(N, K)) under lexicographic
order. Ranks are computed through the combinatorial number system, so a
worker can jump straight to its first combination.
"""
from math import comb
from typing import NamedTuple, Sequence

from floatcraft.errors import InfeasibleJob, InvalidJob
from floatcraft.models import SearchJob


class RankSlice(NamedTuple):
    """Half-open rank range [start, stop)."""
    start: int
    stop: int

    @property
    def size(self) -> int:
        return max(self.stop - self.start, 0)

    @property
    def empty(self) -> bool:
        return self.stop <= self.start


def combination_count(n: int, k: int) -> int:
    if k < 0 or n < 0 or k > n:
        return 0
    return comb(n, k)


def rank_combination(indices: Sequence[int], n: int) -> int:
    """Lexicographic rank of a sorted index tuple among all C(n, k) subsets."""
    k = len(indices)
    # Mirror each index (c -> n-1-c): lexicographic order becomes the reverse
    # of the combinatorial number system order of the mirrored set.
    total = comb(n, k)
    code = 0
    for j, c in enumerate(indices):
        code += comb(n - 1 - c, k - j)
    return total - 1 - code


def unrank_combination(rank: int, n: int, k: int) -> tuple[int, ...]:
    """Inverse of rank_combination."""
    total = combination_count(n, k)
    if not 0 <= rank < total:
        raise ValueError(f"rank {rank} outside [0, {total})")
    code = total - 1 - rank
    out: list[int] = []
    d = n - 1
    for j in range(k):
        remaining = k - j
        while comb(d, remaining) > code:
            d -= 1
        code -= comb(d, remaining)
        out.append(n - 1 - d)
        d -= 1
    return tuple(out)


def slice_bounds(total: int, thread_id: int, thread_count: int) -> RankSlice:
    """Contiguous share of [0, total) for one worker.

    Shares differ by at most one rank; together they cover the space once.
    Surplus workers (thread_count > total) get empty slices.
    """
    if thread_count < 1:
        raise InvalidJob(f"thread_count must be at least 1, got {thread_count}")
    if not 0 <= thread_id < thread_count:
        raise InvalidJob(f"thread_id {thread_id} outside [0, {thread_count})")
    return RankSlice(
        thread_id * total // thread_count,
        (thread_id + 1) * total // thread_count,
    )


def partition(job: SearchJob) -> RankSlice:
    n, k = len(job.pool), job.combination_size
    if k > n:
        raise InfeasibleJob(f"Pool has {n} items, a craft needs {k}")
    return slice_bounds(combination_count(n, k), job.thread_id, job.thread_count)
