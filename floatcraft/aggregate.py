"""Merging of per-worker result lists into one ranked list."""
import heapq
import logging
from typing import Iterable

from floatcraft.constants import SearchMode
from floatcraft.models import SearchResult

logger = logging.getLogger(__name__)


def merge_results(result_lists: Iterable[list[SearchResult]], max_results: int,
                  mode: SearchMode = SearchMode.EXHAUSTIVE) -> list[SearchResult]:
    """k-way merge of lists already sorted by SearchResult.sort_key.

    Index-identical combinations are kept once. In best-price mode only the
    results at the global minimum price survive, since each worker only knew
    the minimum of its own slice.
    """
    merged: list[SearchResult] = []
    seen: set[tuple[int, ...]] = set()

    for result in heapq.merge(*result_lists, key=lambda r: r.sort_key):
        if result.indices in seen:
            logger.warning("Dropping duplicate combination %s (overlapping slices?)",
                           result.indices)
            continue
        if (mode is SearchMode.BEST_PRICE and merged
                and result.total_price > merged[0].total_price):
            break
        seen.add(result.indices)
        merged.append(result)
        if len(merged) >= max_results:
            break

    return merged
