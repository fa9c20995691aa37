"""Shared fixtures for floatcraft unit tests.

Pools are built from exact decimal literals so expected means and boundary
cases can be computed by hand. A naive itertools-based search is provided as
the reference every engine result is checked against.
"""
from decimal import Decimal
from itertools import combinations
from typing import Callable

import pytest

from floatcraft import InputSkin, Settings, SearchRequest


@pytest.fixture(scope="session")
def settings() -> Settings:
    return Settings(worker_count=2, max_results=10_000, cancel_check_interval=64)


@pytest.fixture(scope="session")
def ramp_pool() -> list[InputSkin]:
    """12 items, wears 0.00..0.55 step 0.05, prices 1..12 rising with wear."""
    return [
        InputSkin(wear=i * 5 / 100, price=float(i + 1), name=f"Item {i}")
        for i in range(12)
    ]


@pytest.fixture(scope="session")
def ramp_request(ramp_pool: list[InputSkin]) -> SearchRequest:
    return SearchRequest(
        target=Decimal("0.25"),
        tolerance=Decimal("0.02"),
        pool=ramp_pool,
        combination_size=10,
    )


def _naive(request: SearchRequest) -> list[tuple[int, ...]]:
    """Every feasible index tuple over the wear-sorted pool, exact arithmetic."""
    k = request.combination_size
    wears = [Decimal(str(s.wear)) for s in request.pool]
    found = []
    for combo in combinations(range(len(wears)), k):
        mean = sum(wears[i] for i in combo) / k
        if abs(mean - request.target) > request.tolerance:
            continue
        if request.outcomes and not any(
            Decimal(str(o.wear_range.min)) <= mean <= Decimal(str(o.wear_range.max))
            for o in request.outcomes
        ):
            continue
        found.append(combo)
    return found


@pytest.fixture(scope="session")
def naive_search() -> Callable[[SearchRequest], list[tuple[int, ...]]]:
    return _naive
