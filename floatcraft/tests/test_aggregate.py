"""Tests for merge_results (aggregate.py)."""
from decimal import Decimal

from floatcraft import InputSkin, SearchMode, SearchResult, merge_results

_SKIN = InputSkin(wear=0.1, price=1.0)


def _result(indices: tuple[int, ...], price: str, deviation: str = "0") -> SearchResult:
    return SearchResult(
        indices=indices,
        skins=tuple(_SKIN for _ in indices),
        mean_wear=Decimal("0.1"),
        total_price=Decimal(price),
        deviation=Decimal(deviation),
    )


class TestMergeResults:
    def test_k_way_merge_keeps_global_order(self) -> None:
        a = [_result((0, 1), "1"), _result((0, 5), "3"), _result((1, 2), "5")]
        b = [_result((2, 3), "2"), _result((3, 4), "3", "0.01")]
        c: list[SearchResult] = []
        merged = merge_results([a, b, c], max_results=10)
        assert [r.indices for r in merged] == [(0, 1), (2, 3), (0, 5), (3, 4), (1, 2)]

    def test_index_tie_break_across_workers(self) -> None:
        a = [_result((1, 2), "1")]
        b = [_result((0, 9), "1")]
        merged = merge_results([a, b], max_results=10)
        assert [r.indices for r in merged] == [(0, 9), (1, 2)]

    def test_truncates_to_max_results(self) -> None:
        a = [_result((0, i), str(i)) for i in range(1, 6)]
        b = [_result((1, i), str(i)) for i in range(2, 7)]
        merged = merge_results([a, b], max_results=3)
        assert len(merged) == 3
        assert [r.total_price for r in merged] == [Decimal(1), Decimal(2), Decimal(2)]

    def test_duplicates_dropped(self, caplog) -> None:
        a = [_result((0, 1), "1"), _result((2, 3), "4")]
        b = [_result((0, 1), "1")]
        merged = merge_results([a, b], max_results=10)
        assert [r.indices for r in merged] == [(0, 1), (2, 3)]
        assert "duplicate" in caplog.text

    def test_best_price_keeps_only_global_minimum(self) -> None:
        a = [_result((0, 1), "4"), _result((0, 2), "4", "0.01")]
        b = [_result((1, 2), "3", "0.02")]
        c = [_result((2, 3), "3", "0.01")]
        merged = merge_results([a, b, c], max_results=10, mode=SearchMode.BEST_PRICE)
        assert [r.indices for r in merged] == [(2, 3), (1, 2)]

    def test_empty_inputs(self) -> None:
        assert merge_results([[], []], max_results=5) == []
