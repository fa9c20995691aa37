"""Combination search over one worker's slice: exhaustive and best-price.

Wear and price are converted once to scaled integers so every comparison is
exact: a combination of K items with wear sum S is feasible iff
|S - K*target| <= K*tolerance, both boundaries included.
"""
import bisect
import logging
import threading
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Iterable, NamedTuple, Optional, Union

from floatcraft.config import Settings, get_settings
from floatcraft.constants import SearchMode
from floatcraft.errors import InfeasibleJob, InvalidJob
from floatcraft.models import FloatRange, Outcome, SearchJob, SearchRequest, SearchResult
from floatcraft.partition import RankSlice, partition, unrank_combination

logger = logging.getLogger(__name__)


class CancelToken:
    """Cooperative cancellation flag shared by all workers of one search."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class SliceResult(NamedTuple):
    thread_id: int
    results: list[SearchResult]
    checked: int
    cancelled: bool


class _Cancelled(Exception):
    pass


def to_units(value: Union[float, Decimal], digits: int) -> int:
    """Fixed-point integer with `digits` decimal places (banker's rounding)."""
    d = value if isinstance(value, Decimal) else Decimal(str(value))
    return int(d.scaleb(digits).to_integral_value(rounding=ROUND_HALF_EVEN))


def decimal_places(values: Iterable[Union[float, Decimal]], floor: int = 0) -> int:
    """Smallest number of decimal places that represents every value exactly,
    never below `floor`. Floats are read through str(), like to_units."""
    places = floor
    for v in values:
        exponent = (v if isinstance(v, Decimal) else Decimal(str(v))).as_tuple().exponent
        if isinstance(exponent, int) and -exponent > places:
            places = -exponent
    return places


# ---------------------------------------------------------------------------
# Outcome reachability
# ---------------------------------------------------------------------------

def achievable_span(request: SearchRequest) -> FloatRange:
    """Range of means any K-subset of the (wear-sorted) pool can reach."""
    k = request.combination_size
    if k > len(request.pool):
        raise InfeasibleJob(f"Pool has {len(request.pool)} items, a craft needs {k}")
    wears = [Decimal(str(s.wear)) for s in request.pool]
    lo = sum(wears[:k]) / k
    hi = sum(wears[-k:]) / k
    return FloatRange(min=float(lo), max=float(hi))


def target_window(request: SearchRequest) -> FloatRange:
    return FloatRange(min=float(request.target - request.tolerance),
                      max=float(request.target + request.tolerance))


def reachable_outcomes(request: SearchRequest) -> tuple[Outcome, ...]:
    """Outcomes passing the text filter whose wear range both the pool's
    achievable span and the target window overlap."""
    candidates = [o for o in request.outcomes if o.matches(request.filter)]
    if not candidates:
        return ()
    span = achievable_span(request)
    window = target_window(request)
    return tuple(
        o for o in candidates
        if o.wear_range.is_overlapped(span) and o.wear_range.is_overlapped(window)
    )


# ---------------------------------------------------------------------------
# Searcher
# ---------------------------------------------------------------------------

class CraftSearcher:
    """Enumerates one slice of K-subsets in lexicographic order, pruning on
    wear bounds and price, keeping the best results per the ranking order."""

    def __init__(self, job: SearchJob, cancel: Optional[CancelToken] = None,
                 settings: Optional[Settings] = None):
        self.job = job
        self.cancel = cancel or CancelToken()
        self.settings = settings or get_settings()
        self._checked = 0

        k = job.combination_size
        self.outcomes = reachable_outcomes(job)

        # Scales wide enough that no input is rounded
        wd = self.wear_digits = decimal_places(
            [s.wear for s in job.pool] + [job.target, job.tolerance]
            + [b for o in self.outcomes for b in (o.wear_range.min, o.wear_range.max)],
            floor=self.settings.wear_digits)
        pdg = self.price_digits = decimal_places(
            (s.price for s in job.pool), floor=self.settings.price_digits)
        if wd > self.settings.wear_digits or pdg > self.settings.price_digits:
            logger.debug("Worker %d: widened fixed-point scale to %d wear / %d price digits",
                         job.thread_id, wd, pdg)

        self._wears = [to_units(s.wear, wd) for s in job.pool]
        self._prices = [to_units(s.price, pdg) for s in job.pool]
        self._target_sum = k * to_units(job.target, wd)
        self._slack = k * to_units(job.tolerance, wd)

        self._outcome_bounds = [
            (k * to_units(o.wear_range.min, wd), k * to_units(o.wear_range.max, wd))
            for o in self.outcomes
        ]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> SliceResult:
        job = self.job
        rank_slice = partition(job)
        if rank_slice.empty:
            logger.debug("Worker %d/%d has an empty slice",
                         job.thread_id, job.thread_count)
            return SliceResult(job.thread_id, [], 0, False)
        if job.outcomes and not self.outcomes:
            logger.debug("Worker %d: no outcome reachable, skipping slice", job.thread_id)
            return SliceResult(job.thread_id, [], 0, False)

        lo_sum, hi_sum = self._sum_bounds()
        if lo_sum > hi_sum:
            return SliceResult(job.thread_id, [], 0, False)

        logger.debug("Worker %d/%d searching ranks [%d, %d)",
                     job.thread_id, job.thread_count, rank_slice.start, rank_slice.stop)
        kept: list[tuple] = []
        self._checked = 0
        cancelled = False
        try:
            self._search(rank_slice, lo_sum, hi_sum, kept)
        except _Cancelled:
            cancelled = True
            logger.warning("Worker %d cancelled after %d combinations; returning %d partial results",
                           job.thread_id, self._checked, len(kept))

        results = sorted((self._make_result(e) for e in kept), key=lambda r: r.sort_key)
        return SliceResult(job.thread_id, results, self._checked, cancelled)

    # ------------------------------------------------------------------
    # Bounds
    # ------------------------------------------------------------------

    def _sum_bounds(self) -> tuple[int, int]:
        """Admissible wear-sum interval: tolerance window, narrowed to the
        union hull of reachable outcome ranges."""
        lo = self._target_sum - self._slack
        hi = self._target_sum + self._slack
        if self._outcome_bounds:
            lo = max(lo, min(b[0] for b in self._outcome_bounds))
            hi = min(hi, max(b[1] for b in self._outcome_bounds))
        return lo, hi

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def _search(self, rank_slice: RankSlice, lo_sum: int, hi_sum: int,
                kept: list[tuple]) -> None:
        job = self.job
        n, k = len(job.pool), job.combination_size
        wears, prices = self._wears, self._prices
        first = unrank_combination(rank_slice.start, n, k)
        last = unrank_combination(rank_slice.stop - 1, n, k)
        limit = job.max_results
        interval = self.settings.cancel_check_interval
        cancel = self.cancel
        target_sum = self._target_sum
        outcome_bounds = self._outcome_bounds

        if job.mode is SearchMode.EXHAUSTIVE:
            best_price_mode = False
        elif job.mode is SearchMode.BEST_PRICE:
            best_price_mode = True
        else:
            raise InvalidJob(f"Unsupported search mode {job.mode!r}")

        prefix = [0]
        for w in wears:
            prefix.append(prefix[-1] + w)

        chosen = [0] * k

        def price_bound() -> Optional[int]:
            if best_price_mode:
                return kept[0][0] if kept else None
            return kept[-1][0] if len(kept) >= limit else None

        def record(wear_sum: int, price: int) -> None:
            outcome_idx = None
            if outcome_bounds:
                outcome_idx = next(
                    (j for j, (lo, hi) in enumerate(outcome_bounds) if lo <= wear_sum <= hi),
                    None)
                if outcome_idx is None:
                    return
            if best_price_mode and kept and price < kept[0][0]:
                kept.clear()
            entry = (price, abs(wear_sum - target_sum), tuple(chosen), wear_sum, outcome_idx)
            bisect.insort(kept, entry)
            if len(kept) > limit:
                kept.pop()

        def descend(depth: int, start: int, wear_sum: int, price_sum: int,
                    tight_lo: bool, tight_hi: bool) -> None:
            r = k - depth - 1          # items still needed after this one
            top = n - r - 1
            lo_i = max(start, first[depth]) if tight_lo else start
            hi_i = min(top, last[depth]) if tight_hi else top
            max_rest = prefix[n] - prefix[n - r]

            for i in range(lo_i, hi_i + 1):
                self._checked += 1
                if self._checked % interval == 0 and cancel.cancelled:
                    raise _Cancelled

                w = wear_sum + wears[i]
                # Pool is wear-sorted: the lightest completion only grows with i
                if w + prefix[i + 1 + r] - prefix[i + 1] > hi_sum:
                    break
                if w + max_rest < lo_sum:
                    continue
                p = price_sum + prices[i]
                bound = price_bound()
                if bound is not None and p > bound:
                    continue  # prices are non-negative, completion only costs more

                chosen[depth] = i
                if r == 0:
                    record(w, p)
                else:
                    descend(depth + 1, i + 1, w, p,
                            tight_lo and i == first[depth],
                            tight_hi and i == last[depth])

        descend(0, 0, 0, 0, True, True)

    # ------------------------------------------------------------------
    # Result builder
    # ------------------------------------------------------------------

    def _make_result(self, entry: tuple) -> SearchResult:
        price, dev, indices, wear_sum, outcome_idx = entry
        job = self.job
        k = job.combination_size
        mean = Decimal(wear_sum).scaleb(-self.wear_digits) / k
        outcome = self.outcomes[outcome_idx] if outcome_idx is not None else None
        return SearchResult(
            indices=indices,
            skins=tuple(job.pool[i] for i in indices),
            mean_wear=mean,
            total_price=Decimal(price).scaleb(-self.price_digits),
            deviation=Decimal(dev).scaleb(-self.wear_digits) / k,
            outcome=outcome,
            output_wear=outcome.output_wear(mean) if outcome else None,
        )
