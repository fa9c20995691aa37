"""Pydantic models for craft inputs, search descriptors and results.

Descriptors and results are frozen: one pool is shared read-only by every
worker of a search, and results are handed out as immutable snapshots.
"""
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, computed_field, field_validator, model_validator

from floatcraft.constants import (
    COMBINATION_SIZE, WEAR_MAX, WEAR_MIN, Currency, SearchMode, SearchStatus,
)
from floatcraft.errors import InfeasibleJob, InvalidJob


# ---------------------------------------------------------------------------
# Wear ranges and items
# ---------------------------------------------------------------------------

class FloatRange(BaseModel):
    """Closed interval [min, max] over the wear domain."""
    model_config = ConfigDict(frozen=True)

    min: float
    max: float

    @model_validator(mode="after")
    def _check_bounds(self) -> "FloatRange":
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise InvalidJob(f"Range bounds must be finite, got [{self.min}, {self.max}]")
        if self.min > self.max:
            raise InvalidJob(f"Range min {self.min} exceeds max {self.max}")
        return self

    def is_overlapped(self, other: "FloatRange") -> bool:
        return self.min <= other.max and other.min <= self.max


class InputSkin(BaseModel):
    """A priced, wear-tagged candidate item. Orders by wear."""
    model_config = ConfigDict(frozen=True)

    wear: float
    price: float
    currency: Currency = Currency.USD
    name: str = ""

    @model_validator(mode="after")
    def _check_values(self) -> "InputSkin":
        if math.isnan(self.wear) or not WEAR_MIN <= self.wear <= WEAR_MAX:
            raise InvalidJob(f"Wear {self.wear} outside [{WEAR_MIN}, {WEAR_MAX}]")
        if not math.isfinite(self.price) or self.price < 0:
            raise InvalidJob(f"Price must be finite and non-negative, got {self.price}")
        return self

    def __lt__(self, other: "InputSkin") -> bool:
        return self.wear < other.wear


class Outcome(BaseModel):
    """An item a craft may produce, with the wear range it can be made in."""
    model_config = ConfigDict(frozen=True)

    name: str
    collection: str = ""
    wear_range: FloatRange

    def output_wear(self, mean_wear: Decimal) -> Decimal:
        """Wear the crafted item receives for a given input mean."""
        lo = Decimal(str(self.wear_range.min))
        hi = Decimal(str(self.wear_range.max))
        return lo + (hi - lo) * _to_decimal(mean_wear)

    def matches(self, text: str) -> bool:
        """Case-insensitive substring match on name or collection."""
        needle = text.strip().lower()
        if not needle:
            return True
        return needle in self.name.lower() or needle in self.collection.lower()


# ---------------------------------------------------------------------------
# Search descriptors
# ---------------------------------------------------------------------------

def _to_decimal(value: Any) -> Any:
    # str() first so 0.25 becomes Decimal("0.25"), not its binary expansion
    if isinstance(value, (float, str)):
        try:
            value = Decimal(str(value).strip())
        except InvalidOperation:
            return value
    if isinstance(value, Decimal) and not value.is_finite():
        raise InvalidJob(f"Expected a finite number, got {value}")
    return value


class SearchRequest(BaseModel):
    """One logical search, before it is fanned out to workers."""
    model_config = ConfigDict(frozen=True)

    target: Decimal
    tolerance: Decimal
    filter: str = ""
    outcomes: tuple[Outcome, ...] = ()
    pool: tuple[InputSkin, ...]
    mode: SearchMode = SearchMode.EXHAUSTIVE
    combination_size: int = COMBINATION_SIZE
    max_results: Optional[int] = None  # None = settings default

    @field_validator("target", "tolerance", mode="before")
    @classmethod
    def _exact_decimal(cls, v: Any) -> Any:
        return _to_decimal(v)

    @field_validator("pool")
    @classmethod
    def _sort_pool(cls, v: tuple[InputSkin, ...]) -> tuple[InputSkin, ...]:
        # Stable: equal-wear items keep their input order
        return tuple(sorted(v, key=lambda s: s.wear))

    @model_validator(mode="after")
    def _check_request(self) -> "SearchRequest":
        if self.tolerance < 0:
            raise InvalidJob(f"Tolerance must be non-negative, got {self.tolerance}")
        if self.combination_size <= 0:
            raise InvalidJob(f"Combination size must be positive, got {self.combination_size}")
        if not self.pool:
            raise InvalidJob("Candidate pool is empty")
        if self.max_results is not None and self.max_results < 1:
            raise InvalidJob(f"max_results must be at least 1, got {self.max_results}")
        currencies = {s.currency for s in self.pool}
        if len(currencies) > 1:
            names = ", ".join(sorted(c.name for c in currencies))
            raise InvalidJob(f"Pool mixes currencies ({names}); convert before searching")
        return self

    @computed_field
    @property
    def currency(self) -> Currency:
        return self.pool[0].currency


class SearchJob(SearchRequest):
    """One worker's share of a search: the request plus slice coordinates."""
    max_results: int
    thread_id: int = 0
    thread_count: int = 1

    @model_validator(mode="after")
    def _check_partition(self) -> "SearchJob":
        if self.thread_count < 1:
            raise InvalidJob(f"thread_count must be at least 1, got {self.thread_count}")
        if not 0 <= self.thread_id < self.thread_count:
            raise InvalidJob(
                f"thread_id {self.thread_id} outside [0, {self.thread_count})")
        if len(self.pool) < self.combination_size:
            raise InfeasibleJob(
                f"Pool has {len(self.pool)} items, a craft needs {self.combination_size}")
        return self


CraftSearchSetup = SearchJob


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class SearchResult(BaseModel):
    """One feasible combination. Indices point into the wear-sorted pool."""
    model_config = ConfigDict(frozen=True)

    indices: tuple[int, ...]
    skins: tuple[InputSkin, ...]
    mean_wear: Decimal
    total_price: Decimal
    deviation: Decimal
    outcome: Optional[Outcome] = None
    output_wear: Optional[Decimal] = None

    @property
    def sort_key(self) -> tuple[Decimal, Decimal, tuple[int, ...]]:
        return self.total_price, self.deviation, self.indices

    @computed_field
    @property
    def currency(self) -> Currency:
        return self.skins[0].currency


class WorkerFailure(BaseModel):
    """A worker that raised instead of returning its slice."""
    model_config = ConfigDict(frozen=True)

    thread_id: int
    error_type: str
    message: str


class SearchReport(BaseModel):
    """Merged outcome of one logical search."""
    model_config = ConfigDict(frozen=True)

    status: SearchStatus
    results: tuple[SearchResult, ...] = ()
    failures: tuple[WorkerFailure, ...] = ()
    workers: int = 0
    reason: str = ""
    elapsed: float = 0.0
    combinations: int = 0

    @computed_field
    @property
    def found(self) -> bool:
        return len(self.results) > 0
