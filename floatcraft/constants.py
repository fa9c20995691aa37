"""Marketplace constants — no mutable state."""
from enum import Enum, IntEnum, unique


@unique
class Currency(IntEnum):
    """Marketplace currency codes (as reported by the listing service)."""
    USD = 1
    GBP = 2
    EUR = 3
    CHF = 4
    RUB = 5
    PLN = 6
    BRL = 7
    JPY = 8
    NOK = 9
    IDR = 10
    MYR = 11
    PHP = 12
    SGD = 13
    THB = 14
    VND = 15
    KRW = 16
    TRY = 17
    UAH = 18
    MXN = 19
    CAD = 20
    AUD = 21
    NZD = 22
    CNY = 23
    INR = 24
    CLP = 25
    PEN = 26
    COP = 27
    ZAR = 28
    HKD = 29
    TWD = 30
    SAR = 31
    AED = 32
    ARS = 34
    ILS = 35
    BYN = 36
    KZT = 37
    KWD = 38
    QAR = 39
    CRC = 40
    UYU = 41
    RMB = 9000
    NXP = 9001


@unique
class SearchMode(str, Enum):
    EXHAUSTIVE = "exhaustive"
    BEST_PRICE = "best_price"


@unique
class SearchStatus(str, Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"        # at least one worker failed
    CANCELLED = "cancelled"
    INFEASIBLE = "infeasible"  # request could not be attempted


# Items consumed by one craft
COMBINATION_SIZE = 10

# Wear domain bounds
WEAR_MIN = 0.0
WEAR_MAX = 1.0

# Rarity tiers, lowest first. Crafting consumes one tier and yields the next.
RARITIES = [
    "Consumer", "Industrial", "Mil-Spec", "Restricted", "Classified", "Covert",
]


def next_rarity(rarity: str) -> str | None:
    """Rarity tier produced by crafting items of `rarity`, or None at the top."""
    try:
        idx = RARITIES.index(rarity)
    except ValueError:
        return None
    return RARITIES[idx + 1] if idx + 1 < len(RARITIES) else None
