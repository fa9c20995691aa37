"""Craft search error taxonomy."""


class CraftSearchError(Exception):
    """Base class for all engine errors."""


class InvalidJob(CraftSearchError):
    """Malformed job parameters (bad price, size, tolerance, empty pool...)."""


class InfeasibleJob(CraftSearchError):
    """Well-formed request that cannot be attempted (pool too small,
    no outcome reachable from the pool's wear span)."""
