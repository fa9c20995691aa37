"""floatcraft — craft search engine for wear-tagged marketplace items."""

from floatcraft.constants import (
    COMBINATION_SIZE, Currency, SearchMode, SearchStatus,
)
from floatcraft.errors import CraftSearchError, InvalidJob, InfeasibleJob
from floatcraft.config import Settings, get_settings
from floatcraft.models import (
    FloatRange, InputSkin, Outcome,
    SearchRequest, SearchJob, CraftSearchSetup,
    SearchResult, WorkerFailure, SearchReport,
)
from floatcraft.partition import (
    RankSlice, combination_count, rank_combination, unrank_combination,
    slice_bounds, partition,
)
from floatcraft.search import CancelToken, CraftSearcher, SliceResult, reachable_outcomes
from floatcraft.aggregate import merge_results
from floatcraft.engine import make_jobs, run_search
from floatcraft.catalog import SkinCatalog, load_pool_csv, load_pool_json

__all__ = [
    # Constants
    "COMBINATION_SIZE", "Currency", "SearchMode", "SearchStatus",
    # Errors
    "CraftSearchError", "InvalidJob", "InfeasibleJob",
    # Configuration
    "Settings", "get_settings",
    # Models
    "FloatRange", "InputSkin", "Outcome",
    "SearchRequest", "SearchJob", "CraftSearchSetup",
    "SearchResult", "WorkerFailure", "SearchReport",
    # Partitioning
    "RankSlice", "combination_count", "rank_combination", "unrank_combination",
    "slice_bounds", "partition",
    # Search
    "CancelToken", "CraftSearcher", "SliceResult", "reachable_outcomes",
    "merge_results",
    # Orchestration
    "make_jobs", "run_search",
    # Loaders
    "SkinCatalog", "load_pool_csv", "load_pool_json",
]
