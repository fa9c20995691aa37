"""Search orchestration: fan a request out to workers, join, merge.

Each worker owns its slice and its private search state; the only shared
data are the frozen pool and outcomes. Results are merged once, after every
worker has returned.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from floatcraft.aggregate import merge_results
from floatcraft.config import Settings, get_settings
from floatcraft.constants import SearchStatus
from floatcraft.errors import InfeasibleJob, InvalidJob
from floatcraft.models import SearchJob, SearchReport, SearchRequest, WorkerFailure
from floatcraft.search import CancelToken, CraftSearcher, SliceResult, reachable_outcomes

logger = logging.getLogger(__name__)


def make_jobs(request: SearchRequest, thread_count: int,
              settings: Optional[Settings] = None) -> tuple[SearchJob, ...]:
    """One SearchJob per worker, identical except for thread_id.

    Raises InvalidJob for a bad thread_count, InfeasibleJob when the pool is
    smaller than the craft size or no outcome template can be reached.
    """
    settings = settings or get_settings()
    if thread_count < 1:
        raise InvalidJob(f"thread_count must be at least 1, got {thread_count}")

    n, k = len(request.pool), request.combination_size
    if k > n:
        raise InfeasibleJob(f"Pool has {n} items, a craft needs {k}")
    if request.outcomes and not reachable_outcomes(request):
        detail = f" matching filter '{request.filter}'" if request.filter.strip() else ""
        raise InfeasibleJob(f"No outcome{detail} is reachable from the pool's wear span")

    # Request fields only: a SearchJob passed in must not leak its slice coordinates
    fields = {name: getattr(request, name) for name in SearchRequest.model_fields}
    fields["max_results"] = request.max_results or settings.max_results
    return tuple(
        SearchJob(**fields, thread_id=i, thread_count=thread_count)
        for i in range(thread_count)
    )


def _run_slice(job: SearchJob, cancel: CancelToken, settings: Settings) -> SliceResult:
    return CraftSearcher(job, cancel, settings).run()


def run_search(request: SearchRequest, thread_count: Optional[int] = None,
               cancel: Optional[CancelToken] = None,
               settings: Optional[Settings] = None) -> SearchReport:
    """Run one logical search and return the merged, ranked report.

    InvalidJob propagates to the caller. An infeasible request yields a
    report with status INFEASIBLE and no workers dispatched. A worker that
    raises is recorded in `failures`; the remaining workers still merge.
    """
    settings = settings or get_settings()
    if thread_count is None:
        thread_count = settings.worker_count
    cancel = cancel or CancelToken()
    started = time.perf_counter()

    try:
        jobs = make_jobs(request, thread_count, settings)
    except InfeasibleJob as e:
        logger.info("Search not attempted: %s", e)
        return SearchReport(status=SearchStatus.INFEASIBLE, reason=str(e),
                            elapsed=time.perf_counter() - started)

    logger.info("Searching %d-item crafts from a pool of %d (%s, target %s ± %s) on %d workers",
                request.combination_size, len(request.pool), request.mode.value,
                request.target, request.tolerance, thread_count)

    slices: list[SliceResult] = []
    failures: list[WorkerFailure] = []
    with ThreadPoolExecutor(max_workers=thread_count,
                            thread_name_prefix="craft-search") as executor:
        futures = [
            (job, executor.submit(_run_slice, job, cancel, settings))
            for job in jobs
        ]
        # Join barrier: every future is resolved before anything is merged
        for job, future in futures:
            try:
                slices.append(future.result())
            except Exception as e:
                logger.exception("Worker %d failed", job.thread_id)
                failures.append(WorkerFailure(
                    thread_id=job.thread_id,
                    error_type=type(e).__name__,
                    message=str(e),
                ))

    results = merge_results(
        (s.results for s in slices), jobs[0].max_results, request.mode)

    if cancel.cancelled or any(s.cancelled for s in slices):
        status = SearchStatus.CANCELLED
    elif failures:
        status = SearchStatus.PARTIAL
    else:
        status = SearchStatus.COMPLETED

    report = SearchReport(
        status=status,
        results=tuple(results),
        failures=tuple(failures),
        workers=len(jobs),
        elapsed=time.perf_counter() - started,
        combinations=sum(s.checked for s in slices),
    )
    logger.info("Search %s: %d results, %d combinations checked, %d failed workers in %.3fs",
                status.value, len(results), report.combinations, len(failures), report.elapsed)
    return report
