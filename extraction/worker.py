"""Background netlist extraction.

Extraction runs off the caller's thread on a ThreadPoolExecutor. Each job
carries its own CancellationToken; a cancelled job raises
ExtractionCancelled from result() and never yields a partial netlist.

Usage:
    with ExtractionWorker(max_workers=2) as worker:
        job = worker.submit(geometries, technology=SKY130)
        netlist = job.result(timeout=30)
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .assembler import DEFAULT_TITLE, extract_netlist
from .context import CancellationToken
from .geometry import Geometry
from .netlist import ExtractedNetlist
from .technology import SKY130, Technology

logger = logging.getLogger(__name__)


@dataclass
class ExtractionJob:
    """Handle for one submitted extraction."""
    job_id: int
    future: Future
    token: CancellationToken = field(default_factory=CancellationToken)

    def cancel(self) -> None:
        """Request cancellation (takes effect at the next loop boundary)."""
        self.token.cancel()
        self.future.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> ExtractedNetlist:
        """Block for the netlist.

        Raises:
            ExtractionCancelled: If the job was cancelled while running
            concurrent.futures.CancelledError: If it was cancelled before starting
        """
        return self.future.result(timeout=timeout)


class ExtractionWorker:
    """Thread pool running extract_netlist() calls.

    Jobs are independent: each one allocates names from its own context, so
    concurrent extractions never share counters.
    """

    def __init__(self, max_workers: int = 2):
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='extraction')
        self._next_id = 0

    def submit(
        self,
        geometries: Iterable[Geometry],
        technology: Technology = SKY130,
        extract_capacitance: bool = False,
        title: str = DEFAULT_TITLE,
        timestamp: Optional[float] = None,
    ) -> ExtractionJob:
        """Queue an extraction and return its job handle."""
        token = CancellationToken()
        geometries = list(geometries)
        future = self._executor.submit(
            extract_netlist,
            geometries,
            technology,
            extract_capacitance,
            token,
            False,
            title,
            timestamp,
        )
        job = ExtractionJob(job_id=self._next_id, future=future, token=token)
        self._next_id += 1
        logger.debug(f"Submitted extraction job {job.job_id} ({len(geometries)} geometries)")
        return job

    def map(
        self,
        layouts: Sequence[Iterable[Geometry]],
        technology: Technology = SKY130,
        progress_callback: Optional[Callable[[int, int, int], None]] = None,
        **kwargs,
    ) -> List[ExtractedNetlist]:
        """Extract several layouts concurrently; results in input order.

        Args:
            layouts: One geometry list per layout
            technology: Shared technology table
            progress_callback: Called as (completed, total, job_id)

        Raises:
            Whatever the first failing job raised
        """
        jobs = [self.submit(geoms, technology, **kwargs) for geoms in layouts]
        results: Dict[int, ExtractedNetlist] = {}
        futures = {job.future: job.job_id for job in jobs}
        for future in as_completed(futures):
            job_id = futures[future]
            try:
                results[job_id] = future.result()
            except Exception as e:
                logger.error(f"Extraction job {job_id} failed: {e}")
                for job in jobs:
                    job.cancel()
                raise
            if progress_callback:
                progress_callback(len(results), len(jobs), job_id)
        return [results[job.job_id] for job in jobs]

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> 'ExtractionWorker':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)
