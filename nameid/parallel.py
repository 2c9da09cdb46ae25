"""
Parallel map over records and tree reduction of the per-record statistics.

Records are cut into chunks; every chunk is folded into one partial aggregate (on a worker
process when ``n_jobs > 1``) and the partials are tree-reduced in whatever order the workers
finish. Because the statistics form a commutative monoid, the result does not depend on the
number of workers, the chunk size or the completion order.

Workers receive the extractor, and with it the dictionary snapshots, once: inherited through
``fork`` where available, otherwise through the pool initializer.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
from itertools import islice
from typing import Callable, Iterable, Iterator, List, Optional

from nameid.consts import DEFAULT_CHUNK_SIZE
from nameid.stats import NameDetectStats, fold, tree_reduce

Extractor = Callable[[Optional[str]], NameDetectStats]

_worker_extractor: Optional[Extractor] = None


def _init_worker(extractor: Optional[Extractor]) -> None:
    global _worker_extractor
    _worker_extractor = extractor


def _extract_chunk(chunk: List[Optional[str]]) -> NameDetectStats:
    assert _worker_extractor is not None, "worker extractor was not initialized"
    return fold(_worker_extractor(record) for record in chunk)


def chunked(records: Iterable[Optional[str]], chunk_size: int) -> Iterator[List[Optional[str]]]:
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    iterator = iter(records)
    while True:
        chunk = list(islice(iterator, chunk_size))
        if not chunk:
            return
        yield chunk


def map_reduce(
    records: Iterable[Optional[str]],
    extractor: Extractor,
    n_jobs: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> NameDetectStats:
    """Extract a singleton per record and reduce them all into one aggregate."""
    if n_jobs < 1:
        raise ValueError(f"n_jobs must be positive, got {n_jobs}")

    if n_jobs == 1:
        partials = [fold(extractor(record) for record in chunk) for chunk in chunked(records, chunk_size)]
        return tree_reduce(partials)

    logging.info(f"Reducing name statistics with {n_jobs} workers (chunk size {chunk_size})")
    ctx = mp.get_context()
    try:
        if ctx.get_start_method(allow_none=True) == "fork":
            _init_worker(extractor)
            pool = ctx.Pool(processes=n_jobs)
        else:
            pool = ctx.Pool(processes=n_jobs, initializer=_init_worker, initargs=(extractor,))
        with pool:
            partials = list(pool.imap_unordered(_extract_chunk, chunked(records, chunk_size), chunksize=1))
    finally:
        # the parent must not keep the dictionary snapshots alive after the pool is gone
        _init_worker(None)
    logging.debug(f"Reduced {len(partials)} partial aggregates")
    return tree_reduce(partials)
