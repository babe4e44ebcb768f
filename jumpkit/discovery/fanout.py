"""
Concurrent per-region discovery.

One worker per region; the call returns only once every region has answered.
The first failing region aborts the whole call and no partial result is
returned. Queries still queued are cancelled, but a query already in flight
cannot be interrupted: its thread keeps running after the error is raised and
is joined by the concurrent.futures exit hook, so the process may only exit
once the slowest in-flight region has answered or hit the client timeouts.
"""
from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import List, Sequence, TypeVar

from jumpkit.core.errors import ConfigurationError, DiscoveryError
from jumpkit.utils.logging import get_logger
from .base import Finder

logger = get_logger(__name__)

T = TypeVar("T")


def discover(finder: Finder[T], regions: Sequence[str], filter: str) -> List[T]:
    if not regions:
        raise ConfigurationError("No AWS regions configured")

    logger.info(f"fetching {finder.service} resources matching '{filter}' in {', '.join(regions)}")

    pool = ThreadPoolExecutor(max_workers=len(regions), thread_name_prefix="discover")
    try:
        futures = {pool.submit(finder.find, region, filter): region for region in regions}
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)

        for future in done:
            error = future.exception()
            if error is not None:
                region = futures[future]
                raise DiscoveryError(region, error) from error

        results: List[T] = []
        for future, region in futures.items():
            found = future.result()
            logger.debug(f"{region}: {len(found)} match(es)")
            results.extend(found)
    finally:
        # Drop queued queries; running ones finish in the background (see module docstring)
        pool.shutdown(wait=False, cancel_futures=True)

    return results
