"""Phase 2: exact counts for the flagged keys, then a single merge."""

import collections
import concurrent.futures

import numpy as np
import numpy.typing

from .encoder import region_keys
from .partition import Region, partition


def count_region(
    codes: numpy.typing.NDArray[np.uint8],
    region: Region,
    k: int,
    distinct: numpy.typing.NDArray[np.uint64],
) -> dict[int, int]:
    """Count the occurrences of ``distinct`` keys inside one region."""
    keys, _ = region_keys(codes, region, k)
    if keys.shape[0] == 0 or distinct.shape[0] == 0:
        return {}
    hits = keys[np.isin(keys, distinct)]
    uniq, counts = np.unique(hits, return_counts=True)
    return dict(zip(uniq.tolist(), counts.tolist()))


def merge_tables(tables) -> collections.Counter:
    merged = collections.Counter()
    for table in tables:
        merged.update(table)
    return merged


def count_candidates(
    codes: numpy.typing.NDArray[np.uint8],
    distinct: numpy.typing.NDArray[np.uint64],
    k: int,
    workers: int,
) -> collections.Counter:
    regions = partition(codes.shape[0], k, workers)
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(count_region, codes, r, k, distinct) for r in regions]
    return merge_tables(future.result() for future in futures)
