"""Phase 1: flag k-mers that the shared Bloom filter has seen before.

Every lane scans its own region and keeps its flagged keys in a local
buffer; the buffers are concatenated once all lanes have finished. No lane
waits on another and the filter is never locked, so in the concurrent
modes a repeat whose earlier occurrence is still being written can be
reported as new (a false negative).
"""

import concurrent.futures
import dataclasses
import time

import numpy as np
import numpy.typing

from .bloom import BloomFilter
from .config import Config
from .encoder import region_keys
from .partition import partition

MAX_LANE_THREADS = 64


class CandidateSet:
    """Frozen snapshot of the flagged keys, duplicates included."""

    def __init__(self, keys: numpy.typing.NDArray[np.uint64]) -> None:
        self.__keys = np.asarray(keys, dtype=np.uint64)
        self.__keys.setflags(write=False)
        self.__distinct = np.unique(self.__keys)
        self.__distinct.setflags(write=False)

    @property
    def keys(self) -> numpy.typing.NDArray[np.uint64]:
        return self.__keys

    @property
    def distinct(self) -> numpy.typing.NDArray[np.uint64]:
        return self.__distinct

    def __len__(self) -> int:
        return self.__keys.shape[0]

    def __contains__(self, key) -> bool:
        i = np.searchsorted(self.__distinct, np.uint64(key))
        return bool(i < self.__distinct.shape[0] and self.__distinct[i] == key)


@dataclasses.dataclass(frozen=True)
class Phase1Stats:
    lanes: int
    num_windows: int
    num_skipped: int
    fill_ratio: float
    estimated_fpr: float
    seconds: float


def _scan_lane(bloom: BloomFilter, keys: numpy.typing.NDArray[np.uint64]):
    flagged = [j for j, row in enumerate(bloom.indexes(keys)) if bloom.probe_and_set(row)]
    return keys[np.asarray(flagged, dtype=np.intp)]


def _scan_lanes_sequential(bloom, lane_keys):
    return [_scan_lane(bloom, keys) for keys in lane_keys]


def _scan_lanes_threaded(bloom, lane_keys):
    max_workers = min(len(lane_keys), MAX_LANE_THREADS)
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(_scan_lane, bloom, keys) for keys in lane_keys]
    return [future.result() for future in futures]


def _scan_lanes_lockstep(bloom, lane_keys):
    lengths = np.array([keys.shape[0] for keys in lane_keys], dtype=np.intp)
    depth = int(lengths.max()) if lengths.shape[0] > 0 else 0
    padded = np.zeros((len(lane_keys), depth), dtype=np.uint64)
    for i, keys in enumerate(lane_keys):
        padded[i, : keys.shape[0]] = keys
    buffers = [[] for _ in lane_keys]
    for step in range(depth):
        active = np.flatnonzero(lengths > step)
        step_keys = padded[active, step]
        seen = bloom.probe_and_set_lockstep(bloom.indexes(step_keys))
        for lane, key in zip(active[seen].tolist(), step_keys[seen].tolist()):
            buffers[lane].append(key)
    return [np.array(buffer, dtype=np.uint64) for buffer in buffers]


SCANNERS = {
    "sequential": _scan_lanes_sequential,
    "threaded": _scan_lanes_threaded,
    "lockstep": _scan_lanes_lockstep,
}


def filter_candidates(
    codes: numpy.typing.NDArray[np.uint8],
    config: Config,
    bloom: BloomFilter,
) -> tuple[CandidateSet, Phase1Stats]:
    t0 = time.time()
    lane_keys, num_skipped = [], 0
    for region in partition(codes.shape[0], config.k, config.lanes):
        keys, skipped = region_keys(codes, region, config.k)
        lane_keys.append(keys)
        num_skipped += skipped
    buffers = SCANNERS[config.mode](bloom, lane_keys)
    candidates = CandidateSet(np.concatenate(buffers) if buffers else [])
    stats = Phase1Stats(
        lanes=config.lanes,
        num_windows=sum(keys.shape[0] for keys in lane_keys),
        num_skipped=num_skipped,
        fill_ratio=bloom.fill_ratio,
        estimated_fpr=bloom.estimated_fpr(),
        seconds=time.time() - t0,
    )
    return candidates, stats
