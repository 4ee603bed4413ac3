import time
import warnings

from .bloom import BloomFilter
from .candidates import filter_candidates
from .config import Config, ResourceExhaustedError
from .counter import count_candidates
from .encoder import to_codes
from .result import KmerCounts, RunStats

SATURATION_WARNING = 0.5


def run(sequence: str | bytes, config: Config) -> KmerCounts:
    """Filter-then-count pipeline over one sequence."""
    codes = to_codes(sequence)
    bloom = BloomFilter(config.num_bits, config.num_hashes, config.seed)
    try:
        candidates, phase1 = filter_candidates(codes, config, bloom)
    except MemoryError as err:
        raise ResourceExhaustedError("cannot allocate the phase 1 lane buffers") from err
    finally:
        del bloom
    if phase1.fill_ratio > SATURATION_WARNING:
        warnings.warn(
            f"Bloom filter is {phase1.fill_ratio:.0%} full "
            f"(estimated false-positive rate {phase1.estimated_fpr:.3g}), "
            "consider a larger bit array",
            RuntimeWarning,
        )
    t0 = time.time()
    try:
        merged = count_candidates(codes, candidates.distinct, config.k, config.workers)
    except MemoryError as err:
        raise ResourceExhaustedError("cannot allocate the per-thread count tables") from err
    counts = {key: count for key, count in merged.items() if count > 1}
    stats = RunStats(
        mode=config.mode,
        lanes=config.lanes,
        workers=config.workers,
        num_windows=phase1.num_windows,
        num_skipped=phase1.num_skipped,
        num_candidates=len(candidates),
        num_distinct_candidates=candidates.distinct.shape[0],
        num_false_positives=len(merged) - len(counts),
        fill_ratio=phase1.fill_ratio,
        estimated_fpr=phase1.estimated_fpr,
        phase1_seconds=phase1.seconds,
        phase2_seconds=time.time() - t0,
    )
    return KmerCounts(config.k, counts, stats)


def count_kmers(
    sequence: str | bytes,
    k: int,
    num_bits: int,
    num_hashes: int,
    lanes: int = 1,
    workers: int = 1,
    mode: str = "threaded",
    seed: int = 0,
) -> KmerCounts:
    config = Config(k, num_bits, num_hashes, lanes, workers, mode, seed)
    return run(sequence, config)
