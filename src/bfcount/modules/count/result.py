import dataclasses
import types
import typing

import numpy as np
import numpy.typing

from .encoder import decode, encode


@dataclasses.dataclass(frozen=True)
class RunStats:
    mode: str
    lanes: int
    workers: int
    num_windows: int
    num_skipped: int
    num_candidates: int
    num_distinct_candidates: int
    num_false_positives: int
    fill_ratio: float
    estimated_fpr: float
    phase1_seconds: float
    phase2_seconds: float

    def as_rows(self) -> list[list]:
        return [
            ["Valid k-mer windows", self.num_windows],
            ["Skipped windows (invalid symbols)", self.num_skipped],
            ["Phase 1 candidates", self.num_candidates],
            ["Distinct candidates", self.num_distinct_candidates],
            ["False positives removed", self.num_false_positives],
            ["Bloom filter fill ratio", self.fill_ratio],
            ["Estimated false-positive rate", self.estimated_fpr],
        ]


@dataclasses.dataclass(frozen=True, eq=False)
class KmerCounts:
    """Merged exact counts of the repeated k-mers, keyed by packed k-mer."""

    k: int
    counts: typing.Mapping[int, int]
    stats: RunStats

    def __post_init__(self) -> None:
        ordered = dict(sorted(self.counts.items()))
        object.__setattr__(self, "counts", types.MappingProxyType(ordered))

    def __len__(self) -> int:
        return len(self.counts)

    def __getitem__(self, key: int) -> int:
        return self.counts[key]

    def __contains__(self, key: int) -> bool:
        return key in self.counts

    def __iter__(self):
        return iter(self.counts)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def items(self) -> list[tuple[int, int]]:
        return list(self.counts.items())

    def kmers(self) -> typing.Iterator[tuple[str, int]]:
        for key, count in self.counts.items():
            yield decode(key, self.k), count

    def count_of(self, kmer: str) -> int:
        """Exact count of ``kmer``; 0 if it was never flagged as repeated."""
        if len(kmer) != self.k:
            return 0
        key = encode(kmer)
        return self.counts.get(key, 0) if key is not None else 0

    def histogram(self) -> numpy.typing.NDArray[np.uint64]:
        """Frequencies indexed by ``count - 1``.

        Singletons are never counted; the first entry holds the windows
        that were not reported, which equals the singleton count when no
        repeat was lost in Phase 1.
        """
        counts = np.fromiter(self.counts.values(), dtype=np.int64, count=len(self.counts))
        max_count = int(counts.max()) if counts.shape[0] > 0 else 1
        hist = np.bincount(counts - 1, minlength=max_count).astype(np.uint64)
        hist[0] = max(0, self.stats.num_windows - self.total)
        return hist
