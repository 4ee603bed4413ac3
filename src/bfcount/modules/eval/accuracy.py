"""Measure what a concurrent Phase 1 loses against a sequential one.

Concurrent filtering may only drop repeats (false negatives). Any key it
reports must also be in the reference, with the same count.
"""

import collections
import dataclasses

from bfcount.modules.count.encoder import encode
from bfcount.modules.count.result import KmerCounts


def exact_counts(sequence: str, k: int) -> dict[int, int]:
    """Brute-force counts of every repeated k-mer, keyed like ``KmerCounts``."""
    counts = collections.Counter()
    for i in range(len(sequence) - k + 1):
        key = encode(sequence[i : i + k])
        if key is not None:
            counts[key] += 1
    return {key: count for key, count in counts.items() if count > 1}


@dataclasses.dataclass(frozen=True)
class Accuracy:
    num_reference: int
    num_observed: int
    false_negatives: frozenset
    unexpected: frozenset
    mismatched: frozenset

    @property
    def false_negative_rate(self) -> float:
        if self.num_reference == 0:
            return 0.0
        return len(self.false_negatives) / self.num_reference

    @property
    def is_subset(self) -> bool:
        return not self.unexpected and not self.mismatched

    def as_rows(self) -> list[list]:
        return [
            ["Reference repeated k-mers", self.num_reference],
            ["Observed repeated k-mers", self.num_observed],
            ["False negatives", len(self.false_negatives)],
            ["False-negative rate", self.false_negative_rate],
            ["Unexpected k-mers", len(self.unexpected)],
            ["Count mismatches", len(self.mismatched)],
        ]


def compare(reference, observed) -> Accuracy:
    if isinstance(reference, KmerCounts):
        reference = reference.counts
    if isinstance(observed, KmerCounts):
        observed = observed.counts
    return Accuracy(
        num_reference=len(reference),
        num_observed=len(observed),
        false_negatives=frozenset(key for key in reference if key not in observed),
        unexpected=frozenset(key for key in observed if key not in reference),
        mismatched=frozenset(
            key for key, c in observed.items() if key in reference and reference[key] != c
        ),
    )
