"""Split a sequence into per-lane regions that overlap by k - 1 symbols.

Region ``i`` nominally owns ``[i * L // W, (i + 1) * L // W)``. Every region
after the first starts ``k - 1`` symbols early, so the k-mers that straddle
its nominal boundary are generated by exactly this region and never by its
left neighbour, whose windows end at the boundary.
"""

import typing

from .config import ConfigError, validate_k


class Region(typing.NamedTuple):
    index: int
    start: int
    stop: int

    def __len__(self) -> int:
        return self.stop - self.start

    def num_windows(self, k: int) -> int:
        return max(0, self.stop - self.start - k + 1)


def partition(length: int, k: int, parts: int) -> list[Region]:
    validate_k(k)
    if length < 0:
        raise ConfigError(f"sequence length must be >= 0, got {length}")
    if parts < 1:
        raise ConfigError(f"number of parts must be >= 1, got {parts}")
    overlap = k - 1
    bounds = [i * length // parts for i in range(parts + 1)]
    regions = []
    for i in range(parts):
        start = 0 if i == 0 else max(0, bounds[i] - overlap)
        regions.append(Region(i, start, bounds[i + 1]))
    return regions
