"""k-mer spectra in ntCard format: ``F1 total``, ``F0 distinct``, then
``count frequency`` rows starting at count 1."""

import dataclasses

import numpy as np
import numpy.typing
import scipy.signal

from . import utils


def write_histogram(hist: numpy.typing.NDArray[np.uint64], num_total: int, out_path: str):
    """Write a spectrum indexed by ``count - 1``."""
    with open(out_path, "w") as hist_file:
        hist_file.write(f"F1\t{num_total}\n")
        hist_file.write(f"F0\t{int(hist.sum())}\n")
        for count, freq in enumerate(hist.tolist(), start=1):
            hist_file.write(f"{count}\t{freq}\n")


def find_first_minima(hist: numpy.typing.NDArray[np.int64]) -> int | None:
    minima = scipy.signal.argrelextrema(hist, np.less)[0]
    return int(minima[0]) if minima.shape[0] > 0 else None


@dataclasses.dataclass(frozen=True, eq=False)
class KmerSpectrum:
    num_windows: int
    frequencies: numpy.typing.NDArray[np.int64]

    @classmethod
    def read(cls, path: str) -> "KmerSpectrum":
        rows = {}
        with open(path) as hist_file:
            for line in hist_file:
                if line.strip():
                    label, value = line.split()
                    rows[label] = int(value)
        if "F1" not in rows or "1" not in rows:
            raise ValueError(f"{path} is not an ntCard histogram")
        max_count = max(int(label) for label in rows if label.isdigit())
        frequencies = np.zeros(max_count, dtype=np.int64)
        for label, value in rows.items():
            if label.isdigit():
                frequencies[int(label) - 1] = value
        frequencies.setflags(write=False)
        return cls(rows["F1"], frequencies)

    @property
    def num_singletons(self) -> int:
        return int(self.frequencies[0])

    @property
    def num_repeated(self) -> int:
        return int(self.frequencies[1:].sum())

    @property
    def num_distinct(self) -> int:
        return int(self.frequencies.sum())

    @property
    def max_count(self) -> int:
        nonzero = np.flatnonzero(self.frequencies)
        return int(nonzero[-1]) + 1 if nonzero.shape[0] > 0 else 0

    @property
    def first_minima(self) -> int | None:
        """Count (1-based) at the first local minimum of the spectrum."""
        i = find_first_minima(self.frequencies)
        return None if i is None else i + 1

    @property
    def mode_after_first_minima(self) -> int | None:
        if self.first_minima is None:
            return None
        tail = self.frequencies[self.first_minima - 1 :]
        return int(tail.argmax()) + self.first_minima

    def as_rows(self) -> list[list]:
        return [
            ["Number of distinct k-mers", self.num_distinct],
            ["Number of repeated k-mers", self.num_repeated],
            ["Number of singletons", self.num_singletons],
            ["Total number of k-mers", self.num_windows],
            ["Maximum count", self.max_count],
            ["First minima", utils.format_optional(self.first_minima)],
            ["Mode after first minima", utils.format_optional(self.mode_after_first_minima)],
            ["Dataset size", utils.format_bp(self.num_windows)],
        ]
