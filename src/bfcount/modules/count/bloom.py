"""Shared Bloom filter used to flag k-mers that were seen before.

Each of the ``m`` bits lives in its own byte so that setting a bit is a
single store: writes only ever turn cells on, they are idempotent and
commute, and no lane can erase another lane's bit. Reads and writes of a
probe are separate steps and are never wrapped in a lock.

Index functions use double hashing, ``idx_i = (a + i * b) mod m``, where
``a`` and ``b`` are two splitmix64 mixes of the key under different seeds.
"""

import numpy as np
import numpy.typing

from .config import ConfigError, ResourceExhaustedError

_SM64_GAMMA = np.uint64(0x9E3779B97F4A7C15)
_SM64_M1 = np.uint64(0xBF58476D1CE4E5B9)
_SM64_M2 = np.uint64(0x94D049BB133111EB)
_SEED_B = 0xD6E8FEB86659FD93


def mix64(x: numpy.typing.NDArray[np.uint64]) -> numpy.typing.NDArray[np.uint64]:
    z = x + _SM64_GAMMA
    z = (z ^ (z >> np.uint64(30))) * _SM64_M1
    z = (z ^ (z >> np.uint64(27))) * _SM64_M2
    return z ^ (z >> np.uint64(31))


class BloomFilter:

    def __init__(self, num_bits: int, num_hashes: int, seed: int = 0) -> None:
        if num_bits < 1:
            raise ConfigError(f"Bloom filter needs at least one bit, got {num_bits}")
        if num_hashes < 1:
            raise ConfigError(f"Bloom filter needs at least one hash, got {num_hashes}")
        try:
            self.__bits = np.zeros(num_bits, dtype=np.bool_)
        except (MemoryError, ValueError) as err:
            raise ResourceExhaustedError(
                f"cannot allocate a Bloom filter of {num_bits} bits"
            ) from err
        self.__num_hashes = num_hashes
        self.__seed = seed
        self.__seed_a = np.uint64(seed)
        self.__seed_b = np.uint64(seed ^ _SEED_B)
        self.__steps = np.arange(num_hashes, dtype=np.uint64)

    @property
    def num_bits(self) -> int:
        return self.__bits.shape[0]

    @property
    def num_hashes(self) -> int:
        return self.__num_hashes

    @property
    def seed(self) -> int:
        return self.__seed

    @property
    def bits(self) -> numpy.typing.NDArray[np.bool_]:
        view = self.__bits.view()
        view.setflags(write=False)
        return view

    @property
    def fill_ratio(self) -> float:
        return np.count_nonzero(self.__bits) / self.num_bits

    def estimated_fpr(self) -> float:
        """Probability that an absent key reads as present at the current fill."""
        return self.fill_ratio**self.num_hashes

    def indexes(self, keys) -> numpy.typing.NDArray[np.intp]:
        keys = np.atleast_1d(np.asarray(keys, dtype=np.uint64))
        m = np.uint64(self.num_bits)
        a = mix64(keys ^ self.__seed_a) % m
        # step in [1, m) so the h indexes of a key never collapse onto a
        if self.num_bits > 1:
            b = mix64(keys ^ self.__seed_b) % (m - np.uint64(1)) + np.uint64(1)
        else:
            b = np.zeros_like(a)
        rows = (a[:, None] + self.__steps[None, :] * b[:, None]) % m
        return rows.astype(np.intp)

    def probe_and_set(self, row: numpy.typing.NDArray[np.intp]) -> bool:
        """Report whether every bit of ``row`` is set; set them all if not.

        The read and the write are separate steps. A caller running this from
        several threads without a lock gets the concurrent contract: a lane
        may read a bit before another lane's pending write lands.
        """
        if self.__bits[row].all():
            return True
        self.__bits[row] = True
        return False

    def probe_and_set_lockstep(
        self, rows: numpy.typing.NDArray[np.intp]
    ) -> numpy.typing.NDArray[np.bool_]:
        """One lockstep step: every lane reads its bits, then every lane writes."""
        seen = self.__bits[rows].all(axis=1)
        self.__bits[rows[~seen]] = True
        return seen

    def insert(self, keys) -> None:
        self.__bits[self.indexes(keys)] = True

    def contains(self, keys) -> numpy.typing.NDArray[np.bool_]:
        return self.__bits[self.indexes(keys)].all(axis=1)

    def __contains__(self, key) -> bool:
        return bool(self.contains(key)[0])

    def __len__(self) -> int:
        return self.num_bits
