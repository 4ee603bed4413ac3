import dataclasses
import math

MAX_K = 32
MODES = ("sequential", "threaded", "lockstep")


class BfcountError(Exception):
    pass


class ConfigError(BfcountError, ValueError):
    """Invalid run parameters, reported before any processing starts."""


class ResourceExhaustedError(BfcountError, MemoryError):
    """The bit array or a count table could not be allocated."""


def _check_positive(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise ConfigError(f"{name} must be >= 1, got {value}")


def validate_k(k: int) -> None:
    _check_positive("k", k)
    if k > MAX_K:
        raise ConfigError(f"k must be <= {MAX_K} to fit a 64-bit key, got {k}")


@dataclasses.dataclass(frozen=True)
class Config:
    k: int
    num_bits: int
    num_hashes: int
    lanes: int = 1
    workers: int = 1
    mode: str = "threaded"
    seed: int = 0

    def __post_init__(self) -> None:
        validate_k(self.k)
        _check_positive("num_bits (m)", self.num_bits)
        _check_positive("num_hashes (h)", self.num_hashes)
        _check_positive("lanes", self.lanes)
        _check_positive("workers", self.workers)
        if self.mode not in MODES:
            raise ConfigError(f"mode must be one of {', '.join(MODES)}, got {self.mode!r}")
        if isinstance(self.seed, bool) or not isinstance(self.seed, int):
            raise ConfigError(f"seed must be an integer, got {self.seed!r}")
        if not 0 <= self.seed < 2**64:
            raise ConfigError(f"seed must fit in 64 unsigned bits, got {self.seed}")

    @classmethod
    def from_dict(cls, values: dict, **overrides) -> "Config":
        """Build a config from a JSON-style dict; non-None overrides win."""
        names = {field.name for field in dataclasses.fields(cls)}
        unknown = set(values) - names
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(sorted(unknown))}")
        merged = dict(values)
        merged.update({k: v for k, v in overrides.items() if v is not None})
        missing = [n for n in ("k", "num_bits", "num_hashes") if n not in merged]
        if missing:
            raise ConfigError(f"missing config values: {', '.join(missing)}")
        return cls(**merged)


def parse_bf_size(size_str: str) -> int:
    """Parse a bit-array size such as ``4096``, ``512k``, ``64M`` or ``2G``."""
    units = {"B": 1, "k": 10**3, "M": 10**6, "G": 10**9}
    size_str = size_str.strip()
    try:
        if size_str and size_str[-1] in units:
            num_bits = int(size_str[:-1]) * units[size_str[-1]]
        else:
            num_bits = int(size_str)
    except ValueError:
        raise ConfigError(f"invalid Bloom filter size: {size_str!r}") from None
    if num_bits < 1:
        raise ConfigError(f"Bloom filter size must be positive: {size_str!r}")
    return num_bits


def approximate_bf_size(num_kmers: int, num_hashes: int, fpr: float) -> int:
    """Bits needed to hold ``num_kmers`` keys at the target false-positive rate."""
    if not 0 < fpr < 1:
        raise ConfigError(f"fpr must be in (0, 1), got {fpr}")
    _check_positive("num_hashes (h)", num_hashes)
    if num_kmers < 1:
        return 1
    per_hash = fpr ** (1 / num_hashes)
    return max(1, math.ceil(-num_hashes * num_kmers / math.log(1 - per_hash)))
