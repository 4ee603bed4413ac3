import numpy as np
import numpy.typing

from .config import ConfigError, validate_k
from .partition import Region

ALPHABET = "ACGT"
INVALID = 255

# A=0, C=1, G=2, T=3; lowercase (soft-masked) bases share the uppercase code
_BASE_MAP = np.full(256, INVALID, dtype=np.uint8)
for _code, _base in enumerate(ALPHABET):
    _BASE_MAP[ord(_base)] = _code
    _BASE_MAP[ord(_base.lower())] = _code

_TWO = np.uint64(2)
_LOW_BITS = np.uint64(3)


def encode(window: str) -> int | None:
    """Pack a window into a key, most significant bits first.

    Returns None when the window holds a symbol outside the alphabet.
    """
    if len(window) == 0 or len(window) > 32:
        raise ConfigError(f"window length must be in [1, 32], got {len(window)}")
    key = 0
    for symbol in window:
        code = _BASE_MAP[ord(symbol)] if ord(symbol) < 256 else INVALID
        if code == INVALID:
            return None
        key = (key << 2) | int(code)
    return key


def decode(key: int, k: int) -> str:
    validate_k(k)
    key = int(key)
    return "".join(ALPHABET[(key >> (2 * (k - 1 - i))) & 3] for i in range(k))


def to_codes(sequence: str | bytes) -> numpy.typing.NDArray[np.uint8]:
    if isinstance(sequence, str):
        # one byte per symbol; anything non-ascii becomes '?'
        sequence = sequence.encode("ascii", errors="replace")
    codes = _BASE_MAP[np.frombuffer(sequence, dtype=np.uint8)]
    codes.setflags(write=False)
    return codes


def encode_windows(
    codes: numpy.typing.NDArray[np.uint8], k: int
) -> tuple[numpy.typing.NDArray[np.uint64], numpy.typing.NDArray[np.bool_]]:
    """Keys and validity flags for every stride-1 window of ``codes``."""
    n = codes.shape[0] - k + 1
    if n <= 0:
        return np.empty(0, dtype=np.uint64), np.empty(0, dtype=np.bool_)
    invalid = np.concatenate(([0], np.cumsum(codes == INVALID)))
    valid = (invalid[k:] - invalid[:-k]) == 0
    values = codes.astype(np.uint64) & _LOW_BITS
    keys = np.zeros(n, dtype=np.uint64)
    for j in range(k):
        keys = (keys << _TWO) | values[j : j + n]
    return keys, valid


def region_keys(
    codes: numpy.typing.NDArray[np.uint8], region: Region, k: int
) -> tuple[numpy.typing.NDArray[np.uint64], int]:
    """Valid keys of one region in sequence order, plus the skipped window count."""
    keys, valid = encode_windows(codes[region.start : region.stop], k)
    num_valid = int(np.count_nonzero(valid))
    if num_valid == keys.shape[0]:
        return keys, 0
    return keys[valid], keys.shape[0] - num_valid
