from __future__ import annotations
import hashlib
import sys
from typing import Callable
import xxhash # type: ignore

# A hash strategy maps an element to an unsigned 64-bit integer.
HashFunction = Callable[[bytes], int]


def sha256_hash64(data: bytes) -> int:
    """Hash bytes with SHA-256 and keep the first 8 digest bytes.

    The bytes are read in the native byte order of the machine, so the
    value (and therefore register placement) differs between little- and
    big-endian hosts.

    Args:
        data: Element to hash

    Returns:
        64-bit hash value as integer
    """
    digest = hashlib.sha256(data).digest()
    return int.from_bytes(digest[:8], byteorder=sys.byteorder)


class XXHash64:
    """Seeded xxHash64 strategy.

    A class rather than a closure so sketches using it can be pickled
    and shipped to worker processes.
    """

    def __init__(self, seed: int = 42):
        self.seed = seed

    def __call__(self, data: bytes) -> int:
        hasher = xxhash.xxh64(seed=self.seed)
        hasher.update(data)
        return hasher.intdigest()

    def __repr__(self) -> str:
        return f"XXHash64(seed={self.seed})"


def get_hash_function(name: str, seed: int = 42) -> HashFunction:
    """Look up a hash strategy by its command-line name."""
    if name == "sha256":
        return sha256_hash64
    elif name == "xxhash":
        return XXHash64(seed=seed)
    else:
        raise ValueError(f"Invalid hash function: {name}. Use 'sha256' or 'xxhash'")
