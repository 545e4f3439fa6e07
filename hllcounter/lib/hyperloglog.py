from __future__ import annotations
import copy
import math
import warnings
from typing import Iterable, List, Optional
import numpy as np # type: ignore
from hllcounter.lib.abstractsketch import AbstractSketch
from hllcounter.lib.errors import InvalidRegisterCount, MergeMismatch
from hllcounter.lib.hashing import HashFunction, sha256_hash64

MIN_REGISTERS = 16
HASH_BITS = 64
HASH_MASK = (1 << HASH_BITS) - 1
# Large-range correction threshold is expressed against a 32-bit hash space
TWO_32 = float(1 << 32)


def get_alpha(m: int) -> float:
    """Get alpha constant based on number of registers.

    Args:
        m: Number of registers, at least 16

    Returns:
        Bias correction constant alpha_m
    """
    if m < MIN_REGISTERS:
        # The constructor rejects these counts; reaching here is a bug.
        raise AssertionError(f"alpha is undefined for {m} registers")
    elif m <= 32:
        return 0.673
    elif m <= 64:
        return 0.697
    elif m <= 128:
        return 0.709
    else:
        return 0.7213 / (1 + 1.079 / m)


def rank(hash_val: int) -> int:
    """Leading zero bits of a 64-bit value, counted from the top, plus one.

    A value of zero has no set bit and ranks 65.
    """
    return HASH_BITS - hash_val.bit_length() + 1


class HyperLogLog(AbstractSketch):
    """HyperLogLog sketch over arbitrary byte strings.

    Each element is hashed to 64 bits. The low ``b = floor(log2 m)`` bits
    select a register (``hash & (2^b - 1)``) and the register keeps the
    largest rank seen, where the rank is the number of leading zeros of
    the full hash plus one.

    Sketches are not synchronised. ``add`` mutates the register array in
    place, so callers sharing a sketch between threads must lock around
    it. ``count``, ``error`` and ``merge`` only read. To count in
    parallel, build one sketch per worker and combine them with
    ``merge_all``.
    """

    def __init__(self,
                 num_registers: int = 1024,
                 hash_func: Optional[HashFunction] = None,
                 debug: bool = False):
        """Initialize HyperLogLog sketch.

        Args:
            num_registers: Number of registers (m), at least 16. Should be a
                           power of two; other values are accepted but only
                           the first 2^b registers are reachable.
            hash_func: Strategy mapping bytes to a 64-bit integer.
                       Defaults to SHA-256 truncated to 8 bytes.
            debug: Whether to print debug information

        Raises:
            InvalidRegisterCount: If num_registers is below 16
        """
        super().__init__()

        if isinstance(num_registers, bool) or not isinstance(num_registers, (int, np.integer)):
            raise TypeError(f"num_registers must be an integer, got {type(num_registers).__name__}")
        num_registers = int(num_registers)
        if num_registers < MIN_REGISTERS:
            raise InvalidRegisterCount(
                f"num_registers must be at least {MIN_REGISTERS}, got {num_registers}")
        if num_registers & (num_registers - 1):
            warnings.warn(f"num_registers={num_registers} is not a power of two. "
                          f"Only the first {1 << (num_registers.bit_length() - 1)} registers will be used.",
                          RuntimeWarning)

        self._m = num_registers
        self._b = num_registers.bit_length() - 1  # floor(log2(m))
        self._alpha = get_alpha(num_registers)
        self.registers = np.zeros(num_registers, dtype=np.uint8)
        self.hash_func = hash_func if hash_func is not None else sha256_hash64
        self.debug = debug

        if self.debug:
            print(f"Debug HyperLogLog init: m={self._m}, b={self._b}, alpha={self._alpha:.6f}, "
                  f"hash={getattr(self.hash_func, '__name__', repr(self.hash_func))}")

    @property
    def num_registers(self) -> int:
        return self._m

    @property
    def b(self) -> int:
        """Number of low hash bits used as the register index."""
        return self._b

    @property
    def alpha(self) -> float:
        return self._alpha

    def add(self, element: bytes) -> None:
        """Present an element to the sketch.

        Args:
            element: Bytes to add; duplicates never change the registers
        """
        hash_val = int(self.hash_func(element)) & HASH_MASK
        idx = hash_val & ((1 << self._b) - 1)
        r = rank(hash_val)
        if r > self.registers[idx]:
            self.registers[idx] = r

    def raw_estimate(self) -> float:
        """Calculate the harmonic-mean estimate before range corrections.

        Returns:
            alpha * m^2 / sum(2^-register)
        """
        z = 1.0 / np.sum(np.exp2(-self.registers.astype(np.float64)))
        return float(self._alpha * float(self._m * self._m) * z)

    def _correction(self, estimate: float) -> float:
        """Apply small- and large-range corrections to a raw estimate.

        Both corrections use base-10 logarithms.
        """
        m = float(self._m)
        if estimate < (2.0 / 5) * m:
            zeros = int(np.count_nonzero(self.registers == 0))
            if zeros != 0:
                estimate = m * math.log10(m / zeros)
        elif estimate > (1.0 / 30) * TWO_32:
            # Past 2^32 the log argument is non-positive and this yields inf/nan
            with np.errstate(divide='ignore', invalid='ignore'):
                estimate = float(-TWO_32 * np.log10(1.0 - estimate / TWO_32))
        return estimate

    def count(self) -> float:
        """Estimate the number of distinct elements added.

        Returns:
            Estimated cardinality; 0.0 for a sketch nothing was added to
        """
        if self.is_empty():
            return 0.0
        raw = self.raw_estimate()
        estimate = self._correction(raw)
        if self.debug:
            print(f"DEBUG: raw={raw:.3f}, corrected={estimate:.3f}, "
                  f"zero_registers={int(np.count_nonzero(self.registers == 0))}")
        return estimate

    def merge(self, other: 'HyperLogLog') -> 'HyperLogLog':
        """Merge another sketch with this one into a new sketch.

        The result holds the element-wise maximum of both register arrays
        and estimates the cardinality of the union. Neither input is
        modified. The result uses this sketch's hash function.

        Args:
            other: Another HyperLogLog sketch with the same register count

        Returns:
            New HyperLogLog sketch

        Raises:
            MergeMismatch: If the sketches have different register counts
        """
        if not isinstance(other, HyperLogLog):
            raise TypeError("Can only merge with another HyperLogLog sketch")
        if self._m != other._m:
            raise MergeMismatch(
                f"Cannot merge HyperLogLog sketches with different register counts "
                f"({self._m} vs {other._m})")

        # Shallow copy skips the constructor warnings and debug output
        merged = copy.copy(self)
        merged.registers = np.maximum(self.registers, other.registers)
        return merged

    def copy(self) -> 'HyperLogLog':
        """Return an independent sketch with the same registers."""
        return self.merge(self)

    def error(self) -> float:
        """Standard error figure, 1.04 * sqrt(m).

        Note this grows with the register count. Use ``relative_error`` for
        the textbook relative standard error.
        """
        return 1.04 * math.sqrt(self._m)

    def relative_error(self) -> float:
        """Relative standard error 1.04 / sqrt(m) from the HyperLogLog paper."""
        return 1.04 / math.sqrt(self._m)

    def is_empty(self) -> bool:
        """Check if sketch is empty."""
        return not self.registers.any()

    def write(self, filepath: str) -> None:
        """Write sketch to file in compressed numpy format.

        The hash function is not stored; pass the same one to ``load``.

        Args:
            filepath: Path to output file (numpy appends .npz if missing)
        """
        np.savez_compressed(
            filepath,
            registers=self.registers,
            num_registers=np.array([self._m])
        )

    @classmethod
    def load(cls,
             filepath: str,
             hash_func: Optional[HashFunction] = None,
             debug: bool = False) -> 'HyperLogLog':
        """Load sketch from file written by ``write``.

        Args:
            filepath: Path to input file
            hash_func: Hash function to attach to the loaded sketch
            debug: Whether to print debug information

        Returns:
            HyperLogLog object loaded from file
        """
        with np.load(filepath) as data:
            registers = data['registers']
            num_registers = int(data['num_registers'][0])

        sketch = cls(num_registers, hash_func=hash_func, debug=debug)
        if registers.shape != (num_registers,):
            raise InvalidRegisterCount(
                f"Sketch file {filepath} holds {registers.size} registers, expected {num_registers}")
        sketch.registers = registers.astype(np.uint8)
        return sketch

    def __repr__(self) -> str:
        return f"HyperLogLog(num_registers={self._m})"


def merge(a: HyperLogLog, b: HyperLogLog) -> HyperLogLog:
    """Union of two compatible sketches as a new sketch."""
    return a.merge(b)


def merge_all(sketches: Iterable[HyperLogLog]) -> HyperLogLog:
    """Reduce sketches to their union by merging pairwise in a tree.

    Args:
        sketches: One or more sketches with the same register count

    Returns:
        New sketch; the inputs are not modified

    Raises:
        ValueError: If no sketches are given
        MergeMismatch: If register counts differ
    """
    level: List[HyperLogLog] = list(sketches)
    if not level:
        raise ValueError("Need at least one sketch to merge")
    if len(level) == 1:
        return level[0].copy()

    while len(level) > 1:
        paired = [level[i].merge(level[i + 1]) for i in range(0, len(level) - 1, 2)]
        if len(level) % 2:
            paired.append(level[-1])
        level = paired
    return level[0]
