"""
hllcounter - Python Library for HyperLogLog Distinct Counting
"""

from hllcounter.lib.hyperloglog import HyperLogLog, merge, merge_all
from hllcounter.lib.errors import InvalidRegisterCount, MergeMismatch
from hllcounter.lib.hashing import XXHash64, sha256_hash64

__version__ = '0.1.0'

__all__ = [
    'HyperLogLog',
    'InvalidRegisterCount',
    'MergeMismatch',
    'XXHash64',
    'merge',
    'merge_all',
    'sha256_hash64'
]
