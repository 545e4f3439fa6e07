from .abstractsketch import AbstractSketch
from .errors import InvalidRegisterCount, MergeMismatch
from .hashing import HashFunction, XXHash64, get_hash_function, sha256_hash64
from .hyperloglog import HyperLogLog, get_alpha, merge, merge_all, rank

__all__ = [
    'AbstractSketch',
    'HashFunction',
    'HyperLogLog',
    'InvalidRegisterCount',
    'MergeMismatch',
    'XXHash64',
    'get_alpha',
    'get_hash_function',
    'merge',
    'merge_all',
    'rank',
    'sha256_hash64'
]
