import random
import string
import pytest # type: ignore

def pytest_configure(config):
    """Add markers to the pytest configuration."""
    config.addinivalue_line("markers", "quick: mark test as quick to run")
    config.addinivalue_line("markers", "full: mark test as part of the full test suite")
    config.addinivalue_line("markers", "slow: mark test as very slow to run")

def random_words(n: int, seed: int = 42, min_len: int = 5, max_len: int = 10) -> list:
    """Generate n random lowercase byte strings with lengths in [min_len, max_len]."""
    rng = random.Random(seed)
    letters = string.ascii_lowercase
    return [
        ''.join(rng.choice(letters) for _ in range(rng.randint(min_len, max_len))).encode()
        for _ in range(n)
    ]
