from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable, Union


class AbstractSketch(ABC):
    """Base class for cardinality sketches.

    Subclasses consume raw bytes through ``add``; the string and batch
    helpers here only normalise their input to bytes.
    """

    @abstractmethod
    def add(self, element: bytes) -> None:
        """Present an element to the sketch."""
        pass

    @abstractmethod
    def count(self) -> float:
        """Estimate the number of distinct elements presented."""
        pass

    @abstractmethod
    def merge(self, other: 'AbstractSketch') -> 'AbstractSketch':
        """Return a new sketch representing the union with another sketch."""
        pass

    @abstractmethod
    def error(self) -> float:
        """Standard-error figure reported for this sketch."""
        pass

    @abstractmethod
    def write(self, filepath: str) -> None:
        """Write sketch to file."""
        pass

    def add_string(self, s: str) -> None:
        """Add a string to the sketch as its UTF-8 encoding.

        Args:
            s: String to add to the sketch
        """
        self.add(s.encode('utf-8'))

    def add_int(self, value: int) -> None:
        """Add an integer to the sketch as 8 little-endian bytes.

        Args:
            value: Integer in the unsigned 64-bit range
        """
        self.add(value.to_bytes(8, byteorder='little'))

    def add_batch(self, items: Iterable[Union[bytes, str]]) -> None:
        """Add multiple elements to the sketch.

        Args:
            items: Bytes or strings; strings are UTF-8 encoded
        """
        for item in items:
            if isinstance(item, str):
                self.add_string(item)
            else:
                self.add(item)
