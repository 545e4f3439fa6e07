class InvalidRegisterCount(ValueError):
    """Raised when a sketch is created with fewer than the minimum number of registers."""


class MergeMismatch(ValueError):
    """Raised when merging sketches with different register counts."""
