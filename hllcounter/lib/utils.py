import gzip
from typing import Iterator, List


def read_lines(filename: str, chunk_size: int = 1000) -> Iterator[List[bytes]]:
    """Read the lines of a text file in chunks.

    Lines are returned as raw bytes without their line terminator. Empty
    lines are skipped. Files ending in ``.gz`` are decompressed on the fly.

    Args:
        filename: Path to a plain or gzip-compressed file
        chunk_size: Maximum number of lines per yielded chunk
    """
    opener = gzip.open if filename.endswith(".gz") else open

    lines = []
    with opener(filename, "rb") as file:
        for line in file:
            line = line.rstrip(b"\r\n")
            if not line:
                continue
            lines.append(line)
            if len(lines) >= chunk_size:
                yield lines
                lines = []
        if lines:  # Yield any remaining lines
            yield lines
