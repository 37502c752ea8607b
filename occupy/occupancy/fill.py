"""Deterministic fill pattern for occupied memory and padding files."""

# 1 MiB of repeating 0..255
PATTERN = bytes(range(256)) * 4096


def fill(buffer: bytearray) -> None:
    """Write every byte of buffer with the repeating pattern."""
    step = len(PATTERN)
    size = len(buffer)
    for offset in range(0, size, step):
        end = min(offset + step, size)
        buffer[offset:end] = PATTERN[:end - offset]


def pattern_bytes(size: int) -> bytes:
    """Return size bytes of the pattern, starting at 0."""
    repeats, rest = divmod(size, len(PATTERN))
    return PATTERN * repeats + PATTERN[:rest]
