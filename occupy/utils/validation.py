"""Input validation utilities."""

import re


class ValidationError(Exception):
    """Validation error."""
    pass


_DURATION_PART = re.compile(r'(\d+(?:\.\d+)?)(ms|s|m|h)')

_DURATION_UNITS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value) -> float:
    """Parse a duration such as '5s', '500ms' or '1m30s' into seconds.

    Bare numbers are taken as seconds.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    text = str(value).strip().lower()
    if not text:
        raise ValidationError("Empty duration")

    try:
        return float(text)
    except ValueError:
        pass

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos != len(text):
        raise ValidationError(f"Invalid duration: {value!r}")

    return total


def validate_percent(value: float) -> bool:
    """Validate a utilization percentage."""
    return 0.0 <= value <= 100.0


def format_bytes(count: float) -> str:
    """Render a byte count with a binary unit."""
    for unit in ("B", "KiB", "MiB", "GiB"):
        if abs(count) < 1024:
            return f"{count:.1f}{unit}"
        count /= 1024
    return f"{count:.1f}TiB"
