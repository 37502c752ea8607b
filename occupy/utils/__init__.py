"""Utility functions and helpers.

- Logging configuration
- Duration parsing and value validation

Usage:
    from occupy.utils import setup_logging, parse_duration

    setup_logging(debug_mode=True, log_level="DEBUG")
    interval = parse_duration("1m30s")
"""

from occupy.utils.logging_config import setup_logging
from occupy.utils.validation import (
    ValidationError,
    parse_duration,
    validate_percent,
    format_bytes,
)

__all__ = [
    # Logging
    "setup_logging",

    # Validation
    "ValidationError",
    "parse_duration",
    "validate_percent",
    "format_bytes",
]
