"""Human-readable counters for chain statistics."""

from __future__ import annotations

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_bytes(value: int | float, decimals: int = 2) -> str:
    """Format a byte counter with binary multiples.

    Example:
        >>> format_bytes(1536)
        '1.5 KB'
        >>> format_bytes(0)
        '0 B'
    """
    if value <= 0:
        return "0 B"

    size = float(value)
    unit = 0
    while size >= 1024 and unit < len(BYTE_UNITS) - 1:
        size /= 1024
        unit += 1

    text = f"{size:.{decimals}f}".rstrip("0").rstrip(".")
    return f"{text} {BYTE_UNITS[unit]}"


def format_count(value: int) -> str:
    """Thousands-separated integer, e.g. packet counters."""
    return f"{value:,}"
