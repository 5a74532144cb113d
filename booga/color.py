"""Color helpers."""

from __future__ import annotations


def hex_to_rgba(value: int) -> tuple[float, float, float, float]:
    """Split a 0xRRGGBBAA integer into normalized (r, g, b, a) components."""
    r = (value >> 24) & 0xFF
    g = (value >> 16) & 0xFF
    b = (value >> 8) & 0xFF
    a = value & 0xFF
    return (r / 255.0, g / 255.0, b / 255.0, a / 255.0)