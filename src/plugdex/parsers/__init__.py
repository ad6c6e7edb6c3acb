"""Descriptor file format readers."""

from plugdex.parsers.ron import RonDecodeError, loads

__all__ = ["RonDecodeError", "loads"]
