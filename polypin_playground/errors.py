"""Error kinds recovered locally by the editor session."""
from __future__ import annotations


class EditorError(Exception):
    """Base class for every recoverable editor failure."""


class FormatError(EditorError):
    """Import payload is not valid JSON, not a list, too short, or malformed."""


class DecodeError(EditorError):
    """A background image could not be read or decoded."""


__all__ = ["EditorError", "FormatError", "DecodeError"]
