"""Shared utilities"""

from .hashing import (
    canonicalize,
    canonicalize_and_hash
)

__all__ = [
    "canonicalize",
    "canonicalize_and_hash"
]
