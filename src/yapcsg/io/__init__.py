"""Serialization helpers for yapcsg solids."""

from yapcsg.io.compact import (
    from_compact_binary,
    from_object,
    to_compact_binary,
    to_object,
)

__all__ = [
    'from_compact_binary',
    'from_object',
    'to_compact_binary',
    'to_object',
]
