"""Canonical key derivation for request deduplication.

Two requests share a future when their canonical keys are equal. Hashable
keys are their own canonical key, so ints, strings, tuples and frozen
dataclasses deduplicate by value. Unhashable composite keys (dicts, lists,
sets) are rebuilt into a hashable, type-tagged structure so that
structurally equal keys deduplicate even when they are distinct objects,
while a list never matches a set or a tuple with the same items.
Unhashable objects of any other type fall back to identity.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping

__all__: list[str] = ["canonical_key"]

# Tags structural keys so they never equal a plain key
_STRUCTURAL = object()


def _structural(value: object) -> Hashable:
    """Return a hashable, type-tagged form of *value*."""
    if isinstance(value, Mapping):
        items = frozenset((_structural(k), _structural(v)) for k, v in value.items())
        return (_STRUCTURAL, "mapping", items)
    if isinstance(value, (set, frozenset)):
        return (_STRUCTURAL, "set", frozenset(_structural(item) for item in value))
    if isinstance(value, (list, tuple)):
        return (_STRUCTURAL, type(value).__name__, tuple(_structural(item) for item in value))

    try:
        hash(value)
    except TypeError:
        return (_STRUCTURAL, "identity", id(value))
    return value  # type: ignore[return-value]


def canonical_key(key: object) -> Hashable:
    """Return the deduplication key for *key*.

    Args:
        key: The key passed to ``request()``.

    Returns:
        ``key`` itself when hashable, otherwise its tagged structural form.
    """
    try:
        hash(key)
    except TypeError:
        return _structural(key)
    return key  # type: ignore[return-value]
