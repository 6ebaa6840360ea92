"""Tests for canonical key derivation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UserKey:
    """Frozen dataclass key used in tests."""

    tenant: str
    user_id: int


class TestCanonicalKey:
    """Test canonical_key for hashable and composite keys."""

    def test_hashable_keys_returned_unchanged(self) -> None:
        """Test hashable keys are their own canonical key."""
        from batchloader.keys import canonical_key

        assert canonical_key(1) == 1
        assert canonical_key("user") == "user"
        assert canonical_key((1, "a")) == (1, "a")
        assert canonical_key(UserKey("acme", 1)) == UserKey("acme", 1)

    def test_dict_keys_ignore_order(self) -> None:
        """Test equal dicts map to the same canonical key."""
        from batchloader.keys import canonical_key

        assert canonical_key({"a": 1, "b": 2}) == canonical_key({"b": 2, "a": 1})
        assert canonical_key({"a": 1}) != canonical_key({"a": 2})

    def test_list_keys_keep_order(self) -> None:
        """Test list keys compare element by element."""
        from batchloader.keys import canonical_key

        assert canonical_key([1, 2]) == canonical_key([1, 2])
        assert canonical_key([1, 2]) != canonical_key([2, 1])

    def test_set_keys_ignore_order(self) -> None:
        """Test set keys are order independent."""
        from batchloader.keys import canonical_key

        assert canonical_key({3, 1, 2}) == canonical_key({1, 2, 3})

    def test_tuple_with_unhashable_member(self) -> None:
        """Test tuples holding lists fall back to structural keys."""
        from batchloader.keys import canonical_key

        key = canonical_key(("users", [1, 2]))

        assert key == canonical_key(("users", [1, 2]))
        hash(key)

    def test_structural_key_never_equals_string(self) -> None:
        """Test a serialized key does not collide with a plain string key."""
        from batchloader.keys import canonical_key

        assert canonical_key([1, 2]) != canonical_key("[1,2]")

    def test_canonical_keys_are_hashable(self) -> None:
        """Test every canonical key can be used as a dict key."""
        from batchloader.keys import canonical_key

        keys = {canonical_key({"id": 1}), canonical_key([1]), canonical_key({2})}

        assert len(keys) == 3

    def test_mixed_type_dict_keys(self) -> None:
        """Test dicts with mutually unorderable keys are supported."""
        from batchloader.keys import canonical_key

        assert canonical_key({1: "a", "b": 2}) == canonical_key({"b": 2, 1: "a"})

    def test_tuple_dict_keys(self) -> None:
        """Test dicts keyed by tuples are supported."""
        from batchloader.keys import canonical_key

        assert canonical_key({(1, 2): "x"}) == canonical_key({(1, 2): "x"})
        assert canonical_key({(1, 2): "x"}) != canonical_key({(2, 1): "x"})

    def test_key_types_are_kept_apart(self) -> None:
        """Test keys that differ only in type never compare equal."""
        from batchloader.keys import canonical_key

        assert canonical_key({1: "a"}) != canonical_key({"1": "a"})
        assert canonical_key({1, 2}) != canonical_key([1, 2])
        assert canonical_key([1, 2]) != canonical_key((1, 2))
        assert canonical_key([[1, 2]]) != canonical_key([(1, 2)])

    def test_unhashable_objects_compare_by_identity(self) -> None:
        """Test unhashable non-container objects fall back to identity."""
        from batchloader.keys import canonical_key

        class Unhashable:
            __hash__ = None  # type: ignore[assignment]

        first = Unhashable()

        assert canonical_key([first]) == canonical_key([first])
        assert canonical_key([first]) != canonical_key([Unhashable()])
