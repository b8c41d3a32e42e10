"""Open-addressing hash maps with tombstone deletion and pluggable keys."""

from __future__ import annotations

import operator
from collections.abc import Callable, Hashable, Iterator
from typing import Any

_EMPTY = 0
_FILLED = 1
_TOMBSTONE = 2

_MASK64 = (1 << 64) - 1
_MIN_BUCKETS = 8

_MISSING: Any = object()


def _min_buckets_for_entries(entries: int) -> int:
    """Smallest power-of-two bucket count that holds ``entries`` below 3/4 load."""
    buckets = _MIN_BUCKETS
    while entries * 4 >= buckets * 3:
        buckets *= 2
    return buckets


class HashMap:
    """A linear-probing hash map driven by user-supplied hash and equality functions."""

    def __init__(
        self,
        hash_fn: Callable[[Any], int],
        equal_fn: Callable[[Any, Any], bool],
        initial_capacity: int = 16,
    ) -> None:
        if hash_fn is None or equal_fn is None:
            raise TypeError("hash_fn and equal_fn are required")
        initial_capacity = operator.index(initial_capacity)
        if initial_capacity < 0:
            raise ValueError("initial capacity cannot be negative")
        self._hash_fn = hash_fn
        self._equal_fn = equal_fn
        self._num_entries = 0
        self._num_tombstones = 0
        self._allocate(_min_buckets_for_entries(initial_capacity))

    def _allocate(self, num_buckets: int) -> None:
        self._keys: list[Any] = [None] * num_buckets
        self._values: list[Any] = [None] * num_buckets
        self._states = bytearray(num_buckets)

    # --- key hooks ---

    def _lookup_key(self, key: Any) -> Any:
        return key

    def _store_key(self, key: Any) -> Any:
        return key

    # --- probing core ---

    def _find(self, key: Any) -> tuple[bool, int]:
        num_buckets = len(self._states)
        mask = num_buckets - 1
        index = (self._hash_fn(key) & _MASK64) & mask
        first_tombstone: int | None = None
        for _ in range(num_buckets):
            state = self._states[index]
            if state == _EMPTY:
                return False, index if first_tombstone is None else first_tombstone
            if state == _FILLED:
                if self._equal_fn(self._keys[index], key):
                    return True, index
            elif first_tombstone is None:
                first_tombstone = index
            index = (index + 1) & mask
        if first_tombstone is None:
            raise RuntimeError("hash map has no free bucket")
        return False, first_tombstone

    def _grow(self) -> None:
        old = [
            (k, v)
            for k, v, s in zip(self._keys, self._values, self._states)
            if s == _FILLED
        ]
        current = len(self._states)
        if self._num_tombstones > self._num_entries:
            target = current
        else:
            target = current * 2
        target = max(target, _min_buckets_for_entries(self._num_entries + 1))
        self._allocate(target)
        self._num_tombstones = 0
        mask = target - 1
        for key, value in old:
            index = (self._hash_fn(key) & _MASK64) & mask
            while self._states[index] != _EMPTY:
                index = (index + 1) & mask
            self._keys[index] = key
            self._values[index] = value
            self._states[index] = _FILLED

    def _insert(self, key: Any, value: Any, stored_key: Any) -> None:
        found, index = self._find(key)
        if found:
            self._values[index] = value
            return
        total_load = self._num_entries + self._num_tombstones + 1
        if total_load * 4 >= len(self._states) * 3:
            self._grow()
            found, index = self._find(key)
        if self._states[index] == _TOMBSTONE:
            self._num_tombstones -= 1
        self._keys[index] = stored_key
        self._values[index] = value
        self._states[index] = _FILLED
        self._num_entries += 1

    # --- public API ---

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the value for ``key``, or ``default`` when absent."""
        found, index = self._find(self._lookup_key(key))
        return self._values[index] if found else default

    def put(self, key: Any, value: Any) -> None:
        """Insert ``key`` or overwrite its value."""
        lookup = self._lookup_key(key)
        self._insert(lookup, value, self._store_key(lookup))

    def remove(self, key: Any) -> bool:
        """Delete ``key``; return whether it was present."""
        found, index = self._find(self._lookup_key(key))
        if not found:
            return False
        self._states[index] = _TOMBSTONE
        self._keys[index] = None
        self._values[index] = None
        self._num_entries -= 1
        self._num_tombstones += 1
        return True

    def items(self) -> Iterator[tuple[Any, Any]]:
        """Yield ``(key, value)`` pairs in bucket order."""
        for key, value, state in zip(self._keys, self._values, self._states):
            if state == _FILLED:
                yield key, value

    @property
    def bucket_count(self) -> int:
        """Number of buckets currently allocated (always a power of two)."""
        return len(self._states)

    def __contains__(self, key: object) -> bool:
        return self._find(self._lookup_key(key))[0]

    def __len__(self) -> int:
        return self._num_entries

    def __iter__(self) -> Iterator[Any]:
        for key, _ in self.items():
            yield key

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


class PtrHashMap(HashMap):
    """A hash map keyed on object identity."""

    def __init__(self, initial_capacity: int = 16) -> None:
        super().__init__(id, operator.is_, initial_capacity)


def _bytes_hash(key: Any) -> int:
    return hash(bytes(key))


def _bytes_equal(a: Any, b: Any) -> bool:
    return len(a) == len(b) and (a is b or bytes(a) == bytes(b))


class StrHashMap(HashMap):
    """A hash map keyed on byte strings; text keys are compared as UTF-8."""

    def __init__(self, initial_capacity: int = 16) -> None:
        super().__init__(_bytes_hash, _bytes_equal, initial_capacity)

    def _lookup_key(self, key: Any) -> Any:
        if isinstance(key, str):
            return key.encode("utf-8")
        if isinstance(key, (bytes, bytearray, memoryview)):
            return key
        raise TypeError(f"StrHashMap keys must be str or bytes-like, not {type(key).__name__}")

    def _store_key(self, key: Any) -> bytes:
        return bytes(key)

    def put_preallocated_key(self, key: Hashable | bytes | memoryview, value: Any) -> None:
        """Insert without copying the key; the caller keeps it alive and unchanged."""
        lookup = self._lookup_key(key)
        self._insert(lookup, value, lookup)