# calir

Small data structures for compiler passes: a fixed-size bitset, a bump
arena with chunked growth and an optional allocation limit, and
open-addressing hash maps keyed by identity, byte strings, fixed-width
integers or floats.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Bitset

`calir.bitset.Bitset` is a set of bit positions `0 .. num_bits - 1`.

```python
from calir.bitset import Bitset

live = Bitset(100)
live.set(3)
live.set(70)
assert live.test(3) and 70 in live
assert live.count() == 2
assert list(live) == [3, 70]

everything = Bitset.full(100)
dead = everything.difference(live)
assert dead.count() == 98
assert len(dead) == 100   # capacity in bits, not the number set
```

`set`, `clear` and `test` raise `IndexError` for a position outside the
set; `in` simply answers `False`. `intersection`, `union` and `difference`
return new bitsets and need operands of the same size, otherwise they raise
`ValueError`. `copy_from` overwrites one bitset with another of the same
size, and `set_all` / `clear_all` fill or empty it. Two bitsets are equal
when they have the same size and the same bits set; bitsets are not
hashable.

## Bump arena

`calir.bump.Bump` hands out aligned, writable `memoryview` regions from
chunks that grow geometrically (the first chunk holds about 4 KiB). Chunks
are released all at once with `reset` (keeps only the newest chunk, emptied)
or `destroy` (releases everything), or by using the arena as a context
manager.

```python
from calir.bump import Bump, AllocationError

with Bump(min_align=1) as arena:
    region = arena.alloc(64, 8)        # 64 writable bytes
    copy = arena.alloc_copy(b"abc")
    name = arena.alloc_str("entry")    # UTF-8 bytes plus a NUL terminator
    print(arena.allocated_bytes, arena.chunk_count)
```

`min_align` must be a power of two no larger than 16, else `ValueError`.
An `align` that is not a power of two is treated as 1, and a zero-size
request returns an empty view. `allocated_bytes` and `chunk_count` are
read-only properties. `allocation_limit` is a property that is `None` by
default; set it to cap the total usable bytes. An allocation that cannot
fit under the limit raises `AllocationError` (a `MemoryError`).

## Hash maps

`calir.hashmap.HashMap` is a linear-probing map with tombstone deletion,
built from a hash function and an equality function. It grows to keep the
load below three quarters; `bucket_count` is always a power of two.

- `get(key, default=None)`, `put(key, value)`, `remove(key)` (returns
  whether the key was present)
- `items()` yields `(key, value)` pairs in bucket order; iterating the map
  yields its keys; `len` and `in` work as usual

`PtrHashMap` keys by object identity. `StrHashMap` keys by byte contents:
`str` keys are encoded as UTF-8, bytes-like keys are used as they are, and
anything else raises `TypeError`. `put` stores a copy of the key;
`put_preallocated_key` stores the key object itself.

```python
from calir.hashmap import PtrHashMap, StrHashMap

names = StrHashMap(16)
names.put("x", 1)
assert names.get(b"x") == 1
assert "y" not in names
assert names.remove("x")
assert len(names) == 0

by_node = PtrHashMap(16)
node = object()
by_node.put(node, "phi")
assert by_node.get(node) == "phi"
```

## Numeric hash maps

`calir.numeric_hashmap` provides `IntHashMap` and `FloatHashMap`.

`IntHashMap(kind=IntKind.I64)` accepts integer keys within the range of its
`IntKind` (`I8`, `U8`, `I16`, `U16`, `I32`, `U32`, `I64`, `U64`, `SIZE`,
`IPTR`, `UPTR`; each has `min` and `max`). A key outside the range raises
`OverflowError`, a non-integer raises `TypeError`; `in` answers `False` for
either.

`FloatHashMap(kind=FloatKind.F64)` rounds keys to its `FloatKind` width
(`F32` or `F64`). `-0.0` and `0.0` are the same key, and every NaN is one
key. Strings, bytes and `None` are rejected with `TypeError`.

```python
from calir.numeric_hashmap import FloatHashMap, FloatKind, IntHashMap, IntKind

small = IntHashMap(IntKind.U8)
small.put(255, "max")
assert 256 not in small

floats = FloatHashMap(FloatKind.F32)
floats.put(0.1, "tenth")
assert floats.get(-0.0) is None
```

## What this package does not include

It holds only these data structures. It has no intermediate representation,
no verifier, no control-flow or dominance analyses and no transformation
passes, and it provides no command-line program.