"""Hash maps keyed on fixed-width integers and IEEE floating-point numbers."""

from __future__ import annotations

import enum
import math
import operator
import struct
from typing import Any

from calir.hashmap import HashMap


class IntKind(enum.Enum):
    """The integer key widths a map can be specialised for."""

    I8 = ("i8", 8, True)
    U8 = ("u8", 8, False)
    I16 = ("i16", 16, True)
    U16 = ("u16", 16, False)
    I32 = ("i32", 32, True)
    U32 = ("u32", 32, False)
    I64 = ("i64", 64, True)
    U64 = ("u64", 64, False)
    SIZE = ("sz", 64, False)
    IPTR = ("iptr", 64, True)
    UPTR = ("uptr", 64, False)

    def __init__(self, prefix: str, bits: int, signed: bool) -> None:
        self.prefix = prefix
        self.bits = bits
        self.signed = signed

    @property
    def min(self) -> int:
        """Smallest representable key."""
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        """Largest representable key."""
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1


class FloatKind(enum.Enum):
    """The floating-point key widths a map can be specialised for."""

    F32 = ("f32", "<f", "<I")
    F64 = ("f64", "<d", "<Q")

    def __init__(self, prefix: str, float_format: str, bits_format: str) -> None:
        self.prefix = prefix
        self.float_format = float_format
        self.bits_format = bits_format

    def bits_of(self, value: float) -> int:
        """Return the raw bit pattern of ``value`` at this width."""
        return struct.unpack(self.bits_format, struct.pack(self.float_format, value))[0]

    def round(self, value: float) -> float:
        """Round ``value`` to the nearest number representable at this width."""
        return struct.unpack(self.float_format, struct.pack(self.float_format, value))[0]


def _int_equal(a: int, b: int) -> bool:
    return a == b


class IntHashMap(HashMap):
    """A hash map whose keys are integers of one fixed width."""

    def __init__(self, kind: IntKind = IntKind.I64, initial_capacity: int = 16) -> None:
        if not isinstance(kind, IntKind):
            raise TypeError(f"expected IntKind, got {type(kind).__name__}")
        self.kind = kind
        super().__init__(hash, _int_equal, initial_capacity)

    def _lookup_key(self, key: Any) -> int:
        if isinstance(key, bool):
            key = int(key)
        value = operator.index(key)
        if not self.kind.min <= value <= self.kind.max:
            raise OverflowError(
                f"key {value} out of range for {self.kind.prefix} "
                f"[{self.kind.min}, {self.kind.max}]"
            )
        return value

    def put(self, key: int, value: Any) -> None:
        """Insert ``key`` or overwrite its value; the key must fit the map's width."""
        super().put(key, value)

    def __contains__(self, key: object) -> bool:
        try:
            lookup = self._lookup_key(key)
        except (TypeError, OverflowError):
            return False
        return self._find(lookup)[0]


class FloatHashMap(HashMap):
    """A hash map whose keys are floats of one fixed width.

    Keys are rounded to the map's width; ``-0.0`` and ``0.0`` are one key,
    and every NaN is one key.
    """

    def __init__(self, kind: FloatKind = FloatKind.F64, initial_capacity: int = 16) -> None:
        if not isinstance(kind, FloatKind):
            raise TypeError(f"expected FloatKind, got {type(kind).__name__}")
        self.kind = kind
        super().__init__(self._bits_hash, self._bits_equal, initial_capacity)

    def _bits_hash(self, key: float) -> int:
        return hash(self.kind.bits_of(key))

    def _bits_equal(self, a: float, b: float) -> bool:
        return self.kind.bits_of(a) == self.kind.bits_of(b)

    def _lookup_key(self, key: Any) -> float:
        if isinstance(key, (str, bytes, bytearray)) or key is None:
            raise TypeError(f"FloatHashMap keys must be numbers, not {type(key).__name__}")
        value = float(key)
        if math.isnan(value):
            return math.nan
        value = self.kind.round(value)
        if value == 0.0:
            return 0.0
        return value

    def put(self, key: float, value: Any) -> None:
        """Insert ``key`` (rounded to the map's width) or overwrite its value."""
        super().put(key, value)

    def __contains__(self, key: object) -> bool:
        try:
            lookup = self._lookup_key(key)
        except (TypeError, ValueError, OverflowError):
            return False
        return self._find(lookup)[0]