"""Fixed-size bit sets used by the dataflow analyses."""

from __future__ import annotations

import operator
from collections.abc import Iterator


class Bitset:
    """A set of bit indices in ``range(num_bits)``, stored as one integer."""

    __slots__ = ("_num_bits", "_bits")

    def __init__(self, num_bits: int) -> None:
        num_bits = operator.index(num_bits)
        if num_bits < 0:
            raise ValueError("Bitset size cannot be negative")
        self._num_bits = num_bits
        self._bits = 0

    @classmethod
    def full(cls, num_bits: int) -> Bitset:
        """Create a bitset with every bit set."""
        bs = cls(num_bits)
        bs.set_all()
        return bs

    @property
    def _mask(self) -> int:
        return (1 << self._num_bits) - 1

    def _check_index(self, bit: int) -> int:
        bit = operator.index(bit)
        if not 0 <= bit < self._num_bits:
            raise IndexError(f"Bitset index {bit} out of bounds for size {self._num_bits}")
        return bit

    def _check_same_size(self, other: Bitset) -> None:
        if not isinstance(other, Bitset):
            raise TypeError(f"expected Bitset, got {type(other).__name__}")
        if other._num_bits != self._num_bits:
            raise ValueError(
                f"Bitset size mismatch: {self._num_bits} vs {other._num_bits}"
            )

    def set(self, bit: int) -> None:
        """Set one bit."""
        self._bits |= 1 << self._check_index(bit)

    def clear(self, bit: int) -> None:
        """Clear one bit."""
        self._bits &= ~(1 << self._check_index(bit))

    def test(self, bit: int) -> bool:
        """Return whether one bit is set."""
        return bool(self._bits >> self._check_index(bit) & 1)

    def set_all(self) -> None:
        """Set every bit in range."""
        self._bits = self._mask

    def clear_all(self) -> None:
        """Clear every bit."""
        self._bits = 0

    def copy_from(self, other: Bitset) -> None:
        """Overwrite this bitset with the contents of a same-sized one."""
        self._check_same_size(other)
        self._bits = other._bits

    def _derived(self, bits: int) -> Bitset:
        result = Bitset(self._num_bits)
        result._bits = bits & self._mask
        return result

    def intersection(self, other: Bitset) -> Bitset:
        """Return a new bitset holding the bits set in both."""
        self._check_same_size(other)
        return self._derived(self._bits & other._bits)

    def union(self, other: Bitset) -> Bitset:
        """Return a new bitset holding the bits set in either."""
        self._check_same_size(other)
        return self._derived(self._bits | other._bits)

    def difference(self, other: Bitset) -> Bitset:
        """Return a new bitset holding the bits set here but not in ``other``."""
        self._check_same_size(other)
        return self._derived(self._bits & ~other._bits)

    def count(self) -> int:
        """Return the number of set bits."""
        return (self._bits & self._mask).bit_count()

    def __iter__(self) -> Iterator[int]:
        """Yield the indices of set bits in increasing order."""
        bits = self._bits
        while bits:
            low = bits & -bits
            yield low.bit_length() - 1
            bits ^= low

    def __contains__(self, bit: object) -> bool:
        try:
            index = operator.index(bit)  # type: ignore[arg-type]
        except TypeError:
            return False
        if not 0 <= index < self._num_bits:
            return False
        return bool(self._bits >> index & 1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitset):
            return NotImplemented
        return self._num_bits == other._num_bits and self._bits == other._bits

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        """Return the capacity in bits, not the number of set bits."""
        return self._num_bits

    def __repr__(self) -> str:
        return f"Bitset({self._num_bits}, set={list(self)})"