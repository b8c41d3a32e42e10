"""A chunked bump allocator handing out views into arena memory."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType

CHUNK_ALIGN = 16
# A chunk footer holds five pointer-sized fields.
FOOTER_SIZE = (5 * 8 + CHUNK_ALIGN - 1) & ~(CHUNK_ALIGN - 1)
DEFAULT_CHUNK_SIZE_WITHOUT_FOOTER = 4096 - FOOTER_SIZE

_BASE_ADDRESS = 0x10000


class AllocationError(MemoryError):
    """Raised when an allocation cannot be satisfied."""


def _is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def _round_up(n: int, divisor: int) -> int:
    return (n + divisor - 1) & ~(divisor - 1)


def _round_down(n: int, divisor: int) -> int:
    return n & ~(divisor - 1)


@dataclass
class _Chunk:
    base: int
    data: bytearray
    usable: int
    chunk_size: int
    ptr: int
    allocated_bytes: int


class Bump:
    """Allocates downward from the end of chunks that grow geometrically."""

    def __init__(self, min_align: int = 1) -> None:
        if not _is_power_of_two(min_align):
            raise ValueError("min_align must be a power of two")
        if min_align > CHUNK_ALIGN:
            raise ValueError(f"min_align cannot be larger than CHUNK_ALIGN ({CHUNK_ALIGN})")
        self._min_align = min_align
        self._chunks: list[_Chunk] = []
        self._limit: int | None = None
        self._next_address = _BASE_ADDRESS

    # --- capacity and limits ---

    @property
    def allocated_bytes(self) -> int:
        """Total usable bytes of all live chunks."""
        return self._chunks[-1].allocated_bytes if self._chunks else 0

    @property
    def allocation_limit(self) -> int | None:
        """Upper bound on ``allocated_bytes``, or ``None`` for no limit."""
        return self._limit

    @allocation_limit.setter
    def allocation_limit(self, limit: int | None) -> None:
        if limit is not None and limit < 0:
            raise ValueError("allocation limit cannot be negative")
        self._limit = limit

    @property
    def chunk_count(self) -> int:
        """Number of chunks currently held."""
        return len(self._chunks)

    # --- lifecycle ---

    def reset(self) -> None:
        """Free all chunks except the newest and make it empty again."""
        if not self._chunks:
            return
        current = self._chunks[-1]
        self._chunks = [current]
        current.ptr = _round_down(current.base + current.usable, self._min_align) - current.base
        current.allocated_bytes = current.usable

    def destroy(self) -> None:
        """Release every chunk."""
        self._chunks = []

    def __enter__(self) -> Bump:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.destroy()

    # --- allocation ---

    def alloc(self, size: int, align: int = 1) -> memoryview:
        """Return a writable view of ``size`` bytes aligned to ``align``."""
        if size < 0:
            raise ValueError("allocation size cannot be negative")
        if size == 0:
            return memoryview(bytearray())
        if not _is_power_of_two(align):
            align = 1
        offset = self._try_alloc_fast(size, align)
        if offset is None:
            offset = self._alloc_slow(size, align)
        chunk = self._chunks[-1]
        return memoryview(chunk.data)[offset : offset + size]

    def alloc_copy(self, data: bytes, align: int = 1) -> memoryview:
        """Copy ``data`` into the arena and return a view of the copy."""
        dest = self.alloc(len(data), align)
        if len(data):
            dest[:] = data
        return dest

    def alloc_str(self, text: str) -> memoryview:
        """Store ``text`` as UTF-8 with a terminating NUL byte."""
        return self.alloc_copy(text.encode("utf-8") + b"\x00", 1)

    def _fit(self, chunk: _Chunk, size: int, align: int) -> int | None:
        min_align = self._min_align
        if align <= min_align:
            aligned_size = _round_up(size, min_align)
            if aligned_size > chunk.ptr:
                return None
            return chunk.ptr - aligned_size
        aligned_size = _round_up(size, align)
        end = _round_down(chunk.base + chunk.ptr, align) - chunk.base
        if end < 0 or aligned_size > end:
            return None
        return end - aligned_size

    def _try_alloc_fast(self, size: int, align: int) -> int | None:
        if not self._chunks:
            return None
        chunk = self._chunks[-1]
        offset = self._fit(chunk, size, align)
        if offset is not None:
            chunk.ptr = offset
        return offset

    def _alloc_slow(self, size: int, align: int) -> int:
        current = self._chunks[-1] if self._chunks else None
        prev_usable = current.chunk_size - FOOTER_SIZE if current else 0
        prev_allocated = current.allocated_bytes if current else 0

        new_size = max(prev_usable * 2, DEFAULT_CHUNK_SIZE_WITHOUT_FOOTER)
        requested_align = max(align, self._min_align)
        requested_size = _round_up(size, requested_align)
        new_size = max(new_size, requested_size)

        if self._limit is not None:
            remaining = max(self._limit - prev_allocated, 0)
            if new_size > remaining:
                if requested_size > remaining:
                    raise AllocationError(
                        f"allocation of {size} bytes exceeds the allocation limit"
                    )
                new_size = requested_size

        chunk_align = max(align, CHUNK_ALIGN, self._min_align)
        chunk = self._new_chunk(new_size, chunk_align, prev_allocated)
        self._chunks.append(chunk)

        offset = self._fit(chunk, size, align)
        if offset is None:
            raise AllocationError("new chunk too small for the requested allocation")
        chunk.ptr = offset
        return offset

    def _new_chunk(self, usable: int, align: int, prev_allocated: int) -> _Chunk:
        usable = _round_up(usable, CHUNK_ALIGN)
        chunk_size = _round_up(usable + FOOTER_SIZE, align)
        base = _round_up(self._next_address, align)
        self._next_address = base + chunk_size
        ptr = _round_down(base + usable, self._min_align) - base
        return _Chunk(
            base=base,
            data=bytearray(usable),
            usable=usable,
            chunk_size=chunk_size,
            ptr=ptr,
            allocated_bytes=prev_allocated + usable,
        )