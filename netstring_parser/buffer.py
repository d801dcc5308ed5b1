"""A growable byte buffer with read and write cursors.

Storage is laid out as::

    [0, read_cursor)             dead bytes, already handed out
    [read_cursor, write_cursor)  pending bytes, not yet parsed
    [write_cursor, capacity)     free space for new writes

Dead bytes are reclaimed lazily, only when free space is requested. The
buffer first compacts the pending bytes down to offset 0 and, if that
still leaves too little room, replaces the storage with a new
``bytearray`` of at least twice the capacity. Storage is never resized in
place, so ``memoryview`` objects handed out earlier cannot block growth.
"""

from typing import Optional, Union

from .exceptions import AllocationError, ContractViolation

DEFAULT_CAPACITY = 4096
MIN_GROWTH = 64

BytesLike = Union[bytes, bytearray, memoryview]


class FrameBuffer:
    """Byte storage shared by a parser and the code feeding it."""
    _data: bytearray
    _read: int
    _write: int
    _generation: int
    max_capacity: Optional[int]

    def __init__(self, initial_capacity: int = DEFAULT_CAPACITY, *,
                 max_capacity: Optional[int] = None) -> None:
        """:param initial_capacity: Bytes to preallocate.

           :param max_capacity: Largest capacity the buffer may grow to, or
             ``None`` for no limit.
        """
        if initial_capacity < 0:
            raise ContractViolation("initial capacity must be non-negative")
        if max_capacity is not None and initial_capacity > max_capacity:
            raise AllocationError(initial_capacity, max_capacity)
        self.max_capacity = max_capacity
        self._data = self._allocate(initial_capacity)
        self._read = 0
        self._write = 0
        self._generation = 0

    @property
    def read_cursor(self) -> int:
        return self._read

    @property
    def write_cursor(self) -> int:
        return self._write

    @property
    def generation(self) -> int:
        """Incremented by every call that may move or overwrite bytes."""
        return self._generation

    @property
    def data(self) -> bytearray:
        return self._data

    def capacity(self) -> int:
        return len(self._data)

    def pending_len(self) -> int:
        return self._write - self._read

    def free_len(self) -> int:
        return len(self._data) - self._write

    def pending(self) -> memoryview:
        """A read-only view of the pending bytes."""
        return memoryview(self._data)[self._read:self._write].toreadonly()

    def invalidate(self) -> None:
        self._generation += 1

    def available_buffer(self, min_size: int = 1) -> memoryview:
        """Return a writable view of the free space, holding at least
        ``min_size`` bytes. Call :meth:`advance` with the number of bytes
        actually written into it.
        """
        if min_size < 0:
            raise ContractViolation("min_size must be non-negative")
        self.invalidate()
        self._reserve(min_size)
        return memoryview(self._data)[self._write:]

    def advance(self, count: int) -> None:
        """Record that ``count`` bytes were written into the view returned by
        :meth:`available_buffer`.
        """
        if count < 0 or count > self.free_len():
            raise ContractViolation(
                "advance(%d) outside the %d bytes of free space"
                % (count, self.free_len()))
        if count == 0:
            return
        self.invalidate()
        self._write += count

    def write(self, data: BytesLike) -> None:
        """Copy ``data`` into the buffer, compacting or growing as needed."""
        view = memoryview(data).cast('B')
        size = view.nbytes
        if size == 0:
            return
        self.invalidate()
        self._reserve(size)
        self._data[self._write:self._write + size] = view
        self._write += size

    def consume(self, count: int) -> None:
        """Mark ``count`` pending bytes as dead."""
        if count < 0 or count > self.pending_len():
            raise ContractViolation(
                "consume(%d) outside the %d pending bytes"
                % (count, self.pending_len()))
        self._read += count

    def clear(self) -> None:
        self.invalidate()
        self._read = self._write = 0

    def _reserve(self, size: int) -> None:
        if self.free_len() >= size:
            return
        if self._read > 0:
            self._compact()
            if self.free_len() >= size:
                return
        self._grow(self._write + size)

    def _compact(self) -> None:
        pending = self.pending_len()
        self._data[0:pending] = self._data[self._read:self._write]
        self._read = 0
        self._write = pending

    def _grow(self, needed: int) -> None:
        new_capacity = max(2 * len(self._data), needed, MIN_GROWTH)
        if self.max_capacity is not None:
            if needed > self.max_capacity:
                raise AllocationError(needed, self.max_capacity)
            new_capacity = min(new_capacity, self.max_capacity)
        new_data = self._allocate(new_capacity)
        new_data[0:self._write] = self._data[0:self._write]
        self._data = new_data

    @staticmethod
    def _allocate(size: int) -> bytearray:
        try:
            return bytearray(size)
        except MemoryError as err:
            raise AllocationError(size) from err
