"""Incremental decoding of D. J. Bernstein's
`netstrings <https://cr.yp.to/proto/netstrings.txt>`_.

Bytes can be fed to a :py:class:`NetstringParser` in chunks of any size,
either by copying them in with ``write`` or by filling the view returned
by ``available_buffer`` and calling ``advance``. Complete netstrings are
then drained with ``parse_next`` in a loop:

>>> parser = NetstringParser()
>>> parser.write(b'5:he')
>>> parser.parse_next() is None
True
>>> parser.write(b'llo,')
>>> bytes(parser.parse_next())
b'hello'
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Union

from .buffer import DEFAULT_CAPACITY, BytesLike, FrameBuffer
from .exceptions import (LengthOverflow, MalformedDelimiter, MalformedLength,
                         MalformedTerminator, NetstringError, StaleNetstring)

# Nine decimal digits, just under 1GB.
DEFAULT_MAX_LENGTH = 999_999_999

_ZERO = ord('0')
_NINE = ord('9')
_COLON = ord(':')
_COMMA = ord(',')


@dataclass(frozen=True)
class AwaitingLength:
    value: int = 0
    digit_count: int = 0


@dataclass(frozen=True)
class AwaitingColon:
    length: int


@dataclass(frozen=True)
class AwaitingBody:
    """Waiting for all ``length`` payload bytes. The payload is never
    consumed piecewise, so the bytes received so far are simply those
    between the parser's scan position and the write cursor."""
    length: int


@dataclass(frozen=True)
class AwaitingComma:
    length: int


ParseState = Union[AwaitingLength, AwaitingColon, AwaitingBody, AwaitingComma]


class Netstring:
    """The payload of one decoded netstring, viewed in place in the buffer
    of the parser that produced it.

    The view is only valid until the next call that feeds, reserves space
    in, clears or parses from that parser. Using it afterwards raises
    :py:class:`StaleNetstring`; call ``bytes()`` on it first to keep the
    payload.
    """
    _buffer: FrameBuffer
    _offset: int
    _generation: int
    length: int

    def __init__(self, buffer: FrameBuffer, offset: int, length: int) -> None:
        self._buffer = buffer
        self._offset = offset
        self.length = length
        self._generation = buffer.generation

    @property
    def valid(self) -> bool:
        return self._generation == self._buffer.generation

    def as_bytes(self) -> memoryview:
        """Return a read-only ``memoryview`` of the payload."""
        if not self.valid:
            raise StaleNetstring()
        view = memoryview(self._buffer.data)
        return view[self._offset:self._offset + self.length].toreadonly()

    def to_str(self, encoding: str = 'utf-8') -> str:
        return str(self.as_bytes(), encoding)

    def __bytes__(self) -> bytes:
        return self.as_bytes().tobytes()

    def __len__(self) -> int:
        return self.length

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Netstring):
            return self.as_bytes() == other.as_bytes()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.as_bytes() == other
        return NotImplemented

    __hash__ = None  # type: ignore

    def __str__(self) -> str:
        try:
            return self.to_str()
        except UnicodeDecodeError:
            return "<invalid utf-8: %r>" % bytes(self)

    def __repr__(self) -> str:
        if not self.valid:
            return "Netstring(<stale>)"
        return "Netstring(%r)" % bytes(self)


class NetstringParser:
    """Buffers incoming bytes and splits them into netstrings.

    The parser keeps an explicit :py:data:`ParseState` between calls, so
    scanning resumes at the first byte it has not looked at yet. A payload
    is only handed out once it is completely buffered, as one contiguous
    view.

    After ``parse_next`` raises a :py:class:`NetstringError` the stream is
    out of sync; the parser raises the same error again on every later
    call until ``clear`` is called.
    """
    max_length: int
    _buffer: FrameBuffer
    _state: ParseState
    _scanned: int
    _error: Optional[NetstringError]

    def __init__(self, initial_capacity: int = DEFAULT_CAPACITY, *,
                 max_length: int = DEFAULT_MAX_LENGTH,
                 max_capacity: Optional[int] = None) -> None:
        """:param initial_capacity: Bytes of buffer to preallocate.

           :param max_length: Largest payload length accepted. Longer
             length prefixes raise :py:class:`LengthOverflow` before any of
             the payload is buffered.

           :param max_capacity: Largest size the buffer may grow to, or
             ``None`` for no limit. Writes beyond it raise
             :py:class:`AllocationError`.
        """
        self.max_length = max_length
        self._buffer = FrameBuffer(initial_capacity, max_capacity=max_capacity)
        self._state = AwaitingLength()
        # Bytes of the current netstring already scanned, counted from the
        # read cursor so that compaction does not disturb it.
        self._scanned = 0
        self._error = None

    @property
    def state(self) -> ParseState:
        return self._state

    @property
    def buffer(self) -> FrameBuffer:
        return self._buffer

    def capacity(self) -> int:
        return self._buffer.capacity()

    def pending_len(self) -> int:
        return self._buffer.pending_len()

    def is_buffer_full(self) -> bool:
        return self._buffer.free_len() == 0

    def is_buffer_empty(self) -> bool:
        return self._buffer.pending_len() == 0

    def available_buffer(self, min_size: int = 1) -> memoryview:
        """Return a writable view of at least ``min_size`` free bytes.

        Typical use with a socket::

            view = parser.available_buffer(4096)
            parser.advance(sock.recv_into(view))
        """
        return self._buffer.available_buffer(min_size)

    def advance(self, count: int) -> None:
        """Record that ``count`` bytes were written into the view returned
        by :py:meth:`available_buffer`."""
        self._buffer.advance(count)

    def write(self, data: BytesLike) -> None:
        """Copy ``data`` into the parser's buffer."""
        self._buffer.write(data)

    def clear(self) -> None:
        """Discard all buffered bytes and start over with a fresh stream."""
        self._buffer.clear()
        self._state = AwaitingLength()
        self._scanned = 0
        self._error = None

    def parse_next(self) -> Optional[Netstring]:
        """Return the next complete netstring as a zero-copy view, or
        ``None`` if more data is needed.

        Raises a :py:class:`NetstringError` subclass if the buffered data
        is not a valid netstring.
        """
        buf = self._buffer
        buf.invalidate()
        if self._error is not None:
            raise self._error
        try:
            return self._step(buf)
        except NetstringError as err:
            self._error = err
            raise

    def parse_next_owned(self) -> Optional[bytes]:
        """Like :py:meth:`parse_next`, but return a copy of the payload."""
        frame = self.parse_next()
        if frame is None:
            return None
        return bytes(frame)

    def drain(self) -> List[bytes]:
        """Return copies of every complete netstring currently buffered."""
        frames = []
        while True:
            frame = self.parse_next_owned()
            if frame is None:
                return frames
            frames.append(frame)

    def _step(self, buf: FrameBuffer) -> Optional[Netstring]:
        data = buf.data
        start = buf.read_cursor
        end = buf.write_cursor
        pos = start + self._scanned
        state = self._state
        try:
            while True:
                if isinstance(state, AwaitingLength):
                    if pos == end:
                        return None
                    byte = data[pos]
                    if _ZERO <= byte <= _NINE:
                        if state.digit_count == 1 and state.value == 0:
                            raise MalformedLength(
                                "invalid format, leading zero in length")
                        value = state.value * 10 + (byte - _ZERO)
                        if value > self.max_length:
                            raise LengthOverflow(value, self.max_length)
                        state = AwaitingLength(value, state.digit_count + 1)
                        pos += 1
                    elif state.digit_count == 0:
                        raise MalformedLength(
                            "invalid format, length has no digits")
                    else:
                        # The terminating byte is checked as the separator.
                        state = AwaitingColon(state.value)
                elif isinstance(state, AwaitingColon):
                    if pos == end:
                        return None
                    if data[pos] != _COLON:
                        raise MalformedDelimiter(data[pos])
                    pos += 1
                    state = AwaitingBody(state.length)
                elif isinstance(state, AwaitingBody):
                    if end - pos < state.length:
                        return None
                    state = AwaitingComma(state.length)
                else:
                    comma = pos + state.length
                    if comma >= end:
                        return None
                    if data[comma] != _COMMA:
                        raise MalformedTerminator(data[comma])
                    buf.consume(comma + 1 - start)
                    frame = Netstring(buf, pos, state.length)
                    state = AwaitingLength()
                    pos = buf.read_cursor
                    return frame
        finally:
            self._state = state
            self._scanned = pos - buf.read_cursor
