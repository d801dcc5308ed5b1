"""Errors raised while buffering and decoding netstrings."""

from typing import Optional


class NetstringError(Exception):
    """Base class for malformed or unusable netstring data."""
    message: str

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class MalformedLength(NetstringError):
    """The length field has no digits or a disallowed leading zero."""
    pass


class LengthOverflow(NetstringError):
    length: int
    max_length: int

    def __init__(self, length: int, max_length: int) -> None:
        self.length = length
        self.max_length = max_length
        super().__init__("netstring length %d exceeds the maximum of %d"
                         % (length, max_length))


class _UnexpectedByte(NetstringError):
    found: int

    def __init__(self, message: str, found: int) -> None:
        self.found = found
        super().__init__("%s, found %r" % (message, bytes([found])))


class MalformedDelimiter(_UnexpectedByte):
    def __init__(self, found: int) -> None:
        super().__init__("invalid format, missing :", found)


class MalformedTerminator(_UnexpectedByte):
    def __init__(self, found: int) -> None:
        super().__init__("invalid format, missing ,", found)


class IncompleteNetstring(NetstringError):
    """Input ended in the middle of a netstring."""
    pending: int

    def __init__(self, pending: int) -> None:
        self.pending = pending
        super().__init__("input ended with %d bytes of an incomplete netstring"
                         % pending)


class AllocationError(NetstringError):
    requested: int
    max_capacity: Optional[int]

    def __init__(self, requested: int, max_capacity: Optional[int] = None) -> None:
        self.requested = requested
        self.max_capacity = max_capacity
        if max_capacity is None:
            message = "could not allocate a %d byte buffer" % requested
        else:
            message = ("a %d byte buffer exceeds the maximum capacity of %d"
                       % (requested, max_capacity))
        super().__init__(message)


# Caller misuse, not bad data:
class ContractViolation(Exception):
    """Raised when the buffer API is used outside its documented contract."""
    pass


class StaleNetstring(ContractViolation):
    """A zero-copy view was used after the parser that produced it changed."""
    def __init__(self) -> None:
        super().__init__("netstring view used after a mutating call on its parser")
