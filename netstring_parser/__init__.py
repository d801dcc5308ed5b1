"""Incremental, zero-copy decoding of netstrings."""

from .buffer import DEFAULT_CAPACITY, FrameBuffer
from .exceptions import (AllocationError, ContractViolation,
                         IncompleteNetstring, LengthOverflow,
                         MalformedDelimiter, MalformedLength,
                         MalformedTerminator, NetstringError, StaleNetstring)
from .netstring import decode, decode_all, encode
from .parser import (DEFAULT_MAX_LENGTH, AwaitingBody, AwaitingColon,
                     AwaitingComma, AwaitingLength, Netstring,
                     NetstringParser, ParseState)

__all__ = [
    "DEFAULT_CAPACITY", "DEFAULT_MAX_LENGTH",
    "FrameBuffer", "NetstringParser", "Netstring", "ParseState",
    "AwaitingLength", "AwaitingColon", "AwaitingBody", "AwaitingComma",
    "encode", "decode", "decode_all",
    "NetstringError", "MalformedLength", "LengthOverflow",
    "MalformedDelimiter", "MalformedTerminator", "IncompleteNetstring",
    "AllocationError", "ContractViolation", "StaleNetstring",
]
