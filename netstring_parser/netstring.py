"""One-shot helpers for D. J. Berstein's
`netstrings <https://cr.yp.to/proto/netstrings.txt>`_.
"""

from typing import List, Optional, Tuple, Union

from .buffer import BytesLike
from .exceptions import IncompleteNetstring
from .parser import DEFAULT_MAX_LENGTH, NetstringParser


def encode(payload: Union[str, BytesLike]) -> bytes:
    """Encode a ``str`` (as UTF-8) or bytes-like payload into a netstring.

    >>> encode("hello")
    b'5:hello,'
    >>> encode(b"")
    b'0:,'
    """
    if isinstance(payload, str):
        bytestring = payload.encode()
    else:
        bytestring = bytes(payload)
    return str(len(bytestring)).encode() + b':' + bytestring + b','


def _parser_for(data: BytesLike, max_length: int) -> NetstringParser:
    parser = NetstringParser(len(data), max_length=max_length)
    parser.write(data)
    return parser


def decode(data: BytesLike, *,
           max_length: int = DEFAULT_MAX_LENGTH) -> Optional[Tuple[bytes, bytes]]:
    """Decode the first netstring in ``data``, returning its payload and the
    remainder of the bytes.

    Returns None when the bytes are a prefix of a valid netstring.

    Raises a ``NetstringError`` when the bytes are not a prefix of a valid
    netstring.

    >>> decode(b'5:hello,more')
    (b'hello', b'more')
    """
    parser = _parser_for(data, max_length)
    frame = parser.parse_next_owned()
    if frame is None:
        return None
    return (frame, bytes(parser.buffer.pending()))


def decode_all(data: BytesLike, *,
               max_length: int = DEFAULT_MAX_LENGTH) -> List[bytes]:
    """Decode a sequence of netstrings that fills ``data`` exactly.

    >>> decode_all(b'5:hello,0:,')
    [b'hello', b'']
    """
    parser = _parser_for(data, max_length)
    frames = parser.drain()
    if not parser.is_buffer_empty():
        raise IncompleteNetstring(parser.pending_len())
    return frames
