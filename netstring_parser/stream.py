"""Reading netstrings from sockets, files and HTTP responses."""

from abc import ABCMeta, abstractmethod
import socket
import sys
from typing import Iterator, Optional, TextIO, Union

import requests
from typing_extensions import Protocol

from . import netstring
from .buffer import BytesLike
from .exceptions import IncompleteNetstring
from .parser import DEFAULT_MAX_LENGTH, NetstringParser

DEFAULT_CHUNK_SIZE = 4096


class Readable(Protocol):
    def readinto(self, buffer: memoryview) -> Optional[int]: ...


class NetstringSource(metaclass=ABCMeta):
    """A stream of netstrings arriving from some external source.

       Each source owns a :py:class:`NetstringParser`. Subclasses should:

       1. Implement ``setup`` to open a connection, send a request, or
          whatever else is necessary before data can be read.

       2. Implement ``fill``, which delivers the next chunk of data into
          ``self.parser`` and returns the number of bytes delivered, or
          ``0`` at the end of the stream.
    """
    parser: NetstringParser
    chunk_size: int
    _logging_dest: Optional[TextIO]

    def __init__(self, *, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 max_length: int = DEFAULT_MAX_LENGTH) -> None:
        """:param chunk_size: The most bytes to read from the source at once.

           :param max_length: The largest netstring payload accepted.
        """
        self.chunk_size = chunk_size
        self.parser = NetstringParser(chunk_size, max_length=max_length)
        self._logging_dest = None
        self.setup()

    @abstractmethod
    def setup(self) -> None:
        """Prepare the source for reading."""
        pass

    @abstractmethod
    def fill(self) -> int: pass

    def get_one_frame(self) -> Optional[bytes]:
        """Return the next netstring payload. Block until it has arrived or
        the source is exhausted. Return None if the source ends between
        netstrings, and raise ``IncompleteNetstring`` if it ends inside one."""
        while True:
            frame = self.parser.parse_next()
            if frame is not None:
                self._log_rx(str(frame))
                return bytes(frame)
            if self.fill() == 0:
                if not self.parser.is_buffer_empty():
                    raise IncompleteNetstring(self.parser.pending_len())
                return None

    def frames(self) -> Iterator[bytes]:
        """Iterate over payloads until the source is exhausted."""
        while True:
            frame = self.get_one_frame()
            if frame is None:
                return
            yield frame

    def logging(self, on: bool, *, dest: TextIO = sys.stderr) -> None:
        """Whether to log received and transmitted netstrings."""
        if on:
            self._logging_dest = dest
        else:
            self._logging_dest = None

    def _log_tx(self, contents: str) -> None:
        if self._logging_dest:
            self._logging_dest.write("[TX] " + contents.strip() + "\n")

    def _log_rx(self, contents: str) -> None:
        if self._logging_dest:
            self._logging_dest.write("[RX] " + contents.strip() + "\n")


class SocketSource(NetstringSource):
    """A ``NetstringSource`` reading from a connected stream socket.
    Received bytes go straight into the parser's buffer.
    """
    socket: socket.socket

    def __init__(self, sock: socket.socket, *,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 max_length: int = DEFAULT_MAX_LENGTH) -> None:
        """:param sock: A connected ``SOCK_STREAM`` socket."""
        self.socket = sock
        super().__init__(chunk_size=chunk_size, max_length=max_length)

    def setup(self) -> None:
        pass

    def fill(self) -> int:
        view = self.parser.available_buffer(self.chunk_size)
        arrived = self.socket.recv_into(view, self.chunk_size)
        self.parser.advance(arrived)
        return arrived

    def send_one_message(self, message: Union[str, BytesLike]) -> None:
        """Send ``message`` to the peer as a netstring."""
        if isinstance(message, str):
            self._log_tx(message)
        else:
            self._log_tx(bytes(message).decode(errors='replace'))
        msg_bytes = netstring.encode(message)
        self.socket.sendall(msg_bytes)

    def close(self) -> None:
        self.socket.close()


class RemoteSocketSource(SocketSource):
    """A ``SocketSource`` that connects to a given host and port."""
    host: str
    port: int
    ipv6: bool

    def __init__(self, host: str, port: int, ipv6: bool = True, *,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 max_length: int = DEFAULT_MAX_LENGTH) -> None:
        """
           :param host: The hostname to connect to (e.g. ``"localhost"``)
           :param port: The port on which to connect
           :param ipv6: Whether to use IPv6 (``False`` for IPv4)
        """
        self.host = host
        self.port = port
        self.ipv6 = ipv6
        sock = socket.socket(socket.AF_INET6 if self.ipv6 else socket.AF_INET,
                             socket.SOCK_STREAM)
        super().__init__(sock, chunk_size=chunk_size, max_length=max_length)

    def setup(self) -> None:
        try:
            self.socket.connect((self.host, self.port))
        except OSError:
            self.socket.close()
            raise


class FileSource(NetstringSource):
    """A ``NetstringSource`` reading from a binary file object, such as a
    pipe to a subprocess."""
    stream: Readable

    def __init__(self, stream: Readable, *,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 max_length: int = DEFAULT_MAX_LENGTH) -> None:
        self.stream = stream
        super().__init__(chunk_size=chunk_size, max_length=max_length)

    def setup(self) -> None:
        pass

    def fill(self) -> int:
        view = self.parser.available_buffer(self.chunk_size)
        arrived = self.stream.readinto(view[:self.chunk_size])
        if not arrived:
            return 0
        self.parser.advance(arrived)
        return arrived


class HttpSource(NetstringSource):
    """A ``NetstringSource`` reading the body of an HTTP ``GET`` response.
    """
    url: str
    verify: Union[bool, str]
    response: requests.Response
    _chunks: Iterator[bytes]

    def __init__(self, url: str, *,
                 verify: Union[bool, str] = True,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 max_length: int = DEFAULT_MAX_LENGTH) -> None:
        """
           :param url: The URL to fetch (e.g. ``"http://localhost:8080/events"``).
           :param verify: Determines whether a secure connection should verify the SSL certificates.
                          Corresponds to the ``verify`` keyword parameter on ``requests.get``.
        """
        self.url = url
        self.verify = verify
        super().__init__(chunk_size=chunk_size, max_length=max_length)

    def setup(self) -> None:
        self.response = requests.get(self.url,
                                     headers={'Accept': 'application/octet-stream'},
                                     stream=True,
                                     verify=self.verify)
        self.response.raise_for_status()
        self._chunks = self.response.iter_content(chunk_size=self.chunk_size)

    def fill(self) -> int:
        for chunk in self._chunks:
            if chunk:
                self.parser.write(chunk)
                return len(chunk)
        return 0

    def close(self) -> None:
        self.response.close()
