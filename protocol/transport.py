import socket
import threading
from protocol.errors import TransportReadError, TransportWriteError
from utils.helpers import get_logger, format_address

logger = get_logger(__name__)

ENCODING = "utf-8"
RECV_SIZE = 4096

# receive_line() returns this when the peer closed the stream cleanly
END_OF_STREAM = None


def encode_line(text):
    """
    Wire form of one message: UTF-8 text ending with a single newline.
    No length prefix, no escaping.
    """
    return (text + '\n').encode(ENCODING)


def decode_line(raw):
    """
    Inverse of encode_line for a line already split off the buffer
    (terminator removed). A trailing CR from CRLF peers is dropped.
    """
    if raw.endswith(b'\r'):
        raw = raw[:-1]
    return raw.decode(ENCODING)


class Transport:
    """
    One connected, bidirectional socket exposed as lines of text.

    The reading side and the writing side are each driven by a single
    thread (the receive loop and the send path), so no lock guards the
    buffer. The lock below only serialises close().
    """

    def __init__(self, sock):
        self.sock = sock
        self.buffer = b""
        self.closed = False
        self._eof = False
        self._close_lock = threading.Lock()
        try:
            self.remote_address = format_address(sock.getpeername())
        except OSError:
            self.remote_address = "unknown"

    @classmethod
    def open(cls, sock):
        transport = cls(sock)
        logger.debug(f"Transport opened with {transport.remote_address}")
        return transport

    def send_line(self, text):
        if self.closed:
            raise TransportWriteError("Connection is closed.")
        try:
            self.sock.sendall(encode_line(text))
        except (OSError, ValueError) as e:
            logger.debug(f"Write to {self.remote_address} failed: {e}")
            raise TransportWriteError(f"Could not send message: {e}") from e

    def receive_line(self):
        """
        Block until a full line is available and return it without its
        terminator. Returns END_OF_STREAM once the peer has closed and
        the buffer is drained.
        """
        while b'\n' not in self.buffer:
            if self._eof:
                return self._drain_tail()
            if self.closed:
                raise TransportReadError("Connection is closed.")
            try:
                chunk = self.sock.recv(RECV_SIZE)
            except OSError as e:
                if self.closed:
                    raise TransportReadError("Connection closed locally.") from e
                logger.debug(f"Read from {self.remote_address} failed: {e}")
                raise TransportReadError(f"Connection lost: {e}") from e
            if not chunk:
                logger.debug(f"End of stream from {self.remote_address}")
                self._eof = True
                continue
            self.buffer += chunk

        raw, self.buffer = self.buffer.split(b'\n', 1)
        try:
            return decode_line(raw)
        except UnicodeDecodeError as e:
            raise TransportReadError(f"Received malformed text: {e}") from e

    def _drain_tail(self):
        # peer closed mid-line: hand over what is left, then report EOF
        if not self.buffer:
            return END_OF_STREAM
        raw, self.buffer = self.buffer, b""
        try:
            return decode_line(raw)
        except UnicodeDecodeError as e:
            raise TransportReadError(f"Received malformed text: {e}") from e

    def close(self):
        with self._close_lock:
            if self.closed:
                return False
            self.closed = True
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # already disconnected by the peer
            pass
        self.sock.close()
        logger.debug(f"Transport with {self.remote_address} closed")
        return True
