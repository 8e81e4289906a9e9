import socket

import pytest

from protocol.errors import TransportReadError, TransportWriteError
from protocol.transport import Transport, decode_line, encode_line


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield Transport.open(a), b
    a.close()
    b.close()


def test_encode_line_appends_single_newline():
    assert encode_line("hello") == b"hello\n"
    assert encode_line("héllo") == "héllo\n".encode("utf-8")


def test_decode_line_strips_carriage_return():
    assert decode_line(b"hi\r") == "hi"
    assert decode_line(b"hi") == "hi"


def test_send_line_writes_text_and_newline(pair):
    transport, peer = pair
    transport.send_line("hello")
    assert peer.recv(100) == b"hello\n"


def test_receive_line_splits_buffered_lines(pair):
    transport, peer = pair
    peer.sendall(b"one\ntwo\nthr")
    assert transport.receive_line() == "one"
    assert transport.receive_line() == "two"
    peer.sendall(b"ee\n")
    assert transport.receive_line() == "three"


def test_receive_line_returns_none_on_graceful_close(pair):
    transport, peer = pair
    peer.sendall(b"bye\n")
    peer.shutdown(socket.SHUT_WR)
    assert transport.receive_line() == "bye"
    assert transport.receive_line() is None
    assert transport.receive_line() is None


def test_partial_line_at_close_is_delivered(pair):
    transport, peer = pair
    peer.sendall(b"no newline")
    peer.shutdown(socket.SHUT_WR)
    assert transport.receive_line() == "no newline"
    assert transport.receive_line() is None


def test_receive_line_keeps_text_byte_for_byte(pair):
    transport, peer = pair
    line = "  spaced \t tabs ünïcode  "
    peer.sendall(encode_line(line))
    assert transport.receive_line() == line


def test_malformed_bytes_raise_read_error(pair):
    transport, peer = pair
    peer.sendall(b"\xff\xfe\n")
    with pytest.raises(TransportReadError):
        transport.receive_line()


def test_reset_connection_raises_read_error():
    class ResettingSocket:
        def getpeername(self):
            return ("10.0.0.2", 5000)

        def recv(self, size):
            raise ConnectionResetError("reset by peer")

    transport = Transport.open(ResettingSocket())
    assert transport.remote_address == "10.0.0.2:5000"
    with pytest.raises(TransportReadError):
        transport.receive_line()


def test_send_after_close_raises_write_error(pair):
    transport, _ = pair
    transport.close()
    with pytest.raises(TransportWriteError):
        transport.send_line("late")


def test_send_to_closed_peer_raises_write_error(pair):
    transport, peer = pair
    peer.close()
    with pytest.raises(TransportWriteError):
        # the first write may be accepted by the kernel before the reset is seen
        for _ in range(10):
            transport.send_line("anyone there?")


def test_receive_after_close_raises_read_error(pair):
    transport, _ = pair
    transport.close()
    with pytest.raises(TransportReadError):
        transport.receive_line()


def test_close_is_idempotent(pair):
    transport, _ = pair
    assert transport.close() is True
    assert transport.close() is False
    assert transport.closed
