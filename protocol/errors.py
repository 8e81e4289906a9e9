import errno
import socket


class ChatError(Exception):
    """Base class for every fault raised by the chat core."""


class InvalidInput(ChatError):
    """User-supplied host or port is malformed. Raised before any network action."""


class BindError(ChatError):
    pass


class AcceptError(ChatError):
    pass


class ConnectError(ChatError):
    REFUSED = "refused"
    UNREACHABLE = "unreachable"
    DNS = "dns"
    INVALID_PORT = "invalid_port"
    TIMEOUT = "timeout"
    OTHER = "other"

    def __init__(self, message, reason=OTHER):
        super().__init__(message)
        self.reason = reason


class TransportReadError(ChatError):
    pass


class TransportWriteError(ChatError):
    pass


_UNREACHABLE_ERRNOS = {
    errno.ENETUNREACH,
    errno.EHOSTUNREACH,
    errno.EHOSTDOWN,
    errno.ENETDOWN,
}


def classify_connect_error(exc):
    """
    Map an exception raised by socket.create_connection to a ConnectError reason.
    """
    if isinstance(exc, ConnectionRefusedError):
        return ConnectError.REFUSED
    if isinstance(exc, (socket.timeout, TimeoutError)):
        return ConnectError.TIMEOUT
    if isinstance(exc, socket.gaierror):
        return ConnectError.DNS
    if isinstance(exc, OverflowError):
        return ConnectError.INVALID_PORT
    if isinstance(exc, OSError) and exc.errno in _UNREACHABLE_ERRNOS:
        return ConnectError.UNREACHABLE
    return ConnectError.OTHER
