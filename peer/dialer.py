import socket
from protocol.errors import ConnectError, classify_connect_error
from protocol.transport import Transport
from utils.helpers import get_logger

logger = get_logger(__name__)


def dial(host, port, timeout=None):
    """
    Make a single connection attempt to host:port and return its Transport.
    No retries. timeout=None leaves the platform default in place.
    """
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ConnectError(f"Invalid port: {port!r}", ConnectError.INVALID_PORT)
    try:
        if timeout is None:
            sock = socket.create_connection((host, port))
        else:
            sock = socket.create_connection((host, port), timeout=timeout)
            # the timeout only applies to connecting; reads block indefinitely
            sock.settimeout(None)
    except (OSError, OverflowError) as e:
        reason = classify_connect_error(e)
        logger.debug(f"Could not connect to {host}:{port} ({reason}): {e}")
        raise ConnectError(f"Could not connect to {host}:{port}: {e}", reason) from e
    logger.debug(f"Connected to {host}:{port}")
    return Transport.open(sock)
