import socket
import threading
from protocol.errors import AcceptError, BindError
from protocol.transport import Transport
from utils.helpers import get_logger, format_address

logger = get_logger(__name__)


def local_address():
    """
    Best-effort IP to show the user so they can tell the joiner where to dial.
    Returns None if the hostname can't be resolved.
    """
    try:
        hostname = socket.gethostname()
        return socket.gethostbyname(hostname)
    except OSError as e:
        logger.debug(f"Could not resolve local address: {e}")
        return None


class Listener:
    """
    Accepts exactly one peer on a port, then stops listening.
    """

    def __init__(self, port):
        self.port = port
        self.server = None
        self.aborted = False
        self._lock = threading.Lock()

    def bind(self):
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server.bind(('', self.port))
            server.listen(1)
        except (OSError, OverflowError) as e:
            server.close()
            logger.debug(f"Could not bind port {self.port}: {e}")
            raise BindError(f"Could not listen on port {self.port}: {e}") from e
        # port 0 asks the OS to pick one
        self.port = server.getsockname()[1]
        with self._lock:
            if self.aborted:
                server.close()
                raise AcceptError("Stopped waiting for a peer.")
            self.server = server
        logger.debug(f"Listening on port {self.port}")
        return self.port

    def accept(self):
        server = self.server
        if server is None:
            if self.aborted:
                raise AcceptError("Stopped waiting for a peer.")
            raise AcceptError("Listener is not bound.")
        try:
            conn, addr = server.accept()
        except OSError as e:
            if self.aborted:
                raise AcceptError("Stopped waiting for a peer.") from e
            logger.debug(f"Accept on port {self.port} failed: {e}")
            raise AcceptError(f"Error while waiting for a peer: {e}") from e
        finally:
            self._close_server()
        logger.debug(f"Accepted connection from {format_address(addr)}")
        return Transport.open(conn)

    def abort(self):
        """Stop a pending accept() from another thread."""
        with self._lock:
            self.aborted = True
        self._close_server()

    def _close_server(self):
        with self._lock:
            server, self.server = self.server, None
        if server is None:
            return
        try:
            # wakes a thread blocked in accept() on Linux
            server.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        server.close()


def listen(port, on_listening=None, listener=None):
    """
    Bind to all interfaces on `port`, block until one peer connects and
    return its Transport. `on_listening(ip, port)` is called before blocking;
    ip is None if no displayable address could be found.
    """
    listener = listener or Listener(port)
    bound_port = listener.bind()
    if on_listening is not None:
        on_listening(local_address(), bound_port)
    return listener.accept()
