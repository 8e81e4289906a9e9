import enum
import threading
from peer.dialer import dial
from peer.listener import Listener, listen
from protocol.errors import ChatError, TransportReadError, TransportWriteError
from utils.helpers import get_logger

logger = get_logger(__name__)


class SessionState(enum.Enum):
    IDLE = "idle"
    ESTABLISHING = "establishing"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class Session:
    """
    One conversation over one Transport.

    State only moves forward: IDLE -> ESTABLISHING -> CONNECTED -> DISCONNECTED,
    or straight from ESTABLISHING to DISCONNECTED when the role fails.
    A disconnected session is never reused; start a new one to chat again.

    `events` receives on_status, on_message_received, on_message_sent,
    on_error and set_input_enabled. They are called from worker threads.
    """

    def __init__(self, events, connect_timeout=None):
        self.events = events
        self.connect_timeout = connect_timeout
        self.state = SessionState.IDLE
        self.transport = None
        self.reader_thread = None
        self.listening_port = None
        self.closed = threading.Event()
        self._listener = None
        # reentrant: an event handler may call close() while we hold it
        self._lock = threading.RLock()

    @property
    def connected(self):
        return self.state is SessionState.CONNECTED

    def host(self, port):
        """Wait for one peer on `port` in the background."""
        with self._lock:
            self._begin_establishing()
            self._listener = Listener(port)
        logger.debug(f"Hosting on port {port}")
        self._spawn(self._run_host, port)

    def join(self, host, port):
        """Connect to host:port in the background."""
        with self._lock:
            self._begin_establishing()
        logger.debug(f"Joining {host}:{port}")
        self.events.on_status(f"Connecting to {host}:{port}...")
        self._spawn(self._run_join, host, port)

    def _begin_establishing(self):
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"Session already used (state: {self.state.value}); create a new one.")
        self.state = SessionState.ESTABLISHING

    def _spawn(self, target, *args):
        threading.Thread(target=target, args=args, daemon=True).start()

    def _run_host(self, port):
        try:
            transport = listen(port, on_listening=self._announce_listening, listener=self._listener)
        except ChatError as e:
            self._establish_failed(f"Host connection error: {e}")
            return
        self._establish_succeeded(transport, f"Peer connected! ({transport.remote_address})")

    def _announce_listening(self, ip, port):
        self.listening_port = port
        if ip is None:
            self.events.on_status("Could not determine this machine's IP address.")
            self.events.on_status(f"Waiting for a peer to connect on port {port}...")
        else:
            self.events.on_status(f"Waiting for a peer to connect on...\nIP: {ip}\nPort: {port}")

    def _run_join(self, host, port):
        try:
            transport = dial(host, port, timeout=self.connect_timeout)
        except ChatError as e:
            self._establish_failed(f"Client connection error: {e}")
            return
        self._establish_succeeded(transport, "Connected to peer!")

    def _establish_succeeded(self, transport, status):
        with self._lock:
            self._listener = None
            if self.state is not SessionState.ESTABLISHING:
                # closed locally while the role was still running
                transport.close()
                return
            self.state = SessionState.CONNECTED
            self.transport = transport
            self.reader_thread = threading.Thread(target=self._receive_loop, daemon=True)
            logger.debug(f"Session connected to {transport.remote_address}")
            # events go out under the lock so a concurrent close() can't
            # slip its "disabled" in before our "enabled"
            self.events.on_status(status)
            if self.state is not SessionState.CONNECTED:
                return
            self.events.set_input_enabled(True)
            self.reader_thread.start()

    def _establish_failed(self, message):
        with self._lock:
            self._listener = None
            if self.state is not SessionState.ESTABLISHING:
                return
        logger.debug(message)
        self.events.on_error(message)
        self._disconnect(None)

    def _receive_loop(self):
        transport = self.transport
        while True:
            try:
                line = transport.receive_line()
            except TransportReadError as e:
                logger.debug(f"Receive loop stopped: {e}")
                break
            if line is None:
                break
            self.events.on_message_received(line)
        self._disconnect("Peer has disconnected.")

    def submit(self, text):
        """
        Send one line typed by the local user. Returns True if it was sent
        (or at least attempted and echoed), False if it was ignored.
        """
        transport = self.transport
        if self.state is not SessionState.CONNECTED or transport is None:
            return False
        if text is None or not text.strip():
            return False
        failure = None
        try:
            transport.send_line(text)
        except TransportWriteError as e:
            # a write failure doesn't end the session; the receive loop decides that
            failure = e
        self.events.on_message_sent(text)
        if failure is not None:
            self.events.on_error(str(failure))
        return True

    def close(self):
        """Local shutdown, e.g. the user quit. Safe to call more than once."""
        with self._lock:
            listener = self._listener
        self._disconnect("Disconnected.")
        if listener is not None:
            listener.abort()

    def _disconnect(self, status):
        with self._lock:
            if self.state is SessionState.DISCONNECTED:
                return False
            self.state = SessionState.DISCONNECTED
            if self.transport is not None:
                self.transport.close()
            logger.debug("Session disconnected")
            if status:
                self.events.on_status(status)
            self.events.set_input_enabled(False)
        self.closed.set()
        return True

    def wait_closed(self, timeout=None):
        return self.closed.wait(timeout)
