import abc
import queue
import threading
from config import DEFAULT_CONFIG
from peer.session import Session, SessionState
from protocol.errors import InvalidInput
from utils.helpers import get_logger

logger = get_logger(__name__)

_STOP = object()


class Presentation(abc.ABC):
    """
    What the chat core needs from a front end. Calls arrive on the bridge's
    dispatcher thread, one at a time and in order.
    """

    @abc.abstractmethod
    def on_status(self, text): ...

    @abc.abstractmethod
    def on_message_received(self, text): ...

    @abc.abstractmethod
    def on_message_sent(self, text): ...

    @abc.abstractmethod
    def on_error(self, text): ...

    @abc.abstractmethod
    def set_input_enabled(self, enabled): ...


def parse_port(value, allow_zero=False):
    if isinstance(value, bool):
        raise InvalidInput("Invalid port number.")
    if isinstance(value, str):
        value = value.strip()
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise InvalidInput("Invalid port number.") from None
    low = 0 if allow_zero else 1
    if not low <= port <= 65535:
        raise InvalidInput(f"Port must be between {low} and 65535.")
    return port


def parse_host(value):
    host = (value or "").strip()
    if not host:
        raise InvalidInput("Host address is required.")
    if any(c.isspace() for c in host):
        raise InvalidInput(f"Invalid host address: {host!r}")
    return host


class Bridge:
    """
    Sits between a Session and the presentation.

    Session events are queued and handed to the presentation by a single
    dispatcher thread, so the receive loop never waits on rendering and
    the presentation only ever sees one caller. User actions go the other
    way: host(), join(), submit(), close().
    """

    def __init__(self, presentation, config=None):
        self.presentation = presentation
        self.config = config or DEFAULT_CONFIG
        self.session = None
        self.events = queue.Queue()
        self.dispatcher = threading.Thread(target=self._dispatch, daemon=True)
        self.dispatcher.start()

    # -- Session -> presentation

    def on_status(self, text):
        self._post("on_status", text)

    def on_message_received(self, text):
        self._post("on_message_received", text)

    def on_message_sent(self, text):
        self._post("on_message_sent", text)

    def on_error(self, text):
        self._post("on_error", text)

    def set_input_enabled(self, enabled):
        self._post("set_input_enabled", enabled)

    def _post(self, name, arg):
        self.events.put((name, arg))

    def _dispatch(self):
        while True:
            item = self.events.get()
            try:
                if item is _STOP:
                    return
                name, arg = item
                try:
                    getattr(self.presentation, name)(arg)
                except Exception:
                    logger.exception(f"Presentation failed handling {name}")
            finally:
                self.events.task_done()

    def flush(self):
        """Block until every queued event has reached the presentation."""
        self.events.join()

    def stop(self):
        self.events.put(_STOP)
        self.dispatcher.join()

    # -- presentation -> Session

    def host(self, port):
        try:
            port = parse_port(port, allow_zero=True)
        except InvalidInput as e:
            self.on_error(str(e))
            return False
        session = self._new_session()
        if session is None:
            return False
        session.host(port)
        return True

    def join(self, host, port):
        try:
            host = parse_host(host)
            port = parse_port(port)
        except InvalidInput as e:
            self.on_error(str(e))
            return False
        session = self._new_session()
        if session is None:
            return False
        session.join(host, port)
        return True

    def _new_session(self):
        if self.session is not None and self.session.state is not SessionState.DISCONNECTED:
            self.on_error("A chat is already in progress.")
            return None
        self.session = Session(self, connect_timeout=self.config.get("connect_timeout"))
        return self.session

    def submit(self, text):
        if self.session is None:
            return False
        return self.session.submit(text)

    def close(self):
        if self.session is not None:
            self.session.close()

    @property
    def state(self):
        if self.session is None:
            return SessionState.IDLE
        return self.session.state
