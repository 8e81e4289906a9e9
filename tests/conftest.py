import socket
import threading
import time

import pytest


class RecordingEvents:
    """
    Stands in for the bridge/presentation: records every call in order.
    Safe to call from the session's worker threads.
    """

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, name, arg):
        with self._lock:
            self.calls.append((name, arg))

    def on_status(self, text):
        self._record("on_status", text)

    def on_message_received(self, text):
        self._record("on_message_received", text)

    def on_message_sent(self, text):
        self._record("on_message_sent", text)

    def on_error(self, text):
        self._record("on_error", text)

    def set_input_enabled(self, enabled):
        self._record("set_input_enabled", enabled)

    def of(self, name):
        with self._lock:
            return [arg for n, arg in self.calls if n == name]


def _wait_for(predicate, timeout=5.0, interval=0.01):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def wait_for():
    return _wait_for


@pytest.fixture
def events():
    return RecordingEvents()


@pytest.fixture
def make_events():
    return RecordingEvents


@pytest.fixture
def unused_port():
    """
    A port that is bound but not listening, so connecting to it is refused.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    yield sock.getsockname()[1]
    sock.close()
