import threading
from peer.bridge import Bridge, Presentation
from peer.session import SessionState
from utils.helpers import get_logger

logger = get_logger(__name__)

HELP_TEXT = (
    "Commands:\n"
    "  /host [port]          Wait for a peer on a port\n"
    "  /join [host] [port]   Connect to a hosting peer\n"
    "  /quit                 Leave the chat and exit\n"
    "  /help                 Show this help\n"
    "Anything else is sent to the peer."
)


class ConsolePresentation(Presentation):
    """
    Terminal front end. Everything printed here comes from the bridge's
    dispatcher thread; the lock keeps lines whole when the input loop
    prints at the same time.
    """

    def __init__(self, config, input_func=input, output=print):
        self.config = config
        self.input_func = input_func
        self.output = output
        self.input_enabled = False
        self.closing = False
        self._print_lock = threading.Lock()
        self.bridge = Bridge(self, config)

    def _print(self, text):
        with self._print_lock:
            self.output(text)

    def on_status(self, text):
        self._print(f"[*] {text}")

    def on_message_received(self, text):
        self._print(f"Peer: {text}")

    def on_message_sent(self, text):
        self._print(f"Me: {text}")

    def on_error(self, text):
        self._print(f"[!] {text}")

    def set_input_enabled(self, enabled):
        self.input_enabled = enabled
        if not enabled and not self.closing and self.bridge.state is SessionState.DISCONNECTED:
            self._print("[*] Use /host or /join to start a new chat, /quit to exit.")

    def _ask(self, prompt, default):
        answer = self.input_func(f"{prompt} [{default}]: ").strip()
        return answer or str(default)

    def choose_role(self):
        """
        Initial setup, the console version of the host/join dialog.
        Returns False if the user backed out.
        """
        while True:
            choice = self.input_func("How do you want to connect? (host/join/quit): ").strip().lower()
            if choice in ("host", "h"):
                port = self._ask("Enter port to host on", self.config["default_port"])
                started = self.bridge.host(port)
            elif choice in ("join", "j"):
                host = self._ask("Host IP", self.config["default_host"])
                port = self._ask("Port", self.config["default_port"])
                started = self.bridge.join(host, port)
            elif choice in ("quit", "q", "exit"):
                return False
            else:
                self._print("Please answer host or join.")
                continue
            self.bridge.flush()
            if started:
                return True

    def handle_command(self, line):
        """
        Process one line typed at the chat prompt. Returns False to exit.
        """
        cmd = line.strip()
        if cmd in ("/quit", "/exit"):
            return False
        if cmd == "/help":
            self._print(HELP_TEXT)
        elif cmd == "/host" or cmd.startswith("/host "):
            parts = cmd.split()
            port = parts[1] if len(parts) > 1 else self.config["default_port"]
            self.bridge.host(port)
        elif cmd == "/join" or cmd.startswith("/join "):
            parts = cmd.split()
            host = parts[1] if len(parts) > 1 else self.config["default_host"]
            port = parts[2] if len(parts) > 2 else self.config["default_port"]
            self.bridge.join(host, port)
        elif self.input_enabled:
            self.bridge.submit(line)
        elif cmd:
            self._print("[!] Not connected. Type /help for commands.")
        return True

    def run(self):
        try:
            if not self.choose_role():
                return
            while True:
                try:
                    line = self.input_func("")
                except EOFError:
                    break
                if not self.handle_command(line):
                    break
        except (KeyboardInterrupt, EOFError):
            logger.debug("Console interrupted by user")
            self._print("\nInterrupted. Exiting")
        finally:
            self.shutdown()

    def shutdown(self):
        self.closing = True
        self.bridge.close()
        self.bridge.flush()
        self.bridge.stop()
