#main.py  ==  two-party chat client
           #↳ hosts a chat (waits for one peer)
           #↳ or joins one (dials the host)
           #↳ relays lines both ways until either side leaves
'''p2pchat/
├── main.py                 # Entry point
├── config.py               # YAML settings (default host/port, logging)
├── peer/
│   ├── listener.py         # Host role: accept exactly one peer
│   ├── dialer.py           # Join role: single connection attempt
│   ├── session.py          # Lifecycle state machine, receive loop, send path
│   └── bridge.py           # Session events <-> presentation, on one thread
├── protocol/
│   ├── transport.py        # Newline-delimited UTF-8 lines over a socket
│   └── errors.py           # Error taxonomy
├── ui/
│   └── console.py          # Terminal front end
└── utils/
    └── helpers.py          # Logging setup, address formatting
'''

import sys
from config import load_config, ConfigError
from ui.console import ConsolePresentation
from utils.helpers import configure_logging


def main(config_path="config.yaml"):
    try:
        config = load_config(config_path)
    except ConfigError as e:
        print(f"[!] {e}")
        return 1
    configure_logging(config["log_level"], config["log_file"])
    console = ConsolePresentation(config)
    console.run()
    return 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
