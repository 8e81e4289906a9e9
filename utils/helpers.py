import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_handler = logging.StreamHandler()
_handler.setLevel(logging.DEBUG)
_handler.setFormatter(logging.Formatter(LOG_FORMAT))
_loggers = []


def get_logger(name):
    """
    Module-level logger with the shared handler attached once.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    if not logger.handlers:
        logger.addHandler(_handler)
        logger.propagate = False
        _loggers.append(logger)
    return logger


def configure_logging(level="WARNING", log_file=None):
    """
    Apply the configured level, and move output to a file if one is given
    so log lines don't interleave with the chat on the terminal.
    """
    global _handler
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if log_file:
        new_handler = logging.FileHandler(log_file, encoding='utf-8')
        new_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        for logger in _loggers:
            if _handler in logger.handlers:
                logger.removeHandler(_handler)
                logger.addHandler(new_handler)
        _handler.close()
        _handler = new_handler
    _handler.setLevel(level)
    return _handler


def format_address(addr):
    # (ip, port) tuples as shown to the user
    if addr is None:
        return "unknown"
    if isinstance(addr, tuple) and len(addr) >= 2:
        return f"{addr[0]}:{addr[1]}"
    return str(addr)
