"""Console logging for the command line front end."""
import logging


class Colors:
    """ANSI colour codes per log level."""
    GRAY = '\033[37m'
    CYAN = '\033[36m'
    YELLOW = '\033[33m'
    RED = '\033[31m'
    BOLD = '\033[1m'
    RESET = '\033[0m'


class SimpleFormatter(logging.Formatter):
    """Message-only formatter, coloured by level."""
    def format(self, record):
        color = {
            'DEBUG': Colors.GRAY,
            'INFO': Colors.CYAN,
            'WARNING': Colors.YELLOW,
            'ERROR': Colors.RED,
            'CRITICAL': Colors.RED + Colors.BOLD,
        }.get(record.levelname, Colors.RESET)
        return f"{color}{record.getMessage()}{Colors.RESET}"


def setup_logging(level="INFO"):
    """Replace the root handlers with a single coloured console handler."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level: {level}")
        level = resolved

    logger = logging.getLogger()
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(SimpleFormatter())
    logger.addHandler(console)
    return logger
