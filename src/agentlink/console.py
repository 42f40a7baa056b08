"""Terminal input/output helpers for the demo runner and the interactive client."""

import signal
from enum import Enum
from typing import (
    Any,
    Tuple,
)


class Style(Enum):
    """ANSI colors keyed by what the text is."""

    PROMPT = "\033[94m"
    ANSWER = "\033[33m"
    STATUS = "\033[92m"
    ERROR = "\033[91m"


def echo(text: str, style: Style, **kwargs: Any) -> None:
    """Print *text* in the color of *style*; *kwargs* go to :func:`print`."""
    print(f"{style.value}{text}\033[0m", **kwargs)


def read_line(prompt: str = "") -> Tuple[str, bool]:
    """
    Read one line from standard input.

    Returns:
        Tuple of (text, ok).  ``ok`` is False if input couldn't be read (EOF or Ctrl+C).
    """
    # Let SIGINT break out of a blocking read()
    signal.siginterrupt(signal.SIGINT, True)

    if prompt:
        echo(prompt, Style.PROMPT, end="", flush=True)
    try:
        return input().strip(), True
    except (EOFError, KeyboardInterrupt):
        return "", False
