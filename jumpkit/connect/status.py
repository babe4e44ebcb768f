"""
Terminal background colour hints while a database tunnel is open.

The escape sequence is understood by iTerm2 and ignored by most other
terminals. Anything that is not an interactive terminal gets the no-op
indicator.
"""
from __future__ import annotations

import sys
from typing import Optional, Protocol, TextIO

PRODUCTION_PREFIX = "prod"

PRODUCTION = "501010"  # red
NON_PRODUCTION = "403010"  # yellow
SAFE = "103010"  # green, tunnel closed


def background_sequence(color: str) -> str:
    return f"\033]Ph{color}\033\\"


def color_for(endpoint: str) -> str:
    return PRODUCTION if endpoint.startswith(PRODUCTION_PREFIX) else NON_PRODUCTION


class StatusIndicator(Protocol):
    def connected(self, endpoint: str) -> None: ...

    def disconnected(self) -> None: ...


class NullStatusIndicator:
    def connected(self, endpoint: str) -> None:
        pass

    def disconnected(self) -> None:
        pass


class TerminalStatusIndicator:
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def _write(self, color: str) -> None:
        self.stream.write(background_sequence(color))
        self.stream.flush()

    def connected(self, endpoint: str) -> None:
        self._write(color_for(endpoint))

    def disconnected(self) -> None:
        self._write(SAFE)


def default_indicator() -> StatusIndicator:
    if sys.stdout.isatty():
        return TerminalStatusIndicator()
    return NullStatusIndicator()
