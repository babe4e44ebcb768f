"""Exceptions raised by discovery and connection code.

Everything derives from :class:`JumpkitError` so the CLI can turn any of them
into a single line on stderr and a non-zero exit status.
"""
from __future__ import annotations


class JumpkitError(Exception):
    """Base class for fatal, user-facing errors."""


class ConfigurationError(JumpkitError):
    """No matching rule, or a required configuration value is missing."""


class NoResourcesFound(JumpkitError):
    pass


class DiscoveryError(JumpkitError):
    def __init__(self, region: str, cause: BaseException):
        super().__init__(f"there was an error listing resources in {region}: {cause}")
        self.region = region
        self.cause = cause


class SelectionAborted(JumpkitError):
    pass


class SessionError(JumpkitError):
    """Every login candidate failed to open a session."""


class OutputWriteError(JumpkitError):
    pass


class TunnelError(JumpkitError):
    """The forwarding process died before the local port became usable."""


class TunnelTimeout(TunnelError):
    def __init__(self, port: int, timeout: float):
        super().__init__(f"tunnel on port {port} was not ready after {timeout:g}s")
        self.port = port
        self.timeout = timeout


class ClientNotFound(JumpkitError):
    pass


class ClientExitError(JumpkitError):
    def __init__(self, command: str, returncode: int):
        super().__init__(f"{command} exited with status {returncode}")
        self.command = command
        self.returncode = returncode
