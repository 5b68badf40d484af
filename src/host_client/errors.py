"""Typed exception hierarchy for host-related errors.

This module defines all custom exceptions raised while talking to the host
application. All exceptions inherit from BridgeError so callers can catch any
application-level error with a single clause, and carry enough context
(status code, operation) to make log entries useful.
"""

from typing import Optional


class BridgeError(Exception):
    """Base exception for all notebook-host-bridge errors.

    Use this to catch any application-level error from the bridge.
    """
    pass


class HostError(BridgeError):
    """Raised when a host invocation fails with a status code.

    Attributes:
        status_code: Unsigned 32-bit status code reported by the host
        operation: Description of the host call that failed
    """

    def __init__(self, status_code: Optional[int], operation: str, reason: Optional[str] = None):
        if status_code is None:
            message = f"Host call {operation} failed"
        else:
            message = f"Host call {operation} failed with status 0x{status_code:08X}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.status_code = status_code
        self.operation = operation
        self.reason = reason


class HostBusyError(HostError):
    """Raised when the host reports it is temporarily unable to service a call."""
    pass


class HostUnavailableError(BridgeError):
    """Raised when no host application could be created."""

    def __init__(self, factory: str, reason: Optional[str] = None):
        message = f"Host application is not available from factory '{factory}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.factory = factory
        self.reason = reason
