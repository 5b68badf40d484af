"""Typed exception hierarchy for page content errors."""

from typing import Optional

from src.host_client.errors import BridgeError


class ContentError(BridgeError):
    """Base exception for all page content errors."""
    pass


class SchemaLoadError(ContentError):
    """Raised when a content schema cannot be loaded or is not registered."""

    def __init__(self, source: str, reason: Optional[str] = None):
        message = f"Cannot load schema {source}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.source = source
        self.reason = reason
