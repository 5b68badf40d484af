"""Test helper modules for the notebook bridge.

This package provides utilities for unit testing:
- fake_host: In-memory HostApplication with call recording and failure injection
"""

from .fake_host import FakeHost, HostCallError, busy_error, create_fake_host

__all__ = [
    'FakeHost',
    'HostCallError',
    'busy_error',
    'create_fake_host',
]
