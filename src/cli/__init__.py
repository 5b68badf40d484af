"""Command-line interface for the notebook bridge.

This package provides the `notebook-bridge` CLI tool that indexes page
hyperlinks of the host application and validates page content against its
schema, with progress indication and error handling.
"""

from .index_command import IndexCommand
from .validate_command import ValidateCommand
from .config import ConfigLoader
from .models import ExitCode, BridgeConfig, RetryConfig
from .errors import (
    CLIError,
    ConfigError,
    ConfigFilesystemError,
)

__all__ = [
    'IndexCommand',
    'ValidateCommand',
    'ConfigLoader',
    'ExitCode',
    'BridgeConfig',
    'RetryConfig',
    'CLIError',
    'ConfigError',
    'ConfigFilesystemError',
]
