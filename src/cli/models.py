"""Data models for CLI operations.

This module defines the data models used by the CLI module.
All models use dataclasses for clean, type-safe data structures,
following the patterns established in src/hierarchy/models.py.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from src.host_client.retry_logic import DEFAULT_BUSY_CODES, RetryPolicy


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): General error (config issues, bad arguments)
    - INVALID_CONTENT (2): Content failed schema validation
    - HOST_ERROR (3): Host unavailable or returned nothing usable
    - CANCELLED (4): Operation cancelled by the user, partial result reported

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_CONTENT = 2
    HOST_ERROR = 3
    CANCELLED = 4


@dataclass
class RetryConfig:
    """Retry settings read from the configuration file.

    Attributes:
        max_attempts: Total attempts per host call
        base_delay_ms: Delay multiplied by the attempt number, in milliseconds
        busy_codes: Host status codes treated as "busy"
    """
    max_attempts: int = 3
    base_delay_ms: int = 250
    busy_codes: List[int] = field(default_factory=lambda: sorted(DEFAULT_BUSY_CODES))

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay_ms / 1000.0,
            busy_codes=frozenset(self.busy_codes),
        )


@dataclass
class BridgeConfig:
    """Top-level configuration stored in .notebook-bridge/config.yaml.

    Attributes:
        host_factory: "package.module:callable" creating the host application
        retry: Retry settings for host calls
        schema_path: XSD used to validate page content
    """
    host_factory: Optional[str] = None
    retry: RetryConfig = field(default_factory=RetryConfig)
    schema_path: Optional[str] = None
