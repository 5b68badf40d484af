"""Host client library for the notebook bridge.

This package provides Python abstractions over the host application's
hierarchy API: a typed error hierarchy, busy-aware retry logic, and a
wrapper that parses host XML and absorbs failures per the best-effort policy.
"""

from .errors import (
    BridgeError,
    HostError,
    HostBusyError,
    HostUnavailableError,
)
from .application import HostApplication
from .models import Scope, PageDetail, ExportFormat, SpecialLocation, ItemInfo, HostFolders
from .retry_logic import (
    ErrorClass,
    RetryPolicy,
    classify_host_error,
    invoke_with_retry,
)
from .api_wrapper import HostAPIWrapper, MalformedResponseError
from .factory import HostConnector

__all__ = [
    "BridgeError",
    "HostError",
    "HostBusyError",
    "HostUnavailableError",
    "HostApplication",
    "Scope",
    "PageDetail",
    "ExportFormat",
    "SpecialLocation",
    "ItemInfo",
    "HostFolders",
    "ErrorClass",
    "RetryPolicy",
    "classify_host_error",
    "invoke_with_retry",
    "HostAPIWrapper",
    "MalformedResponseError",
    "HostConnector",
]
