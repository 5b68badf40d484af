"""Retry logic with linear backoff for a busy host application.

The host serializes every call against a single actor and rejects calls that
race with its own internal activity by reporting a "busy" status instead of
blocking. This module classifies host errors as transient or permanent and
wraps units of work in a best-effort invoker: transient errors are retried
with a linearly increasing delay (250ms, 500ms), everything else is logged
and swallowed so the caller's flow continues.
"""

import time
import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import wraps
from typing import Callable, FrozenSet, Iterable, Optional, TypeVar

from .errors import HostBusyError, HostError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Host "COM busy" code followed by the generic RPC retry-later/rejected codes
HOST_BUSY = 0x80042030
RPC_SERVERCALL_RETRYLATER = 0x8001010A
RPC_CALL_REJECTED = 0x80010001

DEFAULT_BUSY_CODES: FrozenSet[int] = frozenset({
    HOST_BUSY,
    RPC_SERVERCALL_RETRYLATER,
    RPC_CALL_REJECTED,
})


class ErrorClass(Enum):
    """Classification of a host error for retry purposes."""
    TRANSIENT = "transient"
    PERMANENT = "permanent"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounds and delays used by invoke_with_retry.

    Attributes:
        max_attempts: Total number of attempts, including the first one
        base_delay: Delay in seconds multiplied by the attempt number
        busy_codes: Unsigned status codes that classify as transient
    """
    max_attempts: int = 3
    base_delay: float = 0.25
    busy_codes: FrozenSet[int] = field(default_factory=lambda: DEFAULT_BUSY_CODES)


DEFAULT_POLICY = RetryPolicy()


def normalize_status_code(code: int) -> int:
    """Map a signed 32-bit HRESULT onto its unsigned form.

    Example:
        >>> hex(normalize_status_code(-2147213264))
        '0x80042030'
    """
    return code & 0xFFFFFFFF


def parse_status_codes(values: Iterable) -> FrozenSet[int]:
    """Parse status codes given as ints or hex/decimal strings."""
    codes = set()
    for value in values:
        if isinstance(value, str):
            value = int(value, 0)
        codes.add(normalize_status_code(int(value)))
    return frozenset(codes)


def status_code_of(exception: BaseException) -> Optional[int]:
    """Extract the host status code carried by an exception, if any.

    Looks at HostError.status_code first, then the ``hresult`` attribute used
    by COM bridges, then a plain ``status_code`` attribute.
    """
    if isinstance(exception, HostError):
        code = exception.status_code
    else:
        code = getattr(exception, 'hresult', None)
        if code is None:
            code = getattr(exception, 'status_code', None)

    if isinstance(code, int) and not isinstance(code, bool):
        return normalize_status_code(code)
    return None


def classify_host_error(
    exception: BaseException,
    busy_codes: FrozenSet[int] = DEFAULT_BUSY_CODES
) -> ErrorClass:
    """Classify an exception raised by a host call.

    Args:
        exception: The exception raised by the unit of work
        busy_codes: Status codes treated as "host busy"

    Returns:
        ErrorClass.TRANSIENT for busy signals, ErrorClass.PERMANENT otherwise
    """
    if isinstance(exception, HostBusyError):
        return ErrorClass.TRANSIENT

    code = status_code_of(exception)
    if code is not None and code in busy_codes:
        return ErrorClass.TRANSIENT

    return ErrorClass.PERMANENT


def invoke_with_retry(
    work: Callable[[], T],
    policy: Optional[RetryPolicy] = None,
    description: str = "host action"
) -> Optional[T]:
    """Invoke a unit of work, retrying while the host reports it is busy.

    The work is attempted up to ``policy.max_attempts`` times. After a busy
    failure the invoker sleeps ``base_delay * attempt`` seconds before the next
    attempt; there is no sleep after the final attempt. Permanent errors and
    exhausted retries are logged and never raised.

    Args:
        work: Zero-argument callable performing one host call
        policy: Retry bounds (defaults to 3 attempts, 250ms base delay)
        description: Short label used in log messages

    Returns:
        The value returned by work, or None when the work was abandoned

    Example:
        >>> invoke_with_retry(lambda: app.sync_hierarchy(notebook_id))
    """
    policy = policy or DEFAULT_POLICY

    for attempt in range(1, policy.max_attempts + 1):
        try:
            result = work()
        except Exception as e:
            if classify_host_error(e, policy.busy_codes) is ErrorClass.PERMANENT:
                logger.error(f"Error invoking {description}: {e}", exc_info=True)
                return None

            if attempt >= policy.max_attempts:
                logger.error(
                    f"Host still busy after {attempt} attempts, "
                    f"abandoning {description}: {e}"
                )
                return None

            wait_time = policy.base_delay * attempt
            logger.warning(
                f"Host is busy, retrying {description} in {int(wait_time * 1000)}ms "
                f"(attempt {attempt}/{policy.max_attempts})"
            )
            time.sleep(wait_time)
            continue

        if attempt > 1:
            logger.info(f"{description} completed successfully after {attempt - 1} retries")
        return result

    return None


def as_decorator(
    policy: Optional[RetryPolicy] = None
) -> Callable[[Callable[..., T]], Callable[..., Optional[T]]]:
    """Decorator version of invoke_with_retry.

    Example:
        >>> @as_decorator()
        ... def sync_notebook(notebook_id: str):
        ...     app.sync_hierarchy(notebook_id)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Optional[T]]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Optional[T]:
            return invoke_with_retry(
                lambda: func(*args, **kwargs),
                policy=policy,
                description=func.__name__
            )

        return wrapper

    return decorator
