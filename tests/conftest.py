"""Root pytest configuration for all tests.

This conftest applies to all unit tests.
"""

import logging

import pytest

from src.host_client.retry_logic import RetryPolicy


# The bridge logs through the 'src' namespace; keep DEBUG records available
# to caplog regardless of what a CLI test configured before.
logging.getLogger("src").setLevel(logging.DEBUG)


@pytest.fixture
def fast_policy():
    """Retry policy without delays, for tests that exercise busy retries."""
    return RetryPolicy(max_attempts=3, base_delay=0.0)
