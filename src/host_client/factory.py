"""Host factory loading.

The transport used to reach the host process is pluggable: a factory is named
by a ``"package.module:callable"`` reference, taken from the environment
(loaded from a .env file using python-dotenv) or from the configuration file.
Calling the factory must return a HostApplication.
"""

import importlib
import logging
import os
from typing import Callable, Optional

from dotenv import load_dotenv

from .application import HostApplication
from .errors import HostUnavailableError

logger = logging.getLogger(__name__)

HOST_FACTORY_ENV = 'NOTEBOOK_HOST_FACTORY'


class HostConnector:
    """Resolves and invokes the configured host factory.

    The environment variable NOTEBOOK_HOST_FACTORY takes precedence over the
    factory reference given to the constructor (usually read from config).

    Raises:
        HostUnavailableError: If no factory is configured, the reference
            cannot be imported, or the factory fails

    Example:
        >>> connector = HostConnector("my_transport.host:create_application")
        >>> app = connector.connect()
    """

    def __init__(self, factory_ref: Optional[str] = None):
        """Initialize the connector by loading environment variables from .env file.

        Args:
            factory_ref: Fallback factory reference when the environment has none
        """
        load_dotenv()
        self._factory_ref = factory_ref

    @property
    def factory_ref(self) -> Optional[str]:
        """The effective factory reference (environment first)."""
        return os.getenv(HOST_FACTORY_ENV) or self._factory_ref

    def connect(self) -> HostApplication:
        """Create a host application through the configured factory.

        Returns:
            HostApplication: A ready-to-use host

        Raises:
            HostUnavailableError: If the host cannot be created
        """
        ref = self.factory_ref
        if not ref:
            raise HostUnavailableError(
                "unknown",
                f"set {HOST_FACTORY_ENV} or 'host_factory' in the configuration"
            )

        factory = self._resolve(ref)
        try:
            app = factory()
        except Exception as e:
            raise HostUnavailableError(ref, str(e)) from e

        if not isinstance(app, HostApplication):
            raise HostUnavailableError(
                ref,
                f"factory returned {type(app).__name__}, not a HostApplication"
            )

        logger.info(f"Connected to host via {ref}")
        return app

    def _resolve(self, ref: str) -> Callable[[], HostApplication]:
        """Import the callable named by a "module:attribute" reference."""
        module_name, sep, attr_path = ref.partition(':')
        if not sep or not module_name or not attr_path:
            raise HostUnavailableError(ref, "expected 'package.module:callable'")

        try:
            target = importlib.import_module(module_name)
        except ImportError as e:
            raise HostUnavailableError(ref, f"cannot import {module_name}: {e}") from e

        for attr in attr_path.split('.'):
            try:
                target = getattr(target, attr)
            except AttributeError as e:
                raise HostUnavailableError(ref, f"{module_name} has no attribute {attr_path}") from e

        if not callable(target):
            raise HostUnavailableError(ref, f"{attr_path} is not callable")

        return target
