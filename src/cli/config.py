"""YAML configuration loading and validation.

This module handles loading the bridge configuration from a YAML file.
A missing file is not an error: every field has a default, and host
commands report a clear error later if no host factory is configured.
"""

from typing import Any, Dict, List

import yaml

from src.host_client.retry_logic import parse_status_codes

from .errors import ConfigError, ConfigFilesystemError
from .models import BridgeConfig, RetryConfig


class ConfigLoader:
    """Handles configuration file loading and validation.

    Configuration file structure:
        host_factory: "my_transport.host:create_application"
        retry:
          max_attempts: 3
          base_delay_ms: 250
          busy_codes: ["0x80042030"]
        schema_path: "schemas/page-2013.xsd"
    """

    DEFAULT_CONFIG_PATH = '.notebook-bridge/config.yaml'

    KNOWN_TOP_LEVEL_FIELDS = {'host_factory', 'retry', 'schema_path'}
    KNOWN_RETRY_FIELDS = {'max_attempts', 'base_delay_ms', 'busy_codes'}

    @classmethod
    def load(cls, config_path: str) -> BridgeConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            BridgeConfig object (defaults if the file does not exist or is empty)

        Raises:
            ConfigFilesystemError: If file exists but cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return BridgeConfig()
        except PermissionError:
            raise ConfigFilesystemError(
                config_path,
                'read',
                'Permission denied'
            )
        except OSError as e:
            raise ConfigFilesystemError(
                config_path,
                'read',
                str(e)
            )

        if not content.strip():
            return BridgeConfig()

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if config_dict is None:
            return BridgeConfig()

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> BridgeConfig:
        """Parse and validate a configuration dictionary.

        Raises:
            ConfigError: If configuration is invalid
        """
        unknown = set(config_dict.keys()) - cls.KNOWN_TOP_LEVEL_FIELDS
        if unknown:
            raise ConfigError(
                f"Unknown fields: {', '.join(sorted(unknown))}"
            )

        host_factory = cls._optional_string(config_dict, 'host_factory')
        if host_factory is not None and ':' not in host_factory:
            raise ConfigError(
                "Expected 'package.module:callable'",
                'host_factory'
            )

        schema_path = cls._optional_string(config_dict, 'schema_path')

        retry_raw = config_dict.get('retry') or {}
        if not isinstance(retry_raw, dict):
            raise ConfigError("Field 'retry' must be a dictionary", 'retry')

        return BridgeConfig(
            host_factory=host_factory,
            retry=cls._parse_retry(retry_raw),
            schema_path=schema_path,
        )

    @classmethod
    def _parse_retry(cls, retry_dict: Dict[str, Any]) -> RetryConfig:
        unknown = set(retry_dict.keys()) - cls.KNOWN_RETRY_FIELDS
        if unknown:
            raise ConfigError(
                f"Unknown fields: {', '.join(sorted(unknown))}",
                'retry'
            )

        defaults = RetryConfig()
        max_attempts = cls._parse_int(retry_dict, 'max_attempts', defaults.max_attempts)
        base_delay_ms = cls._parse_int(retry_dict, 'base_delay_ms', defaults.base_delay_ms)

        if max_attempts < 1:
            raise ConfigError(
                f"Must be at least 1, got {max_attempts}",
                'retry.max_attempts'
            )
        if base_delay_ms < 0:
            raise ConfigError(
                f"Cannot be negative, got {base_delay_ms}",
                'retry.base_delay_ms'
            )

        busy_codes = defaults.busy_codes
        if 'busy_codes' in retry_dict:
            busy_codes = cls._parse_codes(retry_dict['busy_codes'])

        return RetryConfig(
            max_attempts=max_attempts,
            base_delay_ms=base_delay_ms,
            busy_codes=busy_codes,
        )

    @staticmethod
    def _parse_int(retry_dict: Dict[str, Any], name: str, default: int) -> int:
        value = retry_dict.get(name, default)
        field_name = f"retry.{name}"

        # bool is an int subclass; floats must not be truncated
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise ConfigError(f"Must be an integer, got {value!r}", field_name)

        try:
            return int(value)
        except (ValueError, TypeError) as e:
            raise ConfigError(
                f"Invalid field type: {str(e)}",
                field_name
            )

    @staticmethod
    def _parse_codes(raw: Any) -> List[int]:
        if not isinstance(raw, list) or not raw:
            raise ConfigError(
                "Must be a non-empty list of status codes",
                'retry.busy_codes'
            )

        try:
            return sorted(parse_status_codes(raw))
        except (ValueError, TypeError) as e:
            raise ConfigError(
                f"Invalid status code: {e}",
                'retry.busy_codes'
            )

    @staticmethod
    def _optional_string(config_dict: Dict[str, Any], name: str):
        value = config_dict.get(name)
        if value is None:
            return None
        if not isinstance(value, str) or not value.strip():
            raise ConfigError("Must be a non-empty string", name)
        return value.strip()
