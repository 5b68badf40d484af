"""Validate command orchestration for CLI.

This module provides the ValidateCommand class that checks a page XML file
against the content schema, writes the corrected page, and optionally submits
it to the host through PageUpdater.
"""

import logging
from pathlib import Path
from typing import Optional

from lxml import etree

from src.cli.config import ConfigLoader
from src.cli.errors import CLIError, ConfigError, ConfigFilesystemError
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.content.errors import SchemaLoadError
from src.content.page_updater import PageUpdater
from src.content.schema_validator import SchemaValidator
from src.host_client.api_wrapper import HostAPIWrapper, MalformedResponseError, parse_xml
from src.host_client.errors import HostUnavailableError
from src.host_client.factory import HostConnector

logger = logging.getLogger(__name__)


class ValidateCommand:
    """Validates, corrects and optionally submits a page XML file.

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> validate_cmd = ValidateCommand(output_handler=output)
        >>> exit_code = validate_cmd.run("page.xml", output_path="page.fixed.xml")
    """

    def __init__(
        self,
        config_path: str = ConfigLoader.DEFAULT_CONFIG_PATH,
        output_handler: Optional[OutputHandler] = None,
        connector: Optional[HostConnector] = None,
    ):
        self.config_path = config_path
        self.output_handler = output_handler or OutputHandler()
        self.connector = connector

    def run(
        self,
        page_path: str,
        schema_path: Optional[str] = None,
        output_path: Optional[str] = None,
        submit: bool = False,
    ) -> ExitCode:
        """Execute the validate operation.

        Args:
            page_path: Page XML file to validate
            schema_path: XSD to validate against (defaults to config schema_path)
            output_path: Optional file receiving the corrected page
            submit: Also send the page to the host when it is valid

        Returns:
            ExitCode.SUCCESS when valid (and accepted if submitted),
            ExitCode.INVALID_CONTENT when validation fails
        """
        try:
            config = ConfigLoader.load(self.config_path)

            schema_path = schema_path or config.schema_path
            if not schema_path:
                self.output_handler.error("No schema given, use --schema or 'schema_path' in the configuration")
                return ExitCode.GENERAL_ERROR

            validator = SchemaValidator(schema_path)
            page = self._read_page(page_path)

            result = validator.validate(page)
            self.output_handler.print_validation_summary(result)

            if not result.valid:
                return ExitCode.INVALID_CONTENT

            if output_path:
                self._write_page(result.content, output_path)

            if submit:
                if not self.connector:
                    self.connector = HostConnector(config.host_factory)
                api = HostAPIWrapper(self.connector.connect(), policy=config.retry.to_policy())

                with self.output_handler.spinner("Updating page..."):
                    accepted = PageUpdater(api, validator).update(page)

                if not accepted:
                    self.output_handler.error("Host did not accept the page, see log for details")
                    return ExitCode.HOST_ERROR
                self.output_handler.success("Page updated")

            return ExitCode.SUCCESS

        except SchemaLoadError as e:
            logger.error(f"Schema error: {e}")
            self.output_handler.error(f"Schema error: {e}")
            return ExitCode.GENERAL_ERROR

        except MalformedResponseError as e:
            logger.error(f"Cannot parse {page_path}: {e}")
            self.output_handler.error(f"Cannot parse {page_path}: {e.reason}")
            return ExitCode.INVALID_CONTENT

        except HostUnavailableError as e:
            logger.error(f"Host unavailable: {e}")
            self.output_handler.error(f"Host unavailable: {e}")
            return ExitCode.HOST_ERROR

        except (ConfigError, ConfigFilesystemError) as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(f"Configuration error: {e}")
            return ExitCode.GENERAL_ERROR

        except CLIError as e:
            logger.error(f"CLI error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception("Unexpected error during validation")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    @staticmethod
    def _read_page(page_path: str) -> etree._Element:
        """Read and parse a page file.

        Raises:
            CLIError: If the file cannot be read
            MalformedResponseError: If the file is not well-formed XML
        """
        try:
            xml = Path(page_path).read_text(encoding='utf-8')
        except OSError as e:
            raise CLIError(f"Cannot read {page_path}: {e}") from e
        return parse_xml(xml, f"read {page_path}")

    def _write_page(self, content: etree._Element, output_path: str) -> None:
        try:
            Path(output_path).write_bytes(
                etree.tostring(content, encoding='utf-8', xml_declaration=True)
            )
        except OSError as e:
            raise CLIError(f"Cannot write {output_path}: {e}") from e
        self.output_handler.success(f"Corrected page written to {output_path}")
