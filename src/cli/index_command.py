"""Index command orchestration for CLI.

This module provides the IndexCommand class that builds a cross-reference
index of page hyperlinks for the CLI. It coordinates ConfigLoader,
HostConnector, HyperlinkIndexer and OutputHandler, reports progress per page,
and turns Ctrl+C into a cooperative cancellation of the walk.
"""

import dataclasses
import json
import logging
import signal
from pathlib import Path
from typing import Callable, Optional

from src.cli.config import ConfigLoader
from src.cli.errors import CLIError, ConfigError, ConfigFilesystemError
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.hierarchy.hyperlink_indexer import HyperlinkIndexer
from src.hierarchy.models import CancellationToken, CrossReferenceIndex
from src.host_client.api_wrapper import HostAPIWrapper
from src.host_client.errors import HostUnavailableError
from src.host_client.factory import HostConnector
from src.host_client.models import Scope

logger = logging.getLogger(__name__)


class IndexCommand:
    """Builds and reports the hyperlink cross-reference index.

    The workflow:
        1. Load configuration (missing file means defaults)
        2. Connect to the host through the configured factory
        3. Walk the scope, advancing a progress bar per page
        4. Print a summary and optionally write the index as JSON

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> index_cmd = IndexCommand(output_handler=output)
        >>> exit_code = index_cmd.run(scope=Scope.SECTIONS, json_path="index.json")
    """

    def __init__(
        self,
        config_path: str = ConfigLoader.DEFAULT_CONFIG_PATH,
        output_handler: Optional[OutputHandler] = None,
        connector: Optional[HostConnector] = None,
        token: Optional[CancellationToken] = None,
    ):
        """Initialize index command with dependencies.

        Args:
            config_path: Path to configuration YAML file
            output_handler: OutputHandler for terminal output (optional)
            connector: HostConnector creating the host (optional, built from config)
            token: Cancellation token (optional, a fresh one per command)
        """
        self.config_path = config_path
        self.output_handler = output_handler or OutputHandler()
        self.connector = connector
        self.token = token or CancellationToken()

    def run(self, scope: Scope = Scope.SECTIONS, json_path: Optional[str] = None) -> ExitCode:
        """Execute the index operation.

        Args:
            scope: Extent of the index (PAGES, SECTIONS or NOTEBOOKS)
            json_path: Optional file receiving the index as JSON

        Returns:
            ExitCode indicating success or specific failure type
        """
        try:
            logger.info(f"Loading configuration from {self.config_path}")
            config = ConfigLoader.load(self.config_path)

            if not self.connector:
                self.connector = HostConnector(config.host_factory)

            app = self.connector.connect()
            api = HostAPIWrapper(app, policy=config.retry.to_policy())

            index, total = self._build(api, scope)
            cancelled = self.token.is_cancellation_requested

            self.output_handler.print_index_summary(index, total, cancelled)

            if json_path:
                self._write_json(index, json_path)

            return ExitCode.CANCELLED if cancelled else ExitCode.SUCCESS

        except HostUnavailableError as e:
            logger.error(f"Host unavailable: {e}")
            self.output_handler.error(f"Host unavailable: {e}")
            self.output_handler.info("Check NOTEBOOK_HOST_FACTORY or 'host_factory' in the configuration")
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
            logger.exception("Unexpected error during indexing")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def _build(self, api: HostAPIWrapper, scope: Scope):
        """Run the indexer with a progress bar; returns (index, total pages)."""
        indexer = HyperlinkIndexer(api)
        counted = {'total': 0}

        previous = _install_interrupt_handler(self._interrupt)
        try:
            with self.output_handler.progress_bar() as progress:
                task = None

                def on_count(total: int) -> None:
                    nonlocal task
                    counted['total'] = total
                    task = progress.add_task("Indexing pages", total=total)

                def on_step() -> None:
                    if task is not None:
                        progress.update(task, advance=1)

                index = indexer.build_index(scope, self.token, on_count, on_step)
        finally:
            _restore_interrupt_handler(previous)

        return index, counted['total']

    def _interrupt(self, signum, frame) -> None:
        logger.info("Interrupt received, cancelling index")
        self.token.cancel()

    def _write_json(self, index: CrossReferenceIndex, json_path: str) -> None:
        """Write the index to a JSON file keyed by identity token.

        Raises:
            CLIError: If the file cannot be written
        """
        data = {hyper_id: dataclasses.asdict(entry) for hyper_id, entry in index.items()}
        try:
            path = Path(json_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding='utf-8')
        except OSError as e:
            raise CLIError(f"Cannot write index to {json_path}: {e}") from e

        logger.info(f"Wrote {len(index)} entries to {json_path}")
        self.output_handler.success(f"Index written to {json_path}")


def _install_interrupt_handler(handler: Callable):
    """Route SIGINT to handler; returns the previous handler, or None off the main thread."""
    try:
        return signal.signal(signal.SIGINT, handler)
    except ValueError:
        # signal handlers can only be installed from the main thread
        return None


def _restore_interrupt_handler(previous) -> None:
    if previous is not None:
        signal.signal(signal.SIGINT, previous)

