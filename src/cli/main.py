"""Main CLI entry point for notebook-bridge command.

This module provides the Typer application that serves as the entry point
for the notebook-bridge command-line tool. Global options (verbosity, log
directory, colors, configuration file) are handled by the app callback and
shared with the index and validate subcommands.
"""

import logging
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from src.cli.config import ConfigLoader
from src.cli.index_command import IndexCommand
from src.cli.output import OutputHandler
from src.cli.validate_command import ValidateCommand
from src.host_client.models import Scope

VERSION = "0.1.0"

app = typer.Typer(
    name="notebook-bridge",
    help="""Bridge to a notebook host application's hierarchy and page content.

QUICK START:
  notebook-bridge index                          # Index pages of the current notebook
  notebook-bridge index --scope pages            # Index pages of the current section
  notebook-bridge index --json index.json        # Write the index as JSON
  notebook-bridge validate page.xml --schema page.xsd --output fixed.xml

The host is created by the factory named in NOTEBOOK_HOST_FACTORY or in
'host_factory' of .notebook-bridge/config.yaml.""",
    add_completion=False,
    rich_markup_mode=None,  # Disable Rich markup to avoid compatibility issues
    no_args_is_help=False,
)

# Module logger
logger = logging.getLogger(__name__)


class ScopeChoice(str, Enum):
    """Index scopes accepted on the command line."""
    PAGES = "pages"
    SECTIONS = "sections"
    NOTEBOOKS = "notebooks"

    def to_scope(self) -> Scope:
        return Scope[self.name]


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        # Timestamped filename in local time
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"notebook-bridge_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: str = typer.Option(
        ConfigLoader.DEFAULT_CONFIG_PATH,
        "--config",
        help="Configuration file",
        metavar="FILE",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Bridge to a notebook host application's hierarchy and page content."""
    if version:
        typer.echo(f"notebook-bridge version {VERSION}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    _configure_logging(verbosity, logdir)
    ctx.obj = {
        'config_path': config,
        'output': OutputHandler(verbosity=verbosity, no_color=no_color),
    }


@app.command("index")
def index_command(
    ctx: typer.Context,
    scope: ScopeChoice = typer.Option(
        ScopeChoice.SECTIONS,
        "--scope",
        "-s",
        case_sensitive=False,
        help="pages=current section, sections=current notebook, notebooks=all open notebooks",
    ),
    json_path: Optional[str] = typer.Option(
        None,
        "--json",
        help="Write the index to this JSON file",
        metavar="FILE",
    ),
) -> None:
    """Index page hyperlinks within a scope.

    Press Ctrl+C to stop early; the partial index is still reported.
    """
    output: OutputHandler = ctx.obj['output']
    output.info(f"Indexing scope: {scope.value}")

    index_cmd = IndexCommand(config_path=ctx.obj['config_path'], output_handler=output)
    exit_code = index_cmd.run(scope=scope.to_scope(), json_path=json_path)

    raise typer.Exit(exit_code)


@app.command("validate")
def validate_command(
    ctx: typer.Context,
    page: str = typer.Argument(
        ...,
        help="Page XML file to validate",
    ),
    schema: Optional[str] = typer.Option(
        None,
        "--schema",
        help="XSD file (defaults to 'schema_path' in the configuration)",
        metavar="FILE",
    ),
    output_path: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the corrected page to this file",
        metavar="FILE",
    ),
    submit: bool = typer.Option(
        False,
        "--submit",
        help="Send the page to the host when it is valid",
    ),
) -> None:
    """Validate page XML against the content schema, correcting exponent values."""
    output: OutputHandler = ctx.obj['output']

    validate_cmd = ValidateCommand(config_path=ctx.obj['config_path'], output_handler=output)
    exit_code = validate_cmd.run(
        page_path=page,
        schema_path=schema,
        output_path=output_path,
        submit=submit,
    )

    raise typer.Exit(exit_code)


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
