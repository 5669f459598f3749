"""
Page Text CLI Application.

Main entry point for the page text command-line interface. Lists the pages
of a project, shows their editable text fields and applies edit batches.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..exceptions.config_exceptions import ConfigurationError
from ..exceptions.page_text_exceptions import PageTextError
from ..services.page_store import LocalPageStore
from ..services.page_text_service import PageTextService
from ..utils.config import ConfigManager
from ..utils.logging_config import LoggingManager, LogFormat, LogLevel
from .pages import pages_app

# Initialize console for rich output
console = Console()

# Create main Typer app
app = typer.Typer(
    name="page-text",
    help="Edit the text of template pages in place",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(pages_app, name="pages", help="Page listing and text editing commands")

# Global state
_config_manager: Optional[ConfigManager] = None
_global_config: dict = {}


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Set up logging for a CLI invocation.

    Args:
        verbose: Enable verbose (DEBUG) logging

    Returns:
        The package logger
    """
    LoggingManager(
        log_level=LogLevel.DEBUG if verbose else LogLevel.INFO,
        log_format=LogFormat.STANDARD,
    )
    return logging.getLogger("page_text_backend")


def get_config_manager() -> ConfigManager:
    """
    Get or create the configuration manager for this invocation.

    Loading the configuration also applies its ``logging`` section.

    Raises:
        typer.Exit: If configuration loading fails
    """
    global _config_manager

    if _config_manager is None:
        try:
            manager = ConfigManager(
                config_file=_global_config.get("config_path"),
                project_root=_global_config.get("project_root"),
                load_env=True
            )
            config = manager.load_config()
        except ConfigurationError as e:
            rprint(f"[red]Configuration Error:[/red] {e}")
            raise typer.Exit(1)

        LoggingManager.from_config(config.get("logging", {}), verbose=_global_config.get("verbose", False))
        _config_manager = manager

    return _config_manager


def get_page_text_service() -> PageTextService:
    """Build the page text service over the project on local disk."""
    config_manager = get_config_manager()
    store = LocalPageStore(config_manager.project_root)
    return PageTextService(store, config_manager)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None,
        "--config-path",
        "-c",
        help="Path to configuration file (default: pagetext.config.json)",
        metavar="PATH",
    ),
    project_root: Optional[Path] = typer.Option(
        None,
        "--project-root",
        "-r",
        help="Project root directory (default: current directory)",
        file_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging (DEBUG level)",
    ),
) -> None:
    """
    Page Text CLI - find and edit the visible text of template pages.

    Edits are applied as byte-exact splices, so everything outside the
    edited text stays exactly as it was.

    Common workflows:
    • List pages: page-text pages list
    • Show fields: page-text pages fields about.astro
    • Apply edits: page-text pages apply about.astro edits.json
    """
    global _config_manager, _global_config

    # Each invocation starts from a clean configuration
    _config_manager = None
    logger = setup_logging(verbose)

    _global_config = {
        "config_path": config_path,
        "project_root": str(project_root) if project_root else None,
        "verbose": verbose,
        "logger": logger,
    }
    ctx.obj = _global_config.copy()


@app.command()
def info() -> None:
    """Show configuration status."""
    config_manager = get_config_manager()
    config = config_manager.config
    summary = config_manager.get_config_summary()

    info_text = Text()
    info_text.append("Page Text Information\n\n", style="bold blue")
    info_text.append(f"Version: {config.get('version', 'Unknown')}\n")
    info_text.append(f"Config file: {summary['loaded_from'] or 'built-in defaults'}\n")
    info_text.append(f"Project root: {config_manager.project_root}\n\n")

    info_text.append("Configuration:\n", style="bold")
    info_text.append(f"• Pages directory: {config.get('pages_dir')}\n")
    info_text.append(f"• Admin base path: {config.get('base_path')}\n")
    info_text.append(f"• Open tag window: {config.get('extraction', {}).get('open_tag_window')} bytes\n")
    info_text.append(f"• Search window: {config.get('patching', {}).get('search_window')} bytes\n")
    info_text.append(f"• Log level: {config.get('logging', {}).get('level')}\n")

    if summary["environment_overrides"]:
        info_text.append("\nEnvironment overrides:\n", style="bold")
        for override in summary["environment_overrides"]:
            info_text.append(f"• {override['env_var']} → {override['config_key']}\n")

    console.print(Panel(info_text, title="System Information", border_style="blue"))


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__
    rprint(f"Page Text [blue]v{__version__}[/blue]")


def handle_cli_error(error: Exception) -> None:
    """
    Handle CLI errors with user-friendly messages.

    Args:
        error: The exception that occurred
    """
    logger = logging.getLogger("page_text_backend")

    if isinstance(error, ConfigurationError):
        rprint(f"[red]Configuration Error:[/red] {error}")
        logger.debug("Configuration error details", exc_info=True)
    elif isinstance(error, PageTextError):
        rprint(f"[red]Error:[/red] {error}")
        logger.debug("Page text error details", exc_info=True)
    elif isinstance(error, PermissionError):
        rprint(f"[red]Permission Denied:[/red] {error}")
        logger.debug("Permission error details", exc_info=True)
    else:
        rprint(f"[red]Error:[/red] {error}")
        logger.debug("Unexpected error details", exc_info=True)


def cli_main() -> None:
    """
    Main CLI entry point with error handling.

    This function is called by the console script entry point.
    """
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt:
        rprint("\n[yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        handle_cli_error(e)
        raise typer.Exit(1)


if __name__ == "__main__":
    cli_main()
