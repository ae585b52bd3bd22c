import logging
from typing import Any

from loguru import logger as trace_logger
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from cortex.environment import get_settings


# Singleton Console instances
def get_console() -> Console:
    if not hasattr(get_console, "_console"):
        get_console._console = Console()
    return get_console._console


def get_error_console() -> Console:
    if not hasattr(get_error_console, "_console"):
        get_error_console._console = Console(stderr=True)
    return get_error_console._console


def print_panel(content: str, title: str | None = None, style: str = "bold blue", border_style: str | None = None):
    """Print a styled panel with optional title using Rich library.

    Args:
        content (str): The text content to display in the panel.
        title (str | None, optional): Title of the panel. Defaults to None.
        style (str, optional): Rich styling for the panel's content. Defaults to "bold blue".
        border_style (str | None, optional): Styling for the panel's border. Defaults to None.
    """
    console = get_console()
    style = style or "bold blue"
    border_style = border_style or style
    console.print(Panel(content, title=title, style=style, border_style=border_style))


def print_table(headers: list[str], rows: list[list[Any]], title: str | None = None):
    """Print a formatted table using Rich library.

    Args:
        headers (list[str]): Column headers for the table.
        rows (list[list[Any]]): Data rows to display in the table.
        title (str | None, optional): Title of the table. Defaults to None.
    """
    console = get_console()
    table = Table(title=title)
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*[str(cell) for cell in row])
    console.print(table)


def print_error(message: str) -> None:
    """Print a one-line error to stderr."""
    get_error_console().print(f"Error: {message}", style="bold red", markup=False, highlight=False, soft_wrap=True)


class RichConsoleLogger(logging.Logger):
    def __init__(self, name: str):
        super().__init__(name)

        settings = get_settings()
        self.log_level_str = settings.log_level
        self.log_level = logging.getLevelName(settings.log_level)
        self.setLevel(self.log_level)

        # Log records go to stderr so stdout stays reserved for reports.
        self.rich_handler = RichHandler(
            console=get_error_console(), rich_tracebacks=True, show_path=False, level=self.log_level
        )
        self.addHandler(self.rich_handler)

        if settings.debug:
            try:
                file_handler = logging.FileHandler(settings.log_file)
                file_handler.setLevel(self.log_level)
                file_handler.setFormatter(
                    logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
                )
                self.addHandler(file_handler)
            except OSError as error:
                self.error(f"Failed to set up file logging: {error}")


# Singleton logger instance
_console_logger = None


def get_console_logger() -> RichConsoleLogger:
    """Get a singleton instance of RichConsoleLogger with log level from settings.

    Environment variables:
        CORTEX_LOG_LEVEL: Set the log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        CORTEX_DEBUG: Enable debug mode with file logging (true, 1, yes)
        CORTEX_LOG_FILE: Specify the log file path (default: cortex.log)

    Returns:
        RichConsoleLogger: Configured logger instance
    """
    global _console_logger
    if _console_logger is None:
        _console_logger = RichConsoleLogger("cortex")
    return _console_logger


def configure_logging() -> RichConsoleLogger:
    """Route loguru trace output through the console logger's handlers."""
    console_logger = get_console_logger()
    trace_logger.remove()
    for handler in console_logger.handlers:
        trace_logger.add(handler, level=console_logger.log_level_str, format="{message}")
    return console_logger
