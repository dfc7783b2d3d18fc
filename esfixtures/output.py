"""Console output for the esfix command line."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Writes status messages and results to the terminal."""

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize the formatter.

        Args:
            json_output: Print results as JSON instead of text
            quiet: Suppress informational messages
            console: Console for regular output
            err_console: Console for warnings and errors
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.err_console = err_console or Console(
            stderr=True, highlight=False, soft_wrap=True
        )

    def info(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        self.err_console.print(message, style="yellow", markup=False)

    def error(self, message: str) -> None:
        self.err_console.print(message, style="bold red", markup=False)

    def output_json(self, data: Any) -> None:
        self.console.print_json(json.dumps(data, default=str))

    def print_summary(self, title: str, rows: list[tuple[str, Any]]) -> None:
        """Print a two-column summary table (or a JSON object)."""
        if self.json_output:
            self.output_json({key: value for key, value in rows})
            return
        if self.quiet:
            return
        table = Table(title=title, show_header=False)
        table.add_column("Key", style="bold")
        table.add_column("Value")
        for key, value in rows:
            table.add_row(str(key), str(value))
        self.console.print(table)
