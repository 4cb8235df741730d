"""Rich console output for the tracegen CLI.

Example:
    >>> output = CLIOutput()
    >>> output.summary(pipeline.run(sources), window=DepthWindow(1, 3))
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tracegen.core.enumerator import DepthWindow
from tracegen.pipeline import PipelineResult


class CLIOutput:
    """Prints pipeline results to the terminal.

    Args:
        use_colors: Allow ANSI colors when stdout is a terminal.
        console: Console to print to. Defaults to one bound to stdout.
    """

    SYMBOLS = {
        "check": "✓",
        "cross": "✗",
    }
    ASCII_SYMBOLS = {
        "check": "+",
        "cross": "x",
    }

    def __init__(self, use_colors: bool = True, console: Console | None = None) -> None:
        self._use_colors = use_colors and self._supports_color()
        self.console = console or Console(no_color=not self._use_colors, highlight=False)

    @staticmethod
    def _supports_color() -> bool:
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

    def _symbol(self, name: str) -> str:
        encoding = (getattr(sys.stdout, "encoding", None) or "").lower()
        if "utf" in encoding:
            return self.SYMBOLS[name]
        return self.ASCII_SYMBOLS[name]

    def error(self, message: str) -> None:
        self.console.print(f"[red]{self._symbol('cross')}[/red] {escape(message)}")

    def success(self, message: str) -> None:
        self.console.print(f"[green]{self._symbol('check')}[/green] {escape(message)}")

    def traces(self, result: PipelineResult) -> None:
        """Print every distinct trace of one file, one per line."""
        self.console.print(f"[bold]{escape(str(result.path))}[/bold]")
        for trace in result.traces:
            self.console.print(f"  {escape(trace)}", soft_wrap=True)

    def summary(
        self,
        results: Sequence[PipelineResult],
        window: DepthWindow | tuple[int, int] | None = None,
    ) -> None:
        """Print the per-file table followed by any errors."""
        table = Table(show_header=True, header_style="bold", box=None)
        table.add_column("Status", width=6, justify="center")
        table.add_column("Source", min_width=20)
        table.add_column("Traces", justify="right")
        table.add_column("Written to")

        for result in results:
            if result.ok:
                status = f"[green]{self._symbol('check')}[/green]"
            else:
                status = f"[red]{self._symbol('cross')}[/red]"
            table.add_row(
                status,
                escape(str(result.path)),
                str(result.trace_count),
                escape(str(result.traces_path)) if result.traces_path else "-",
            )

        failed = sum(1 for result in results if not result.ok)
        if isinstance(window, tuple):
            window_text = f"[{window[0]}, {window[1]}]"
        else:
            window_text = str(window) if window is not None else "unbounded"
        title = (
            f"{len(results)} file(s), {sum(r.trace_count for r in results)} trace(s), "
            f"depth {window_text}"
        )
        self.console.print(
            Panel(
                table,
                title=f"[bold]{escape(title)}[/bold]",
                border_style="red" if failed else "green",
            )
        )

        for result in results:
            for message in result.errors:
                self.error(str(message))
