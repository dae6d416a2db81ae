"""Console observer for displaying scenario execution."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .events import HarnessObserver, StatusLevel

if TYPE_CHECKING:
    from ..harness.scenario import ScenarioResult


class ConsoleObserver(HarnessObserver):
    """Observer that prints scenario execution to console using Rich."""

    def __init__(
        self,
        console: Optional[Console] = None,
        prefix: Optional[str] = None,
        show_poll_attempts: bool = False,
    ):
        """Initialize console observer.

        Args:
            console: Rich console instance (created if not provided)
            prefix: Optional prefix for all output
            show_poll_attempts: Print every poll attempt, not just the outcome
        """
        self.console = console or Console()
        self.prefix = prefix
        self.show_poll_attempts = show_poll_attempts

    def _emit_prefix(self) -> None:
        if self.prefix:
            self.console.print(f"[bold]{escape(f'[{self.prefix}]')}[/bold]")

    async def on_scenario_start(self, name: str, kind: str) -> None:
        self._emit_prefix()
        self.console.rule(f"[bold]{name}[/bold] [dim]({kind})[/dim]")

    async def on_submit(self, variables: Mapping[str, Any], accepted: bool, detail: Any) -> None:
        self._emit_prefix()
        args_str = escape(str(dict(variables))[:100])
        if accepted:
            self.console.print(f"[green]→ Accepted[/green] {args_str} [dim]{escape(str(detail)[:100])}[/dim]")
        else:
            self.console.print(f"[magenta]→ Rejected[/magenta] {args_str} [dim]{escape(str(detail))}[/dim]")

    async def on_poll_attempt(self, key: str, attempt: int, record_count: int, elapsed: float) -> None:
        if not self.show_poll_attempts:
            return
        self._emit_prefix()
        self.console.print(
            f"[dim]poll #{attempt} {key}: {record_count} record(s) after {elapsed:.2f}s[/dim]"
        )

    async def on_status(self, message: str, level: StatusLevel | str = StatusLevel.INFO) -> None:
        self._emit_prefix()
        level = StatusLevel(level)
        if level == StatusLevel.ERROR:
            self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")
        elif level == StatusLevel.WARNING:
            self.console.print(f"[yellow]Warning:[/yellow] {escape(message)}")
        else:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    async def on_scenario_end(self, result: "ScenarioResult") -> None:
        self._emit_prefix()
        if result.success:
            self.console.print(f"[green]PASS[/green] {escape(result.name)}")
        else:
            self.console.print(f"[red]FAIL[/red] {escape(result.name)} [dim]{escape(str(result.error))}[/dim]")

    def print_summary(self, results: Sequence["ScenarioResult"]) -> None:
        """Display a table with one row per scenario result."""
        if not results:
            return

        self._emit_prefix()
        table = Table(title="Command scenarios", show_lines=True)
        table.add_column("Scenario")
        table.add_column("Kind")
        table.add_column("Status")
        table.add_column("Time (ms)", justify="right")

        for result in results:
            status = "[green]PASS[/green]" if result.success else "[red]FAIL[/red]"
            if result.error and not result.success:
                status = f"[red]FAIL[/red]\n[dim]{escape(result.error)}[/dim]"
            table.add_row(
                escape(result.name),
                result.kind.value,
                status,
                str(result.execution_time_ms or 0),
            )

        self.console.print(table)
