"""User facing output: status messages and pipeline progress."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape

from .pipeline import StepResult, StepStatus


class ConsoleReporter:
    """Prints success/info/warning/error messages to the terminal."""

    def __init__(self, console: Optional[Console] = None, *, silent: bool = False, debug: bool = False) -> None:
        self.console = console or Console(stderr=False, highlight=False)
        self.silent = silent
        self.show_debug = debug

    def success(self, message: str) -> None:
        self.console.print(f"[bold green]✔[/bold green] {message}")

    def info(self, message: str) -> None:
        if not self.silent:
            self.console.print(f"[bold blue]ℹ[/bold blue] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[bold yellow]⚠[/bold yellow] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]✖ {escape(message)}[/bold red]")

    def debug(self, message: str) -> None:
        if self.show_debug:
            self.console.print(f"[dim]{escape(message)}[/dim]")


class TaskRenderer:
    """Pipeline listener that draws one line per step."""

    def __init__(self, console: Optional[Console] = None, *, verbose: bool = False) -> None:
        self.console = console or Console(highlight=False)
        self.verbose = verbose

    def on_step_start(self, title: str) -> None:
        if self.verbose:
            self.console.print(f"[cyan]…[/cyan] {escape(title)}")

    def on_step_output(self, title: str, output: str) -> None:
        self.console.print(f"  [dim]→ {escape(output)}[/dim]")

    def on_step_finish(self, result: StepResult) -> None:
        title = escape(result.title)
        if result.status is StepStatus.COMPLETED:
            self.console.print(f"[green]✔[/green] {title}")
        elif result.status is StepStatus.SKIPPED:
            reason = f" [dim]\\[skipped: {escape(result.message)}][/dim]" if result.message else " [dim]\\[skipped][/dim]"
            self.console.print(f"[yellow]↓[/yellow] {title}{reason}")
        elif self.verbose:
            self.console.print(f"[dim]- {title} (disabled)[/dim]")

    def on_step_error(self, title: str, error: BaseException) -> None:
        self.console.print(f"[red]✖[/red] {escape(title)}")


def build_renderer(silent: bool, debug: bool, console: Optional[Console] = None) -> Optional[TaskRenderer]:
    """Return the progress renderer matching the ``--silent`` / ``--debug`` flags."""

    if silent:
        return None
    return TaskRenderer(console, verbose=debug)


__all__ = ["ConsoleReporter", "TaskRenderer", "build_renderer"]
