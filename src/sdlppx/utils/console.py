# Copyright 2025 KTTC AI (https://github.com/kttc-ai)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Console utilities for rich terminal output."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sdlppx.core.runner import RunReport, StepStatus

# Global console instance shared across the CLI
console = Console()

_STATUS_STYLES = {
    StepStatus.OK: "[green]✓ ok[/green]",
    StepStatus.SKIPPED: "[dim]- skipped[/dim]",
    StepStatus.FAILED: "[red]✗ failed[/red]",
}


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_info(message: str) -> None:
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_run_report(report: RunReport) -> None:
    """Print the per-step outcome of a conversion run.

    Args:
        report: Report returned by the conversion runner
    """
    table = Table(title=f"Package: {report.package.name}", show_lines=False)
    table.add_column("Step", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Details", style="dim")

    for step in report.steps:
        details = step.error or ", ".join(str(path) for path in step.outputs)
        table.add_row(step.name.value, _STATUS_STYLES[step.status], escape(details))

    console.print(table)


__all__ = [
    "console",
    "print_success",
    "print_error",
    "print_warning",
    "print_info",
    "print_run_report",
]
