"""
Rendering functions for gitscm output.

This module handles all pretty-printing and table formatting.
Commands produce data; this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Any, Dict, Iterable, Optional

from .domain import ChangeEntry, GitWebBrowser, PollResult
from .services import BuildCheckout

console = Console()


def _short(revision: Optional[str]) -> str:
    return revision[:12] if revision else "-"


def render_changes_table(
    changes: Iterable[ChangeEntry],
    browser: Optional[GitWebBrowser] = None,
    title: Optional[str] = None
) -> None:
    """
    Render a change set as a pretty table.

    Args:
        changes: Change entries in log order
        browser: Optional repository browser for commit links
        title: Optional table title
    """
    changes = list(changes)
    if not changes:
        console.print("[yellow]No changes.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Revision", style="cyan", no_wrap=True)
    table.add_column("Committer", style="green")
    table.add_column("Message")
    table.add_column("Paths", justify="right")

    for entry in changes:
        revision = _short(entry.id)
        if browser and entry.id:
            revision = f"[link={browser.changeset_link(entry.id)}]{revision}[/link]"
        table.add_row(
            revision,
            entry.author or "-",
            entry.summary,
            str(len(entry.affected_paths)),
        )

    console.print(table)


def render_poll_result(result: PollResult) -> None:
    if result.changes:
        console.print(f"[green]Changes found[/green] in [bold]{result.project}[/bold]: "
                      f"{_short(result.last_built)} → {_short(result.tip)}")
    else:
        reason = f" ({result.reason})" if result.reason else ""
        console.print(f"[dim]No changes[/dim] in [bold]{result.project}[/bold]{reason}")


def render_checkout(checkout: BuildCheckout, browser: Optional[GitWebBrowser] = None) -> None:
    result = checkout.result
    if not result.success:
        console.print(f"[red]✗[/red] {result.reason}: {result.branch} onto {result.merge_target}")
        return

    target = result.branch
    if result.merged:
        target = f"{result.branch} merged onto {result.merge_target}"
    console.print(f"[green]✓[/green] Checked out {target} at {_short(checkout.revision)}")
    if checkout.previous_revision:
        render_changes_table(checkout.changes, browser,
                             title=f"Changes since {_short(checkout.previous_revision)}")


def render_key_values(data: Dict[str, Any], title: Optional[str] = None) -> None:
    table = Table(title=title, box=box.SIMPLE, show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(str(key), "-" if value is None else str(value))
    console.print(table)
