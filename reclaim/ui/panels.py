"""reclaim panels - end-of-run summary."""

from typing import Optional

from rich.panel import Panel
from rich.table import Table

from .console import console
from .theme import PANEL_STYLES, SYMBOLS


def space_summary_panel(start_mb: int, end_mb: int, dry_run: bool, log_path: Optional[str] = None) -> None:
    """Render free space before and after the run."""
    freed = end_mb - start_mb
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="muted")
    table.add_column("Value", justify="right")
    table.add_row("Free at start", f"{start_mb} MB")
    table.add_row("Free at end", f"{end_mb} MB")
    table.add_row("Freed", f"[highlight]{freed} MB[/]")
    if log_path:
        table.add_row("Log", f"[secondary]{log_path}[/]")

    if dry_run:
        title = f"{SYMBOLS['dry_run']} Dry run - no changes made"
        style = PANEL_STYLES["warning"]
    else:
        title = f"{SYMBOLS['success']} Cleanup finished"
        style = PANEL_STYLES["success"]
    console.print(Panel(table, title=f"─ {title} ", **style))
