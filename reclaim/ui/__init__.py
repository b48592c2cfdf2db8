"""reclaim UI - themed terminal output."""

from .console import ReclaimConsole, console
from .panels import space_summary_panel
from .theme import COLORS, PANEL_STYLES, RECLAIM_THEME, SYMBOLS

__all__ = [
    "console", "ReclaimConsole", "COLORS", "SYMBOLS", "RECLAIM_THEME", "PANEL_STYLES",
    "space_summary_panel",
]
