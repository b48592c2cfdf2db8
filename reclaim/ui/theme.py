"""
reclaim UI theme - color constants and styling definitions.
"""

from rich.style import Style
from rich.theme import Theme

COLORS = {
    "success": "#22c55e",
    "error": "#ef4444",
    "warning": "#eab308",
    "info": "#3b82f6",
    "command": "#06b6d4",
    "secondary": "#6b7280",
    "primary": "#ffffff",
    "panel_border": "#4b5563",
    "highlight": "#fbbf24",
    "muted": "#9ca3af",
}

SYMBOLS = {
    "success": "✓",
    "error": "✗",
    "warning": "⚠",
    "info": "●",
    "dry_run": "○",
}

RECLAIM_THEME = Theme({
    "success": Style(color=COLORS["success"], bold=True),
    "error": Style(color=COLORS["error"], bold=True),
    "warning": Style(color=COLORS["warning"], bold=True),
    "info": Style(color=COLORS["info"]),
    "command": Style(color=COLORS["command"], dim=True),
    "secondary": Style(color=COLORS["secondary"], dim=True),
    "primary": Style(color=COLORS["primary"]),
    "highlight": Style(color=COLORS["highlight"], bold=True),
    "muted": Style(color=COLORS["muted"]),
    "panel_border": Style(color=COLORS["panel_border"]),
})

PANEL_STYLES = {
    "default": {"border_style": "panel_border", "title_align": "left", "padding": (1, 2)},
    "success": {"border_style": "success", "title_align": "left", "padding": (1, 2)},
    "warning": {"border_style": "warning", "title_align": "left", "padding": (1, 2)},
}
