"""Console styling for solcollect output."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

from solcollect.core.logs import LogEntry

SOLCOLLECT_THEME = Theme(
    {
        "solcollect.info.border": "#38BDF8",
        "solcollect.info.text": "#E6FFFA",
        "solcollect.info.header": "bold #38BDF8",
        "solcollect.success.border": "#14F195",
        "solcollect.success.text": "#E6FFFA",
        "solcollect.success.header": "bold #14F195",
        "solcollect.warning.border": "#FBBF24",
        "solcollect.warning.text": "#FEF3C7",
        "solcollect.warning.header": "bold #FBBF24",
        "solcollect.error.border": "#FB7185",
        "solcollect.error.text": "#FEE2E2",
        "solcollect.error.header": "bold #FB7185",
        "solcollect.text.secondary": "#94A3B8",
        # Progress line categories
        "solcollect.category.upload": "bold #A855F7",
        "solcollect.category.ledger": "bold #14F195",
        "solcollect.category.wallet": "bold #38BDF8",
        "solcollect.category.system": "bold #94A3B8",
    }
)

PANEL_STYLES = {
    "info": ("ℹ", "Info"),
    "success": ("✓", "Success"),
    "warning": ("⚠", "Warning"),
    "error": ("✗", "Error"),
}


def themed_console(**kwargs: object) -> Console:
    """Return a Console configured with the solcollect theme."""
    return Console(theme=SOLCOLLECT_THEME, **kwargs)


def format_progress(entry: LogEntry) -> Text:
    """Render a workflow log entry as a single progress line."""
    line = Text()
    line.append(f"[{entry.category}] ", style=f"solcollect.category.{entry.category}")
    style = "solcollect.text.secondary" if entry.severity == "info" else f"solcollect.{entry.severity}.text"
    line.append(entry.message, style=style)
    return line


def create_semantic_panel(message: str, *, panel_type: str = "info", title: str | None = None) -> Panel:
    """Create a panel for info, success, warning, or error messages."""
    icon, default_title = PANEL_STYLES.get(panel_type, PANEL_STYLES["info"])
    if panel_type not in PANEL_STYLES:
        panel_type = "info"
    return Panel(
        Text(message, style=f"solcollect.{panel_type}.text"),
        title=f"[solcollect.{panel_type}.header]{icon} {title or default_title}[/]",
        title_align="left",
        border_style=f"solcollect.{panel_type}.border",
        box=box.ROUNDED,
        padding=(0, 1),
        expand=False,
    )


__all__ = ["SOLCOLLECT_THEME", "create_semantic_panel", "format_progress", "themed_console"]
