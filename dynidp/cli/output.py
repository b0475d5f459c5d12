"""Rich output helpers for the CLI."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

console = Console()


def fmt_date(iso: str | None) -> str:
    if not iso:
        return "—"
    try:
        dt = datetime.fromisoformat(iso.replace("Z", "+00:00"))
        return dt.strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return iso


def _endpoint(p: dict[str, Any]) -> str:
    if p.get("provider_type") == "SAML":
        return p.get("idp_single_sign_on_url") or "—"
    return p.get("authority") or "—"


def providers_table(items: list[dict[str, Any]], title: str = "Providers") -> Table:
    table = Table(
        title=f"{title} ({len(items)})",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
        show_lines=False,
    )
    table.add_column("Scheme", style="bold", no_wrap=True)
    table.add_column("Display name")
    table.add_column("Type", justify="center")
    table.add_column("Authority / SSO URL")
    table.add_column("Enabled", justify="center")
    table.add_column("Updated", style="dim")

    for p in items:
        enabled_text = Text("✓", style="green") if p.get("enabled") else Text("✗", style="dim")
        table.add_row(
            p.get("scheme", ""),
            p.get("display_name", ""),
            p.get("provider_type", ""),
            _endpoint(p),
            enabled_text,
            fmt_date(p.get("updated") or p.get("created")),
        )
    return table
