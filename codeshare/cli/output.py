"""Rich output helpers for post tables and detail views."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from rich.console import Console
from rich.syntax import Syntax
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


def posts_table(items: list[dict[str, Any]], title: str = "Posts") -> Table:
    table = Table(
        title=f"{title} ({len(items)})",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
        show_lines=False,
    )
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Language")
    table.add_column("Author")
    table.add_column("Likes", justify="right")
    table.add_column("Comments", justify="right")
    table.add_column("Liked", justify="center")
    table.add_column("Created", style="dim")

    for p in items:
        liked = Text("♥", style="red") if p.get("is_liked") else Text("—", style="dim")
        table.add_row(
            str(p.get("id", ""))[:8] + "…",
            p.get("title") or "—",
            p.get("language") or "—",
            (p.get("author") or {}).get("username") or "—",
            str(p.get("likes_count", 0)),
            str(p.get("comments_count", 0)),
            liked,
            fmt_date(p.get("created_at")),
        )
    return table


def post_detail(p: dict[str, Any]) -> None:
    """Print a single post with highlighted code."""
    console.rule(f"[bold cyan]{p.get('title') or p.get('id')}")

    fields = [
        ("ID", p.get("id")),
        ("Author", (p.get("author") or {}).get("username")),
        ("Language", p.get("language")),
        ("Likes", str(p.get("likes_count", 0))),
        ("Comments", str(p.get("comments_count", 0))),
        ("Image", p.get("image")),
        ("Created", fmt_date(p.get("created_at"))),
    ]
    for label, value in fields:
        if value:
            console.print(f"  [dim]{label:<10}[/dim] {value}")

    if p.get("description"):
        console.print()
        console.print(p["description"])

    console.print()
    console.print(Syntax(p.get("code", ""), p.get("language") or "text", line_numbers=True))

    if p.get("ai_explanation"):
        console.rule("[dim]AI explanation")
        console.print(p["ai_explanation"])


def user_detail(u: dict[str, Any]) -> None:
    console.rule(f"[bold cyan]{u.get('username') or u.get('id')}")
    fields = [
        ("ID", u.get("id")),
        ("Email", u.get("email")),
        ("Provider", u.get("auth_provider")),
        ("Bio", u.get("bio")),
        ("Joined", fmt_date(u.get("created_at"))),
    ]
    for label, value in fields:
        if value:
            console.print(f"  [dim]{label:<10}[/dim] {value}")
