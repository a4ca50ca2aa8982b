"""CLI commands for browsing posts."""

from __future__ import annotations

import click

from codeshare.cli.output import console, post_detail, posts_table


@click.group("posts")
def posts_cmd() -> None:
    """Browse shared code snippets."""


@posts_cmd.command("list")
@click.option("--page", default=1, show_default=True, help="Page number")
@click.option("--limit", default=10, show_default=True, help="Posts per page")
@click.option("--language", default="", help="Only show posts in this language")
@click.pass_context
def posts_list(ctx: click.Context, page: int, limit: int, language: str) -> None:
    """List the newest posts."""
    import httpx

    api_url: str = ctx.obj["api_url"]
    try:
        r = httpx.get(
            f"{api_url}/api/v1/posts",
            params={"page": page, "limit": limit},
            headers=ctx.obj["headers"],
            timeout=15,
        )
        r.raise_for_status()
        data = r.json()
        items = data["items"]

        if language:
            items = [p for p in items if p.get("language") == language.lower()]

        console.print(posts_table(items))
        pagination = data["pagination"]
        console.print(
            f"[dim]Page {pagination['page']} of {pagination['pages'] or 1}, "
            f"{pagination['total']} posts in total.[/dim]"
        )
    except httpx.ConnectError:
        console.print(f"[red]Cannot connect to API at {api_url}.[/red]")
        raise SystemExit(1)
    except httpx.HTTPStatusError as e:
        console.print(f"[red]Error {e.response.status_code}:[/red] {e.response.text}")
        raise SystemExit(1)


@posts_cmd.command("show")
@click.argument("post_id")
@click.pass_context
def posts_show(ctx: click.Context, post_id: str) -> None:
    """Show a post with its code."""
    import httpx

    api_url: str = ctx.obj["api_url"]
    try:
        r = httpx.get(
            f"{api_url}/api/v1/posts/{post_id}", headers=ctx.obj["headers"], timeout=10
        )
        r.raise_for_status()
        post_detail(r.json())
    except httpx.ConnectError:
        console.print(f"[red]Cannot connect to API at {api_url}.[/red]")
        raise SystemExit(1)
    except httpx.HTTPStatusError as e:
        if e.response.status_code in (404, 422):
            console.print(f"[yellow]Post {post_id!r} not found.[/yellow]")
        else:
            console.print(f"[red]Error {e.response.status_code}:[/red] {e.response.text}")
        raise SystemExit(1)
