"""CLI commands for user profiles."""

from __future__ import annotations

import click

from codeshare.cli.output import console, posts_table, user_detail


@click.group("users")
def users_cmd() -> None:
    """Look up user profiles."""


@users_cmd.command("show")
@click.argument("user_id")
@click.option("--posts/--no-posts", default=True, show_default=True, help="Also list their posts")
@click.pass_context
def users_show(ctx: click.Context, user_id: str, posts: bool) -> None:
    """Show a user's profile and latest posts."""
    import httpx

    api_url: str = ctx.obj["api_url"]
    headers = ctx.obj["headers"]
    try:
        r = httpx.get(f"{api_url}/api/v1/users/{user_id}", headers=headers, timeout=10)
        r.raise_for_status()
        user_detail(r.json())

        if posts:
            rp = httpx.get(f"{api_url}/api/v1/users/{user_id}/posts", headers=headers, timeout=10)
            rp.raise_for_status()
            console.print(posts_table(rp.json()["items"], title="Latest posts"))
    except httpx.ConnectError:
        console.print(f"[red]Cannot connect to API at {api_url}.[/red]")
        raise SystemExit(1)
    except httpx.HTTPStatusError as e:
        if e.response.status_code in (404, 422):
            console.print(f"[yellow]User {user_id!r} not found.[/yellow]")
        else:
            console.print(f"[red]Error {e.response.status_code}:[/red] {e.response.text}")
        raise SystemExit(1)
