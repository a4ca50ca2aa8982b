"""Entry point for the `codeshare` command group."""

from __future__ import annotations

import click

from codeshare.cli.commands.posts import posts_cmd
from codeshare.cli.commands.users import users_cmd


@click.group()
@click.version_option(package_name="codeshare")
@click.option(
    "--api-url",
    default="http://localhost:8000",
    envvar="CODESHARE_API_URL",
    show_default=True,
    help="Base URL of the codeshare API server",
)
@click.option(
    "--token",
    default=None,
    envvar="CODESHARE_TOKEN",
    help="Access token sent as a bearer credential (optional)",
)
@click.pass_context
def cli(ctx: click.Context, api_url: str, token: str | None) -> None:
    """Share code snippets from the terminal.

    \b
    Quick start:
      codeshare serve --reload
      codeshare posts list
      codeshare posts show <post-id>
      codeshare users show <user-id>

    API docs: http://localhost:8000/docs
    """
    ctx.ensure_object(dict)
    ctx.obj["api_url"] = api_url.rstrip("/")
    ctx.obj["headers"] = {"Authorization": f"Bearer {token}"} if token else {}


cli.add_command(posts_cmd)
cli.add_command(users_cmd)


@cli.command("serve")
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind host")
@click.option("--port", default=8000, show_default=True, help="Bind port")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload (dev mode)")
def serve(host: str, port: int, reload: bool) -> None:
    """Start the codeshare API server."""
    import uvicorn

    uvicorn.run(
        "codeshare.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    cli()
