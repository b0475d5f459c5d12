"""dynidp CLI entry point — `dynidp` command group."""

from __future__ import annotations

import asyncio

import click

from dynidp.cli.commands.providers import providers_cmd


@click.group()
@click.version_option(package_name="dynidp")
@click.option(
    "--api-url",
    default="http://localhost:5443",
    envvar="DYNIDP_API_URL",
    show_default=True,
    help="Base URL of the dynidp server",
)
@click.option(
    "--token",
    default="",
    envvar="DYNIDP_TOKEN",
    help="Admin bearer token (see `dynidp token`)",
)
@click.pass_context
def cli(ctx: click.Context, api_url: str, token: str) -> None:
    """dynidp — identity provider with runtime-managed external providers.

    \b
    Quick start:
      dynidp seed
      export DYNIDP_TOKEN=$(dynidp token)
      dynidp providers list
      dynidp serve

    API docs: http://localhost:5443/docs
    """
    ctx.ensure_object(dict)
    ctx.obj["api_url"] = api_url.rstrip("/")
    ctx.obj["token"] = token


cli.add_command(providers_cmd)


@cli.command("serve")
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind host")
@click.option("--port", default=5443, show_default=True, help="Bind port")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload (dev mode)")
def serve(host: str, port: int, reload: bool) -> None:
    """Start the dynidp API server."""
    import uvicorn

    uvicorn.run(
        "dynidp.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@cli.command("seed")
def seed() -> None:
    """Insert the sample OIDC/SAML providers (idempotent, run after migrations)."""
    from dynidp.cli.output import console
    from dynidp.core.database import close_engine, get_session_factory
    from dynidp.seed import seed_providers

    async def _run() -> list[str]:
        try:
            async with get_session_factory()() as session:
                return await seed_providers(session)
        finally:
            await close_engine()

    created = asyncio.run(_run())
    if created:
        console.print(f"[green]Seeded:[/green] {', '.join(created)}")
    else:
        console.print("[dim]Nothing to seed — all sample schemes exist.[/dim]")


@cli.command("token")
@click.option("--subject", default="admin", show_default=True, help="Token subject")
@click.option("--minutes", default=60, show_default=True, help="Lifetime in minutes")
def token(subject: str, minutes: int) -> None:
    """Print an admin bearer token for the provider API."""
    from dynidp.core.auth import create_access_token

    click.echo(create_access_token(subject, role="admin", expire_minutes=minutes))


if __name__ == "__main__":
    cli()
