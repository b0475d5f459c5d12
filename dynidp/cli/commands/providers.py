"""CLI commands for browsing dynamic providers through the admin API."""

from __future__ import annotations

import click

from dynidp.cli.output import console, providers_table

_ENDPOINTS = {
    "enabled": "/api/providers/all",
    "oidc": "/api/providers/oidc",
    "saml": "/api/providers/saml",
}


@click.group("providers")
def providers_cmd() -> None:
    """Inspect configured external identity providers."""


@providers_cmd.command("list")
@click.option(
    "--kind",
    type=click.Choice(sorted(_ENDPOINTS)),
    default="enabled",
    show_default=True,
    help="Which providers to list",
)
@click.pass_context
def providers_list(ctx: click.Context, kind: str) -> None:
    """List providers (enabled across kinds by default)."""
    import httpx

    api_url: str = ctx.obj["api_url"]
    headers = {"Authorization": f"Bearer {ctx.obj['token']}"} if ctx.obj["token"] else {}
    try:
        r = httpx.get(f"{api_url}{_ENDPOINTS[kind]}", headers=headers, timeout=10)
        r.raise_for_status()
        console.print(providers_table(r.json(), title=f"Providers — {kind}"))
    except httpx.ConnectError:
        console.print(
            f"[red]Cannot connect to API at {api_url}.[/red] "
            "Is the server running? (dynidp serve)"
        )
        raise SystemExit(1)
    except httpx.HTTPStatusError as e:
        if e.response.status_code in (401, 403):
            console.print("[red]Not authorized.[/red] Pass --token or set DYNIDP_TOKEN.")
        else:
            console.print(f"[red]Error {e.response.status_code}:[/red] {e.response.text}")
        raise SystemExit(1)
