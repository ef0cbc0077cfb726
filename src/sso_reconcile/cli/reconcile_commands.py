"""Reconciliation diagnostics commands."""

import asyncio
from pathlib import Path

import typer
from rich.panel import Panel
from rich.table import Table

from src.sso_reconcile.core.services import (
    ExternalLoginReconciler,
    avatar_path_for,
    create_graph_client,
    resolve_groups,
)
from src.sso_reconcile.core.services.identity.identity_resolver import (
    resolve_display_name,
    resolve_login_identifier,
)
from src.sso_reconcile.core.storage import InMemoryAccountStore, LocalFileContentStore
from src.sso_reconcile.core.types.claims import AuthenticationToken, ExternalLoginInfo
from src.sso_reconcile.entities.core.user.entity import LocalUser
from src.sso_reconcile.runtime.context import get_config

from .utils import console, load_claims

reconcile_app = typer.Typer(help="🪪 Resolve groups and identity from a claims file")
avatar_app = typer.Typer(help="🖼️ Profile picture commands")
config_app = typer.Typer(help="⚙️ Configuration commands")


@reconcile_app.command("groups")
def show_groups(
    claims_file: Path = typer.Argument(..., help="JSON file with the decoded token payload"),
) -> None:
    """
    👥 Show the local groups a claim set resolves to.
    """
    config = get_config()
    claims = load_claims(claims_file, config)
    groups = resolve_groups(claims, config.sso.group_lookup, config.sso.default_groups)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Group alias", style="cyan")
    table.add_column("Source", style="green")

    defaults = set(config.sso.default_groups)
    for alias in sorted(groups):
        table.add_row(alias, "default" if alias in defaults else "claims")

    console.print(table)
    if not groups:
        console.print("[yellow]No groups resolved[/yellow]")


@reconcile_app.command("identity")
def show_identity(
    claims_file: Path = typer.Argument(..., help="JSON file with the decoded token payload"),
) -> None:
    """
    🪪 Show the login identifier and display name a claim set resolves to.
    """
    config = get_config()
    claims = load_claims(claims_file, config)
    login = resolve_login_identifier(claims, config.sso.identity_name_claim)

    if login is None:
        console.print(
            f"[yellow]No '{config.sso.identity_name_claim}' claim; identity would not be assigned[/yellow]"
        )
        raise typer.Exit(1)

    display_name = resolve_display_name(claims, fallback=login, display_name_claim=config.sso.display_name_claim)
    console.print(f"[cyan]Login:[/cyan] {login}")
    console.print(f"[cyan]Display name:[/cyan] {display_name}")


@avatar_app.command("path")
def show_avatar_path(
    etag: str = typer.Argument(..., help="ETag header value, quotes included"),
) -> None:
    """
    #️⃣ Show the media path a photo version is stored under.
    """
    config = get_config()
    console.print(avatar_path_for(etag, config.avatar.path_prefix, config.avatar.hash_algorithm))


@avatar_app.command("sync")
def sync_avatar(
    claims_file: Path = typer.Argument(..., help="JSON file with the decoded token payload"),
    access_token: str = typer.Option(..., "--access-token", envvar="GRAPH_ACCESS_TOKEN", help="Graph bearer token"),
    media_root: Path | None = typer.Option(None, "--media-root", help="Media folder (defaults to config)"),
) -> None:
    """
    🔄 Run a login reconciliation against a throwaway user and write the picture.
    """
    config = get_config()
    claims = load_claims(claims_file, config)
    login_info = ExternalLoginInfo(
        login_provider=config.sso.scheme_id,
        claims=claims,
        authentication_tokens=(AuthenticationToken(name="access_token", value=access_token),),
    )
    user = LocalUser(user_name=resolve_login_identifier(claims, config.sso.identity_name_claim))
    content_store = LocalFileContentStore(media_root or config.media.root)

    async def _run():
        async with create_graph_client(config) as client:
            reconciler = ExternalLoginReconciler.from_config(
                config, InMemoryAccountStore(), content_store, client
            )
            return await reconciler.reconcile_login(config.sso.scheme_id, user, login_info)

    report = asyncio.run(_run())

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Step", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Detail", style="yellow")
    for outcome in report.outcomes:
        table.add_row(outcome.step, outcome.status, outcome.reason or outcome.error or "")
    console.print(table)

    if user.avatar:
        console.print(f"[green]✅ Avatar stored at {content_store.full_path(user.avatar)}[/green]")
    if report.failures:
        raise typer.Exit(1)


@config_app.command("show")
def show_config() -> None:
    """
    📄 Show the effective SSO configuration.
    """
    sso = get_config().sso
    console.print(
        Panel.fit(
            f"[bold cyan]Scheme: {sso.scheme_id}[/bold cyan]",
            border_style="cyan",
        )
    )

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Set groups on login", str(sso.set_groups_on_login))
    table.add_row("Group sync policy", sso.group_sync_policy)
    table.add_row("Local-only groups", ", ".join(sso.local_only_groups) or "-")
    table.add_row("Default groups", ", ".join(sso.default_groups) or "-")
    table.add_row("Sync user avatar", str(sso.sync_user_avatar))
    table.add_row("Deny local login", str(sso.deny_local_login))
    table.add_row("Auto redirect", str(sso.auto_redirect_login_to_external_provider))
    table.add_row("Graph endpoint", sso.microsoft_graph_endpoint)
    console.print(table)

    if sso.group_lookup:
        lookup = Table(show_header=True, header_style="bold magenta")
        lookup.add_column("Claim value", style="cyan")
        lookup.add_column("Group aliases", style="green")
        for claim_value, aliases in sso.group_lookup.items():
            lookup.add_row(claim_value, aliases)
        console.print(lookup)
