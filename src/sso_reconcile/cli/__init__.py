"""Main CLI application module."""

import typer

from src.sso_reconcile.runtime.logging_setup import configure_logging

from .reconcile_commands import avatar_app, config_app, reconcile_app

app = typer.Typer(
    help="🔐 SSO Reconcile CLI - Inspect how external logins map to local users",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(reconcile_app, name="claims")
app.add_typer(avatar_app, name="avatar")
app.add_typer(config_app, name="config")


def main() -> None:
    """Main entry point for the CLI."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
