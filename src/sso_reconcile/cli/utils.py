"""Shared utilities for CLI commands."""

import json
from pathlib import Path

import typer
from rich.console import Console

from src.sso_reconcile.core.types.claims import ClaimSet
from src.sso_reconcile.runtime.config.config_data import ConfigData

console = Console()


def load_claims(claims_file: Path, config: ConfigData) -> ClaimSet:
    """Load a decoded token payload (JSON object) as a claim set."""
    try:
        payload = json.loads(claims_file.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]❌ Unable to read claims from {claims_file}: {e}[/red]")
        raise typer.Exit(1) from e

    if not isinstance(payload, dict):
        console.print("[red]❌ Claims file must contain a JSON object[/red]")
        raise typer.Exit(1)

    return ClaimSet.from_mapping(payload, identity_name_claim=config.sso.identity_name_claim)
