from src.sso_reconcile.core.models.outcome import StepOutcome
from src.sso_reconcile.core.types.claims import ClaimSet
from src.sso_reconcile.entities.core.user.entity import LocalUser


def resolve_display_name(
    claims: ClaimSet, fallback: str, display_name_claim: str = "name"
) -> str:
    """Return the display name claim verbatim, or ``fallback`` when it is blank."""
    display_name = claims.find_first(display_name_claim)
    if display_name is not None and display_name.strip():
        return display_name
    return fallback


def resolve_login_identifier(
    claims: ClaimSet, identity_name_claim: str | None = None
) -> str | None:
    """Return the provider identity name verbatim; never invent one.

    ``identity_name_claim`` overrides the claim type the claim set was built with.
    """
    if identity_name_claim is None:
        return claims.identity_name
    return claims.find_first(identity_name_claim)


def apply_identity(
    user: LocalUser,
    claims: ClaimSet,
    display_name_claim: str = "name",
    identity_name_claim: str | None = None,
) -> StepOutcome:
    login = resolve_login_identifier(claims, identity_name_claim)
    if login is None:
        return StepOutcome.skipped("identity", "no identity name claim")

    user.name = resolve_display_name(claims, fallback=login, display_name_claim=display_name_claim)
    user.user_name = login
    return StepOutcome.ok("identity")
