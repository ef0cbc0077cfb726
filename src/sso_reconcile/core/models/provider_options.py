from pydantic import BaseModel, Field


class AutoLinkOptions(BaseModel):
    """How external accounts are linked to local users."""

    auto_link_external_account: bool = Field(
        default=True, description="Create and link a local user on first login"
    )
    default_user_groups: list[str] = Field(
        default_factory=list,
        description="Groups the host assigns itself; the reconciler assigns groups from claims",
    )
    default_culture: str | None = Field(
        default=None, description="Culture of auto-linked users, host default when None"
    )
    allow_manual_linking: bool = Field(
        default=False, description="Allow users to link/unlink the provider manually"
    )


class ExternalLoginProviderOptions(BaseModel):
    """Options the host applies to the login screen for this provider."""

    scheme: str
    auto_link: AutoLinkOptions = Field(default_factory=AutoLinkOptions)
    deny_local_login: bool = False
    auto_redirect_login_to_external_provider: bool = False
