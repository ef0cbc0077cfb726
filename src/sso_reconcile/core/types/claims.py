from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.sso_reconcile.runtime.config.config_data import IDENTITY_NAME_CLAIM


class Claim(BaseModel):
    """A single name/value assertion issued by the identity provider."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class ClaimSet(BaseModel):
    """Verified claims of one external login, in the order they were issued.

    Claim names are not unique: a user in several directory groups carries one
    ``groups`` claim per membership.
    """

    model_config = ConfigDict(frozen=True)

    claims: tuple[Claim, ...] = ()
    identity_name_claim: str = IDENTITY_NAME_CLAIM

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[tuple[str, str]],
        identity_name_claim: str = IDENTITY_NAME_CLAIM,
    ) -> "ClaimSet":
        return cls(
            claims=tuple(Claim(name=name, value=value) for name, value in pairs),
            identity_name_claim=identity_name_claim,
        )

    @classmethod
    def from_mapping(
        cls,
        payload: Mapping[str, Any],
        identity_name_claim: str = IDENTITY_NAME_CLAIM,
    ) -> "ClaimSet":
        """Build a claim set from a decoded token payload.

        List values become repeated claims; ``None`` values are dropped and
        other scalars are converted to strings.
        """
        pairs: list[tuple[str, str]] = []
        for name, value in payload.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                pairs.extend((name, str(item)) for item in value if item is not None)
            else:
                pairs.append((name, str(value)))
        return cls.from_pairs(pairs, identity_name_claim=identity_name_claim)

    def find_first(self, name: str) -> str | None:
        for claim in self.claims:
            if claim.name == name:
                return claim.value
        return None

    def find_all(self, name: str) -> list[str]:
        return [claim.value for claim in self.claims if claim.name == name]

    def has(self, name: str) -> bool:
        return any(claim.name == name for claim in self.claims)

    def values(self) -> list[str]:
        return [claim.value for claim in self.claims]

    @property
    def identity_name(self) -> str | None:
        """The provider's identity name, used as the local login identifier."""
        return self.find_first(self.identity_name_claim)


class AuthenticationToken(BaseModel):
    """A token the authentication handler stored alongside the login."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class ExternalLoginInfo(BaseModel):
    """Result of a successful external authentication handed to the reconciler."""

    model_config = ConfigDict(frozen=True)

    login_provider: str = Field(description="Scheme that authenticated the user")
    provider_key: str | None = Field(
        default=None, description="Provider-side unique key of the user"
    )
    claims: ClaimSet = Field(default_factory=ClaimSet)
    authentication_tokens: tuple[AuthenticationToken, ...] = ()

    def find_token(self, name: str) -> str | None:
        for token in self.authentication_tokens:
            if token.name == name:
                return token.value
        return None

    @property
    def access_token(self) -> str | None:
        return self.find_token("access_token")
