"""Claims-based identity and principal models."""

from collections.abc import Iterable

from tollgate.domain.model.common import DomainModel
from tollgate.domain.value import ClaimTypes, IdentityKind, ValueObject


class Claim(ValueObject):
    """A typed fact about an identity."""

    type: str
    value: str


class ClaimsIdentity(DomainModel):
    """An identity (user, application or device) and its claims."""

    name: str
    kind: IdentityKind
    is_authenticated: bool = False
    authentication_type: str | None = None
    claims: tuple[Claim, ...] = ()

    def find_first(self, claim_type: str) -> Claim | None:
        """Return the first claim of the given type, if any."""
        return next((c for c in self.claims if c.type == claim_type), None)

    def find_all(self, claim_type: str) -> list[Claim]:
        """Return every claim of the given type."""
        return [c for c in self.claims if c.type == claim_type]

    @property
    def security_id(self) -> str | None:
        """Security identifier claim value."""
        claim = self.find_first(ClaimTypes.SECURITY_ID)
        return claim.value if claim else None

    @property
    def name_identifier(self) -> str | None:
        """Name identifier, falling back to the security identifier."""
        claim = self.find_first(ClaimTypes.NAME_IDENTIFIER)
        return claim.value if claim else self.security_id

    def as_authenticated(self, authentication_type: str) -> "ClaimsIdentity":
        """Copy of this identity marked as authenticated."""
        return self.model_copy(
            update={
                "is_authenticated": True,
                "authentication_type": authentication_type,
            }
        )

    def with_claims(self, claims: Iterable[Claim]) -> "ClaimsIdentity":
        """Copy of this identity with additional claims."""
        return self.model_copy(update={"claims": self.claims + tuple(claims)})


class ClaimsPrincipal(DomainModel):
    """One or more identities acting together.

    The first identity is the primary identity. A principal carrying
    more than one identity is composite (e.g. a user acting through an
    application on a device).
    """

    identities: tuple[ClaimsIdentity, ...]

    @classmethod
    def of(cls, *identities: ClaimsIdentity) -> "ClaimsPrincipal":
        return cls(identities=identities)

    @property
    def identity(self) -> ClaimsIdentity:
        return self.identities[0]

    @property
    def is_composite(self) -> bool:
        return len(self.identities) > 1

    @property
    def claims(self) -> list[Claim]:
        return [c for identity in self.identities for c in identity.claims]

    def find_first(self, claim_type: str) -> Claim | None:
        return next((c for c in self.claims if c.type == claim_type), None)

    def find_identity(self, kind: IdentityKind) -> ClaimsIdentity | None:
        """Return the first identity of the given kind."""
        return next((i for i in self.identities if i.kind == kind), None)

    def has_identity(self, identity: ClaimsIdentity) -> bool:
        return any(
            i.kind == identity.kind and i.name.lower() == identity.name.lower()
            for i in self.identities
        )

    def with_identity(self, identity: ClaimsIdentity) -> "ClaimsPrincipal":
        """Copy of this principal with an additional identity appended."""
        return ClaimsPrincipal(identities=self.identities + (identity,))

    def with_claims(self, claims: Iterable[Claim]) -> "ClaimsPrincipal":
        """Copy of this principal with claims added to the primary identity."""
        primary = self.identity.with_claims(claims)
        return ClaimsPrincipal(identities=(primary,) + self.identities[1:])
